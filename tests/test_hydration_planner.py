"""
Tests for hydration_planner.py - (Route, Snapshot) -> Commands.

These tests verify:
1. Fetch eligibility helpers (needs_fetch / needs_project_fetch)
2. Auth-driven planning (unknown, unauthed, authed)
3. Config, org and member route plans, including deferral and denial
4. Properties: determinism and no command targeting an in-flight resource
"""

from dataclasses import replace

import pytest

from scrumnav.runtime.hydration_planner import (
    commands_targeting,
    needs_fetch,
    needs_project_fetch,
    plan,
)
from scrumnav.runtime.snapshot_reducer import begin_requests
from scrumnav.runtime.types import (
    MEMBER_POOL_ROUTE,
    RESOURCE_FIELDS,
    AdminSection,
    AuthState,
    Command,
    CommandKind,
    MemberSection,
    MemberView,
    Project,
    ResourceState,
    Role,
    Route,
    RouteKind,
    Snapshot,
)


def kinds(commands):
    return [c.kind for c in commands]


# =============================================================================
# Fetch eligibility
# =============================================================================


class TestNeedsFetch:
    """Tests for needs_fetch() and needs_project_fetch()."""

    def test_needs_fetch(self) -> None:
        assert needs_fetch(ResourceState.NOT_ASKED)
        assert needs_fetch(ResourceState.FAILED)
        assert not needs_fetch(ResourceState.LOADING)
        assert not needs_fetch(ResourceState.LOADED)

    @pytest.mark.parametrize(
        "state, cached, target, expected",
        [
            (ResourceState.LOADING, 1, 1, False),
            (ResourceState.LOADING, None, 2, False),
            (ResourceState.LOADED, 1, 1, False),
            (ResourceState.LOADED, 1, 2, True),
            (ResourceState.NOT_ASKED, None, 1, True),
            (ResourceState.FAILED, 1, 1, True),
            (ResourceState.NOT_ASKED, None, None, False),
            (ResourceState.LOADED, 1, None, False),
        ],
    )
    def test_needs_project_fetch(self, state, cached, target, expected) -> None:
        assert needs_project_fetch(state, cached, target) is expected


# =============================================================================
# Auth-driven planning
# =============================================================================


class TestAuthPlanning:
    """Tests for planning before and without a session."""

    @pytest.mark.parametrize(
        "route",
        [
            Route.login(),
            Route.config(AdminSection.MEMBERS, 1),
            Route.org(AdminSection.INVITES),
            MEMBER_POOL_ROUTE,
        ],
    )
    def test_unknown_auth_probes_identity(self, route, unknown_snapshot) -> None:
        assert plan(route, unknown_snapshot) == [Command.fetch(CommandKind.FETCH_ME)]

    def test_identity_probe_not_repeated_while_loading(self, unknown_snapshot) -> None:
        snapshot = replace(unknown_snapshot, me=ResourceState.LOADING)
        assert plan(MEMBER_POOL_ROUTE, snapshot) == []

    @pytest.mark.parametrize(
        "auth",
        [AuthState.unknown(), AuthState.unauthed(), AuthState.authed(Role.ADMIN)],
    )
    def test_token_routes_plan_nothing(self, auth) -> None:
        snapshot = Snapshot(auth=auth)
        assert plan(Route.accept_invite("abc"), snapshot) == []
        assert plan(Route.reset_password("abc"), snapshot) == []

    def test_unauthed_protected_route_redirects_to_login(self) -> None:
        snapshot = Snapshot(auth=AuthState.unauthed(), me=ResourceState.FAILED)

        assert plan(MEMBER_POOL_ROUTE, snapshot) == [Command.redirect(Route.login())]
        assert plan(Route.org(AdminSection.INVITES), snapshot) == [Command.redirect(Route.login())]

    def test_unauthed_login_plans_nothing(self) -> None:
        snapshot = Snapshot(auth=AuthState.unauthed())
        assert plan(Route.login(), snapshot) == []

    def test_authed_login_redirects_to_pool(self, member_snapshot) -> None:
        assert plan(Route.login(), member_snapshot) == [Command.redirect(MEMBER_POOL_ROUTE)]


# =============================================================================
# Config route
# =============================================================================


class TestConfigPlanning:
    """Tests for the config area plans."""

    def test_member_project_scoped_defers_until_projects_load(self, member_snapshot) -> None:
        """Manager status is unknown: only the project list is requested."""
        commands = plan(Route.config(AdminSection.MEMBERS, 1), member_snapshot)
        assert commands == [Command.fetch(CommandKind.FETCH_PROJECTS)]

    def test_deferral_while_projects_loading_plans_nothing(self, member_snapshot) -> None:
        snapshot = replace(member_snapshot, projects=ResourceState.LOADING)
        assert plan(Route.config(AdminSection.MEMBERS, 1), snapshot) == []

    def test_manager_of_selected_project(self, manager_snapshot) -> None:
        commands = plan(Route.config(AdminSection.MEMBERS, 1), manager_snapshot)

        assert commands == [
            Command.fetch(CommandKind.FETCH_CAPABILITIES),
            Command.fetch(CommandKind.FETCH_ME_METRICS),
            Command.fetch(CommandKind.FETCH_WORK_SESSIONS),
            Command.fetch(CommandKind.FETCH_MEMBERS, 1),
        ]

    def test_non_manager_of_selected_project_is_redirected(self, manager_snapshot) -> None:
        commands = plan(Route.config(AdminSection.MEMBERS, 2), manager_snapshot)
        assert commands == [Command.redirect(MEMBER_POOL_ROUTE)]

    def test_project_outside_visible_list_is_redirected(self, manager_snapshot) -> None:
        """Managing some project does not open a project the user cannot see."""
        commands = plan(Route.config(AdminSection.MEMBERS, 99), manager_snapshot)
        assert commands == [Command.redirect(MEMBER_POOL_ROUTE)]

    def test_unlisted_project_denied_with_single_managed_project(self) -> None:
        snapshot = Snapshot(
            auth=AuthState.authed(Role.MEMBER),
            me=ResourceState.LOADED,
            projects=ResourceState.LOADED,
            project_list=(Project(1, "A", "manager"),),
            is_any_project_manager=True,
        )

        commands = plan(Route.config(AdminSection.MEMBERS, 99), snapshot)

        assert commands == [Command.redirect(MEMBER_POOL_ROUTE)]
        assert commands_targeting(commands, "members") == []

    def test_manager_flag_opens_section_without_project(self) -> None:
        """Without a selected project, the snapshot's manager flag decides."""
        snapshot = Snapshot(
            auth=AuthState.authed(Role.MEMBER),
            me=ResourceState.LOADED,
            projects=ResourceState.LOADED,
            is_any_project_manager=True,
        )

        commands = plan(Route.config(AdminSection.MEMBERS, None), snapshot)

        assert kinds(commands) == [
            CommandKind.FETCH_CAPABILITIES,
            CommandKind.FETCH_ME_METRICS,
            CommandKind.FETCH_WORK_SESSIONS,
        ]

    def test_without_manager_flag_section_is_denied(self, manager_snapshot) -> None:
        snapshot = replace(manager_snapshot, is_any_project_manager=False)

        commands = plan(Route.config(AdminSection.WORKFLOWS, None), snapshot)

        assert commands == [Command.redirect(MEMBER_POOL_ROUTE)]

    def test_member_org_level_section_denied(self, member_snapshot) -> None:
        commands = plan(Route.config(AdminSection.INVITES), member_snapshot)
        assert commands == [Command.redirect(MEMBER_POOL_ROUTE)]

    def test_admin_without_project_skips_scoped_fetch(self, admin_snapshot) -> None:
        commands = plan(Route.config(AdminSection.MEMBERS, None), admin_snapshot)

        assert kinds(commands) == [
            CommandKind.FETCH_INVITE_LINKS,
            CommandKind.FETCH_CAPABILITIES,
            CommandKind.FETCH_ME_METRICS,
            CommandKind.FETCH_WORK_SESSIONS,
        ]

    def test_scoped_cache_hit(self, admin_snapshot) -> None:
        snapshot = replace(admin_snapshot, members=ResourceState.LOADED, members_project_id=1)
        commands = plan(Route.config(AdminSection.MEMBERS, 1), snapshot)
        assert commands_targeting(commands, "members") == []

    def test_scoped_cache_for_other_project_refetches(self, admin_snapshot) -> None:
        snapshot = replace(admin_snapshot, members=ResourceState.LOADED, members_project_id=2)
        commands = plan(Route.config(AdminSection.MEMBERS, 1), snapshot)
        assert commands_targeting(commands, "members") == [Command.fetch(CommandKind.FETCH_MEMBERS, 1)]

    def test_task_types_section(self, admin_snapshot) -> None:
        commands = plan(Route.config(AdminSection.TASK_TYPES, 2), admin_snapshot)
        assert commands[-1] == Command.fetch(CommandKind.FETCH_TASK_TYPES, 2)

    def test_metrics_section(self, admin_snapshot) -> None:
        commands = plan(Route.config(AdminSection.METRICS, 3), admin_snapshot)

        assert kinds(commands)[-2:] == [
            CommandKind.FETCH_ORG_METRICS_OVERVIEW,
            CommandKind.FETCH_ORG_METRICS_PROJECT_TASKS,
        ]
        assert commands[-1].project_id == 3

    def test_metrics_without_project_fetches_overview_only(self, admin_snapshot) -> None:
        commands = plan(Route.config(AdminSection.METRICS, None), admin_snapshot)

        assert CommandKind.FETCH_ORG_METRICS_OVERVIEW in kinds(commands)
        assert CommandKind.FETCH_ORG_METRICS_PROJECT_TASKS not in kinds(commands)

    def test_org_settings_and_assignments_sections(self, admin_snapshot) -> None:
        settings = plan(Route.config(AdminSection.ORG_SETTINGS), admin_snapshot)
        assignments = plan(Route.config(AdminSection.ASSIGNMENTS), admin_snapshot)

        assert kinds(settings)[-1] is CommandKind.FETCH_ORG_SETTINGS_USERS
        assert kinds(assignments)[-1] is CommandKind.FETCH_ORG_USERS_CACHE

    def test_missing_section_redirects_to_pool(self, admin_snapshot) -> None:
        route = Route(RouteKind.CONFIG)
        assert plan(route, admin_snapshot) == [Command.redirect(MEMBER_POOL_ROUTE)]


# =============================================================================
# Org route
# =============================================================================


class TestOrgPlanning:
    """Tests for the org area plans."""

    def test_non_admin_redirected(self, manager_snapshot) -> None:
        assert plan(Route.org(AdminSection.INVITES), manager_snapshot) == [
            Command.redirect(MEMBER_POOL_ROUTE)
        ]

    def test_admin_base(self) -> None:
        snapshot = Snapshot(auth=AuthState.authed(Role.ADMIN), me=ResourceState.LOADED)

        assert kinds(plan(Route.org(AdminSection.INVITES), snapshot)) == [
            CommandKind.FETCH_PROJECTS,
            CommandKind.FETCH_INVITE_LINKS,
        ]

    @pytest.mark.parametrize(
        "section, extra",
        [
            (AdminSection.ORG_SETTINGS, CommandKind.FETCH_ORG_SETTINGS_USERS),
            (AdminSection.ASSIGNMENTS, CommandKind.FETCH_ORG_USERS_CACHE),
            (AdminSection.METRICS, CommandKind.FETCH_ORG_METRICS_OVERVIEW),
        ],
    )
    def test_section_extras(self, admin_snapshot, section, extra) -> None:
        assert kinds(plan(Route.org(section), admin_snapshot)) == [
            CommandKind.FETCH_INVITE_LINKS,
            extra,
        ]

    def test_project_scoped_section_redirects_to_config(self, admin_snapshot) -> None:
        assert plan(Route.org(AdminSection.WORKFLOWS), admin_snapshot) == [
            Command.redirect(Route.config(AdminSection.WORKFLOWS, None))
        ]


# =============================================================================
# Member route
# =============================================================================


class TestMemberPlanning:
    """Tests for the member work area plan."""

    def test_fresh_member(self, member_snapshot) -> None:
        route = Route.member(MemberSection.POOL, 7, MemberView.CARDS)

        assert kinds(plan(route, member_snapshot)) == [
            CommandKind.FETCH_PROJECTS,
            CommandKind.FETCH_CAPABILITIES,
            CommandKind.FETCH_ME_CAPABILITY_IDS,
            CommandKind.FETCH_WORK_SESSIONS,
            CommandKind.FETCH_ME_METRICS,
            CommandKind.FETCH_ORG_USERS_CACHE,
            CommandKind.REFRESH_MEMBER,
        ]

    def test_failed_resource_is_retried(self, admin_snapshot) -> None:
        loaded = {name: ResourceState.LOADED for name in RESOURCE_FIELDS}
        snapshot = replace(admin_snapshot, **loaded)
        snapshot = replace(snapshot, work_sessions=ResourceState.FAILED)

        assert plan(MEMBER_POOL_ROUTE, snapshot) == [Command.fetch(CommandKind.FETCH_WORK_SESSIONS)]


# =============================================================================
# Properties
# =============================================================================

_ROUTES = [
    Route.login(),
    Route.accept_invite("t"),
    Route.config(AdminSection.MEMBERS, 1),
    Route.config(AdminSection.METRICS, 2),
    Route.config(AdminSection.INVITES),
    Route.org(AdminSection.ASSIGNMENTS),
    Route.org(AdminSection.TASK_TYPES),
    Route.member(MemberSection.MY_BAR, 1, MemberView.LIST),
]


def _snapshots():
    half_loading = {
        name: ResourceState.LOADING for name in RESOURCE_FIELDS[::2]
    }
    return [
        Snapshot(),
        Snapshot(me=ResourceState.LOADING),
        Snapshot(auth=AuthState.unauthed()),
        Snapshot(auth=AuthState.authed(Role.MEMBER), **half_loading),
        Snapshot(auth=AuthState.authed(Role.ADMIN), **half_loading),
        Snapshot(
            auth=AuthState.authed(Role.ADMIN),
            **{name: ResourceState.LOADING for name in RESOURCE_FIELDS},
        ),
    ]


class TestPlannerProperties:
    """Properties that hold for every route and snapshot."""

    @pytest.mark.parametrize("route", _ROUTES)
    def test_deterministic(self, route) -> None:
        for snapshot in _snapshots():
            assert plan(route, snapshot) == plan(route, snapshot)

    @pytest.mark.parametrize("route", _ROUTES)
    def test_never_targets_loading_resource(self, route) -> None:
        for snapshot in _snapshots():
            for command in plan(route, snapshot):
                if command.is_redirect:
                    continue
                assert snapshot.state_of(command.resource) is not ResourceState.LOADING

    @pytest.mark.parametrize("route", _ROUTES)
    def test_replanning_after_dispatch_issues_nothing_new(self, route, admin_snapshot) -> None:
        """Once the plan's fetches are marked loading, re-planning is empty."""
        snapshot = replace(admin_snapshot, projects=ResourceState.NOT_ASKED)
        commands = plan(route, snapshot)
        if any(c.is_redirect for c in commands):
            return
        snapshot, _ = begin_requests(snapshot, commands)
        assert plan(route, snapshot) == []

    def test_plan_returns_fresh_list(self, member_snapshot) -> None:
        first = plan(MEMBER_POOL_ROUTE, member_snapshot)
        first.clear()
        assert plan(MEMBER_POOL_ROUTE, member_snapshot) != []
