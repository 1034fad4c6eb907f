"""
hydration_planner.py - Decide which fetches (or which redirect) a route needs.

The planner is a total, side-effect-free function from (Route, Snapshot) to
an ordered list of Commands. It performs no I/O; the surrounding runtime
dispatches the commands and feeds the results back as a new Snapshot, which
triggers the next planning pass.

Planning is driven by the auth state:

    Unknown   every route except the token routes plans [FETCH_ME]
    Unauthed  protected routes plan [REDIRECT(login)]
    Authed    per route family, see _plan_config / _plan_org / _plan_member

Within a route family the output is assembled from declarative requirement
tables: ordered (condition, command) pairs, flattened to keep only the
commands whose condition holds. The order of a table is the output order.

The runtime marks a resource LOADING before issuing its request, and every
condition here reads LOADING as "do nothing", so a re-entrant plan() never
re-requests in-flight work.

Usage:
    from scrumnav.runtime.hydration_planner import plan

    for command in plan(route, snapshot):
        dispatch(command)
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from scrumnav.runtime.permissions import can_access_section, is_org_admin, is_project_scoped
from scrumnav.runtime.types import (
    MEMBER_POOL_ROUTE,
    AdminSection,
    AuthStatus,
    Command,
    CommandKind,
    ResourceState,
    Role,
    Route,
    RouteKind,
    Snapshot,
)

logger = logging.getLogger(__name__)

# A requirement: the command is emitted when the condition holds
Requirement = Tuple[bool, Command]


# =============================================================================
# Fetch eligibility
# =============================================================================


def needs_fetch(state: ResourceState) -> bool:
    """A shared resource needs fetching when never asked or failed."""
    return state in (ResourceState.NOT_ASKED, ResourceState.FAILED)


def needs_project_fetch(
    state: ResourceState,
    cached_scope_id: Optional[int],
    target_scope_id: Optional[int],
) -> bool:
    """Whether a project-scoped cache must be (re)fetched for a target project.

    Returns False while loading, False on a cache hit (loaded for the same
    project), True whenever a target exists otherwise (missing, failed, or
    cached for a different project), and False with no target.
    """
    if state is ResourceState.LOADING:
        return False
    if state is ResourceState.LOADED and cached_scope_id == target_scope_id:
        return False
    return target_scope_id is not None


def _fetch(kind: CommandKind) -> Command:
    return Command.fetch(kind)


def _scoped_requirement(
    kind: CommandKind,
    state: ResourceState,
    cached_scope_id: Optional[int],
    project_id: Optional[int],
    extra_condition: bool = True,
) -> Requirement:
    """Requirement for a project-scoped fetch.

    The command is only materialized when a project id exists, since a
    project-scoped command cannot be built without one.
    """
    if project_id is None:
        return (False, Command(kind))
    return (
        extra_condition and needs_project_fetch(state, cached_scope_id, project_id),
        Command.fetch(kind, project_id),
    )


def _flatten(*tables: Sequence[Requirement]) -> List[Command]:
    """Keep the commands whose condition holds, in table order."""
    return [command for table in tables for condition, command in table if condition]


# =============================================================================
# Planning
# =============================================================================


def plan(route: Route, snapshot: Snapshot) -> List[Command]:
    """Compute the commands required to render a route.

    Args:
        route: The page about to be rendered.
        snapshot: Current auth and cache state.

    Returns:
        Fresh list of commands. Commands carry no ordering dependency on
        each other; the order is stable for a given input.
    """
    commands = _plan(route, snapshot)
    logger.debug(
        "Planned %s: %s",
        route.kind.value,
        [command.kind.value for command in commands] or "nothing",
    )
    return commands


def _plan(route: Route, snapshot: Snapshot) -> List[Command]:
    if route.kind in (RouteKind.ACCEPT_INVITE, RouteKind.RESET_PASSWORD):
        return []

    auth = snapshot.auth
    if not auth.is_known:
        return _flatten([(needs_fetch(snapshot.me), _fetch(CommandKind.FETCH_ME))])

    if auth.status is AuthStatus.UNAUTHED:
        if route.kind is RouteKind.LOGIN:
            return []
        return [Command.redirect(Route.login())]

    role = auth.role
    if route.kind is RouteKind.LOGIN:
        return [Command.redirect(MEMBER_POOL_ROUTE)]
    if route.kind is RouteKind.CONFIG:
        return _plan_config(route.section, route.project_id, role, snapshot)
    if route.kind is RouteKind.ORG:
        return _plan_org(route.section, role, snapshot)
    if route.kind is RouteKind.MEMBER:
        return _plan_member(snapshot)

    logger.warning("No planning rule for route kind %s", route.kind)
    return []


def _plan_config(
    section: Optional[AdminSection],
    project_id: Optional[int],
    role: Optional[Role],
    snapshot: Snapshot,
) -> List[Command]:
    """Plan the config area: access check, shared base, section needs."""
    if section is None:
        return [Command.redirect(MEMBER_POOL_ROUTE)]

    admin = is_org_admin(role)
    projects_loaded = snapshot.projects is ResourceState.LOADED

    # Manager status is unknown until projects land: defer the decision
    if is_project_scoped(section) and not admin and not projects_loaded:
        return _flatten([(needs_fetch(snapshot.projects), _fetch(CommandKind.FETCH_PROJECTS))])

    if not _may_open_config(section, role, project_id, snapshot):
        logger.debug("Access to config section %s (project %s) denied", section.value, project_id)
        return [Command.redirect(MEMBER_POOL_ROUTE)]

    base: List[Requirement] = [
        (needs_fetch(snapshot.projects), _fetch(CommandKind.FETCH_PROJECTS)),
        (admin and needs_fetch(snapshot.invite_links), _fetch(CommandKind.FETCH_INVITE_LINKS)),
        (needs_fetch(snapshot.capabilities), _fetch(CommandKind.FETCH_CAPABILITIES)),
        (needs_fetch(snapshot.me_metrics), _fetch(CommandKind.FETCH_ME_METRICS)),
        (needs_fetch(snapshot.work_sessions), _fetch(CommandKind.FETCH_WORK_SESSIONS)),
    ]
    return _flatten(base, _config_section_requirements(section, project_id, snapshot))


def _may_open_config(
    section: AdminSection,
    role: Optional[Role],
    project_id: Optional[int],
    snapshot: Snapshot,
) -> bool:
    """Access check for a config route against the loaded snapshot.

    A project id that is not in the visible project list is never managed.
    With no project selected, manager status is read from
    ``snapshot.is_any_project_manager``.
    """
    if is_org_admin(role):
        return True
    if project_id is not None:
        selected_project = snapshot.find_project(project_id)
        if selected_project is None:
            return False
        return can_access_section(section, role, snapshot.project_list, selected_project)
    return is_project_scoped(section) and snapshot.is_any_project_manager


def _config_section_requirements(
    section: AdminSection,
    project_id: Optional[int],
    snapshot: Snapshot,
) -> List[Requirement]:
    projects_loaded = snapshot.projects is ResourceState.LOADED

    if section is AdminSection.MEMBERS:
        return [
            _scoped_requirement(
                CommandKind.FETCH_MEMBERS,
                snapshot.members,
                snapshot.members_project_id,
                project_id,
                extra_condition=projects_loaded,
            )
        ]
    if section is AdminSection.TASK_TYPES:
        return [
            _scoped_requirement(
                CommandKind.FETCH_TASK_TYPES,
                snapshot.task_types,
                snapshot.task_types_project_id,
                project_id,
                extra_condition=projects_loaded,
            )
        ]
    if section is AdminSection.ORG_SETTINGS:
        return [
            (needs_fetch(snapshot.org_settings_users), _fetch(CommandKind.FETCH_ORG_SETTINGS_USERS)),
        ]
    if section is AdminSection.METRICS:
        return [
            (
                needs_fetch(snapshot.org_metrics_overview),
                _fetch(CommandKind.FETCH_ORG_METRICS_OVERVIEW),
            ),
            _scoped_requirement(
                CommandKind.FETCH_ORG_METRICS_PROJECT_TASKS,
                snapshot.org_metrics_project_tasks,
                snapshot.org_metrics_project_id,
                project_id,
            ),
        ]
    if section is AdminSection.ASSIGNMENTS:
        return [
            (needs_fetch(snapshot.org_users_cache), _fetch(CommandKind.FETCH_ORG_USERS_CACHE)),
        ]
    return []


def _plan_org(
    section: Optional[AdminSection],
    role: Optional[Role],
    snapshot: Snapshot,
) -> List[Command]:
    """Plan the org area: admins only, org-level resources only."""
    if not is_org_admin(role) or section is None:
        return [Command.redirect(MEMBER_POOL_ROUTE)]

    if is_project_scoped(section):
        return [Command.redirect(Route.config(section, None))]

    base: List[Requirement] = [
        (needs_fetch(snapshot.projects), _fetch(CommandKind.FETCH_PROJECTS)),
        (needs_fetch(snapshot.invite_links), _fetch(CommandKind.FETCH_INVITE_LINKS)),
    ]
    section_needs: List[Requirement] = [
        (
            section is AdminSection.ORG_SETTINGS and needs_fetch(snapshot.org_settings_users),
            _fetch(CommandKind.FETCH_ORG_SETTINGS_USERS),
        ),
        (
            section is AdminSection.ASSIGNMENTS and needs_fetch(snapshot.org_users_cache),
            _fetch(CommandKind.FETCH_ORG_USERS_CACHE),
        ),
        (
            section is AdminSection.METRICS and needs_fetch(snapshot.org_metrics_overview),
            _fetch(CommandKind.FETCH_ORG_METRICS_OVERVIEW),
        ),
    ]
    return _flatten(base, section_needs)


def _plan_member(snapshot: Snapshot) -> List[Command]:
    """Plan the member work area: shared base plus the member task refresh."""
    base: List[Requirement] = [
        (needs_fetch(snapshot.projects), _fetch(CommandKind.FETCH_PROJECTS)),
        (needs_fetch(snapshot.capabilities), _fetch(CommandKind.FETCH_CAPABILITIES)),
        (needs_fetch(snapshot.me_capability_ids), _fetch(CommandKind.FETCH_ME_CAPABILITY_IDS)),
        (needs_fetch(snapshot.work_sessions), _fetch(CommandKind.FETCH_WORK_SESSIONS)),
        (needs_fetch(snapshot.me_metrics), _fetch(CommandKind.FETCH_ME_METRICS)),
        (needs_fetch(snapshot.org_users_cache), _fetch(CommandKind.FETCH_ORG_USERS_CACHE)),
        (needs_fetch(snapshot.member_tasks), _fetch(CommandKind.REFRESH_MEMBER)),
    ]
    return _flatten(base)


def commands_targeting(commands: Iterable[Command], resource: str) -> List[Command]:
    """Commands in a plan that resolve the given Snapshot field."""
    return [command for command in commands if command.resource == resource]
