"""
Tests for hydration_runtime.py - URL change -> parse -> plan -> dispatch.

These tests drive HydrationRuntime with recording fakes for the Data Service
and the Router, covering:
1. Identity probe on first navigation and the follow-up plan
2. Canonicalization of non-canonical URLs
3. Redirect following and the hop limit
4. Late project-scoped responses after the user moved on
"""

from typing import List

from scrumnav.runtime import HydrationRuntime
from scrumnav.runtime.snapshot_reducer import RequestTicket, ResponseOutcome
from scrumnav.runtime.types import (
    MEMBER_POOL_ROUTE,
    AdminSection,
    AuthState,
    Command,
    CommandKind,
    MemberSection,
    MemberView,
    ResourceState,
    Route,
    Snapshot,
)


class RecordingDataService:
    def __init__(self) -> None:
        self.tickets: List[RequestTicket] = []

    def request(self, ticket: RequestTicket) -> None:
        self.tickets.append(ticket)

    def kinds(self) -> List[CommandKind]:
        return [t.command.kind for t in self.tickets]


class RecordingRouter:
    def __init__(self) -> None:
        self.urls: List[str] = []

    def replace_url(self, url: str) -> None:
        self.urls.append(url)


def make_runtime(snapshot=None, **kwargs):
    data_service = RecordingDataService()
    router = RecordingRouter()
    runtime = HydrationRuntime(data_service, router, snapshot=snapshot, **kwargs)
    return runtime, data_service, router


class TestFirstNavigation:
    """Tests for a cold start."""

    def test_identity_probe_then_member_plan(self) -> None:
        runtime, data_service, router = make_runtime()

        commands = runtime.navigate("/app?project=17&view=list")

        assert commands == [Command.fetch(CommandKind.FETCH_ME)]
        assert runtime.route == Route.member(MemberSection.POOL, 17, MemberView.LIST)
        assert runtime.snapshot.me is ResourceState.LOADING
        assert router.urls == []

        runtime.on_response(data_service.tickets[0], ResponseOutcome.success({"org_role": "member"}))

        assert data_service.kinds() == [
            CommandKind.FETCH_ME,
            CommandKind.FETCH_PROJECTS,
            CommandKind.FETCH_CAPABILITIES,
            CommandKind.FETCH_ME_CAPABILITY_IDS,
            CommandKind.FETCH_WORK_SESSIONS,
            CommandKind.FETCH_ME_METRICS,
            CommandKind.FETCH_ORG_USERS_CACHE,
            CommandKind.REFRESH_MEMBER,
        ]

    def test_repeated_navigation_does_not_refetch_in_flight(self) -> None:
        runtime, data_service, _ = make_runtime()

        runtime.navigate("/app")
        runtime.navigate("/app/my-bar")

        assert data_service.kinds() == [CommandKind.FETCH_ME]

    def test_on_response_before_navigation(self) -> None:
        runtime, _, _ = make_runtime()
        ticket = RequestTicket(Command.fetch(CommandKind.FETCH_CAPABILITIES))

        assert runtime.on_response(ticket, ResponseOutcome.success()) == []


class TestCanonicalizationAndRedirects:
    """Tests for router interaction."""

    def test_non_canonical_query_is_replaced(self, admin_snapshot) -> None:
        runtime, _, router = make_runtime(admin_snapshot)

        runtime.navigate("/config/members?project=1&view=list")

        assert router.urls == ["/config/members?project=1"]
        assert runtime.route == Route.config(AdminSection.MEMBERS, 1)

    def test_unauthed_redirects_to_login(self) -> None:
        runtime, data_service, router = make_runtime(Snapshot(auth=AuthState.unauthed()))

        commands = runtime.navigate("/app")

        assert router.urls == ["/login"]
        assert runtime.route == Route.login()
        assert commands == []
        assert data_service.tickets == []

    def test_org_project_section_redirects_to_config(self, admin_snapshot) -> None:
        runtime, data_service, router = make_runtime(admin_snapshot)

        runtime.navigate("/org/workflows")

        assert router.urls == ["/config/workflows"]
        assert runtime.route == Route.config(AdminSection.WORKFLOWS, None)
        assert CommandKind.FETCH_INVITE_LINKS in data_service.kinds()

    def test_denied_section_lands_on_pool(self, member_snapshot) -> None:
        runtime, _, router = make_runtime(member_snapshot)

        runtime.navigate("/org/invites")

        assert router.urls == ["/app"]
        assert runtime.route == MEMBER_POOL_ROUTE

    def test_redirect_limit_stops_following(self, member_snapshot) -> None:
        runtime, data_service, router = make_runtime(member_snapshot, max_redirect_hops=0)

        commands = runtime.navigate("/login")

        assert commands == [Command.redirect(MEMBER_POOL_ROUTE)]
        assert router.urls == []
        assert data_service.tickets == []


class TestLateResponses:
    """Tests for responses that arrive after the user moved on."""

    def test_stale_members_response_triggers_refetch_for_current_project(self, admin_snapshot) -> None:
        runtime, data_service, _ = make_runtime(admin_snapshot)

        runtime.navigate("/config/members?project=1")
        first = [t for t in data_service.tickets if t.command.kind is CommandKind.FETCH_MEMBERS]
        assert [t.scope_id for t in first] == [1]

        # Members for project 1 are still in flight: nothing new is requested
        runtime.navigate("/config/members?project=2")
        assert data_service.kinds().count(CommandKind.FETCH_MEMBERS) == 1

        runtime.on_response(first[0], ResponseOutcome.success(["alice"]))

        members = [t for t in data_service.tickets if t.command.kind is CommandKind.FETCH_MEMBERS]
        assert [t.scope_id for t in members] == [1, 2]
        assert runtime.snapshot.members is ResourceState.LOADING
