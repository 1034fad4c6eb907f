"""
route_paths.py - Map application URLs to Routes and back.

Path table:

    /login                        Login
    /accept-invite?token=T        AcceptInvite(T)
    /reset-password?token=T       ResetPassword(T)
    /config[/<section>]?project=  Config(section, project)      config context
    /org[/<section>]              Org(section)                  org context
    /org/assignments?view=        Org(assignments)              org_assignments context
    /app[/my-bar|/skills]?...     Member(section, project, view) member context

The query part of query-bearing routes goes through the query codec with
the context of the route. Unknown paths resolve to the member pool and are
flagged as not recognized so the caller canonicalizes the address bar.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import parse_qs, quote, urlsplit

from scrumnav.config.runtime_config import get_default_config_section, get_default_org_section
from scrumnav.runtime import query_codec
from scrumnav.runtime.types import (
    MEMBER_POOL_ROUTE,
    TOKEN_ROUTE_KINDS,
    AdminSection,
    MemberSection,
    NavState,
    ParseKind,
    QueryContext,
    QueryParseResult,
    Route,
    RouteKind,
)
from scrumnav.runtime.view_tokens import is_member_view, parse_admin_section, parse_member_section

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
ACCEPT_INVITE_PATH = "/accept-invite"
RESET_PASSWORD_PATH = "/reset-password"
CONFIG_PATH = "/config"
ORG_PATH = "/org"


@dataclass(frozen=True)
class Location:
    """A parsed URL.

    Attributes:
        route: The page to render.
        query: Query codec result for the route's context.
        recognized: False when the path did not match the table and the
            route is a fallback.
    """

    route: Route
    query: QueryParseResult
    recognized: bool = True

    @property
    def needs_canonical_url(self) -> bool:
        return not self.recognized or self.query.needs_redirect


def _no_query() -> QueryParseResult:
    return QueryParseResult(ParseKind.PARSED, query_codec.empty(), ())


def context_for_route(route: Route) -> Optional[QueryContext]:
    """Query context of a route, None for routes without a navigation query."""
    if route.kind is RouteKind.MEMBER:
        return QueryContext.MEMBER
    if route.kind is RouteKind.CONFIG:
        return QueryContext.CONFIG
    if route.kind is RouteKind.ORG:
        if route.section is AdminSection.ASSIGNMENTS:
            return QueryContext.ORG_ASSIGNMENTS
        return QueryContext.ORG
    return None


def _segments(path: str) -> List[str]:
    return [segment for segment in path.split("/") if segment]


def parse_location(uri: str) -> Location:
    """Resolve a URI to a Location.

    Args:
        uri: Path with optional query, or an absolute URL.
    """
    parts = urlsplit(uri)
    segments = _segments(parts.path)
    head = segments[0] if segments else ""

    if head == "login" and len(segments) == 1:
        return Location(Route.login(), _no_query())

    if head in ("accept-invite", "reset-password") and len(segments) == 1:
        tokens = parse_qs(parts.query).get("token")
        if not tokens or not tokens[0]:
            logger.debug("Token route %s without a token", parts.path)
            return Location(Route.login(), _no_query(), recognized=False)
        token = tokens[0]
        if head == "accept-invite":
            return Location(Route.accept_invite(token), _no_query())
        return Location(Route.reset_password(token), _no_query())

    if head == "config" and len(segments) <= 2:
        section = parse_admin_section(segments[1]) if len(segments) == 2 else None
        recognized = len(segments) == 1 or section is not None
        section = section or get_default_config_section()
        query = query_codec.parse_query(parts.query, QueryContext.CONFIG)
        return Location(Route.config(section, query.state.project), query, recognized)

    if head == "org" and len(segments) <= 2:
        section = parse_admin_section(segments[1]) if len(segments) == 2 else None
        recognized = len(segments) == 1 or section is not None
        section = section or get_default_org_section()
        route = Route.org(section)
        query = query_codec.parse_query(parts.query, context_for_route(route))
        return Location(route, query, recognized)

    if head == "app" and len(segments) <= 2:
        member_section: Optional[MemberSection] = MemberSection.POOL
        if len(segments) == 2:
            member_section = parse_member_section(segments[1])
        # The pool lives at the bare /app path
        recognized = len(segments) == 1 or member_section not in (None, MemberSection.POOL)
        query = query_codec.parse_query(parts.query, QueryContext.MEMBER)
        route = Route.member(
            member_section or MemberSection.POOL,
            query.state.project,
            query.state.view,
        )
        return Location(route, query, recognized)

    logger.debug("Unrecognized path '%s', falling back to the member pool", parts.path)
    return Location(MEMBER_POOL_ROUTE, _no_query(), recognized=False)


def route_path(route: Route) -> str:
    """Path part of a route's URL, without any query."""
    if route.kind is RouteKind.LOGIN:
        return LOGIN_PATH
    if route.kind is RouteKind.ACCEPT_INVITE:
        return ACCEPT_INVITE_PATH
    if route.kind is RouteKind.RESET_PASSWORD:
        return RESET_PASSWORD_PATH
    if route.kind is RouteKind.CONFIG:
        section = route.section or get_default_config_section()
        return f"{CONFIG_PATH}/{section.value}"
    if route.kind is RouteKind.ORG:
        section = route.section or get_default_org_section()
        return f"{ORG_PATH}/{section.value}"
    if route.member_section in (None, MemberSection.POOL):
        return query_codec.APP_PATH
    return f"{query_codec.APP_PATH}/{route.member_section.value}"


def _with_query(path: str, query: str) -> str:
    return f"{path}?{query}" if query else path


def format_route(route: Route, state: Optional[NavState] = None) -> str:
    """Render a route as a URL.

    Args:
        route: The route to render.
        state: Optional navigation state whose filters are carried into the
            query. The route's own project and view always win.
    """
    path = route_path(route)
    if route.kind in (RouteKind.ACCEPT_INVITE, RouteKind.RESET_PASSWORD):
        return _with_query(path, f"token={quote(route.token or '', safe='')}")

    context = context_for_route(route)
    if context is None:
        return path

    nav = state if state is not None else query_codec.empty()
    if route.kind in (RouteKind.CONFIG, RouteKind.MEMBER):
        nav = (
            query_codec.with_project(nav, route.project_id)
            if route.project_id is not None
            else query_codec.without_project(nav)
        )
    if route.kind is RouteKind.MEMBER:
        if is_member_view(route.view):
            nav = query_codec.with_view(nav, route.view)
        else:
            nav = query_codec.without_view(nav)
    return _with_query(path, query_codec.to_query_string_for(context, nav))


def canonical_url(location: Location) -> str:
    """The canonical URL for a parsed location."""
    return format_route(location.route, location.query.state)


def canonical_url_in(location: Location, context: QueryContext, state: NavState) -> str:
    """The canonical URL for a location whose query was read in an explicit context.

    Token routes keep their token query regardless of the context.
    """
    if location.route.kind in TOKEN_ROUTE_KINDS:
        return format_route(location.route)
    return _with_query(route_path(location.route), query_codec.to_query_string_for(context, state))
