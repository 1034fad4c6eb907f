"""
types - Core type definitions for navigation resolution and hydration planning.

This package provides the value types shared by the query codec, the
permission model, the hydration planner and the runtime glue. All types are
frozen dataclasses or str-valued enums, with ``*_to_dict``/``*_from_dict``
helpers for JSON-ready serialization.

Usage:
    from scrumnav.runtime.types import (
        # Resources and identity
        ResourceState, Role, AuthStatus, AuthState, Project, parse_role,
        # Navigation state
        MemberView, AssignmentsView, ViewParam, QueryContext,
        QueryErrorKind, QueryError, NavState, ParseKind, QueryParseResult,
        # Routes
        AdminSection, MemberSection, RouteKind, Route, MEMBER_POOL_ROUTE,
        ORG_LEVEL_SECTIONS, PROJECT_SCOPED_SECTIONS,
        # Commands
        CommandKind, Command, COMMAND_RESOURCES,
        # Snapshot
        Snapshot, RESOURCE_FIELDS, SCOPE_FIELDS,
        # Serdes
        route_to_dict, route_from_dict,
        command_to_dict, command_from_dict,
        snapshot_to_dict, snapshot_from_dict,
        nav_state_to_dict, nav_state_from_dict,
    )
"""

from __future__ import annotations

from .commands import (
    COMMAND_RESOURCES,
    PROJECT_SCOPED_COMMANDS,
    Command,
    CommandKind,
    command_from_dict,
    command_to_dict,
)
from .navigation import (
    AssignmentsView,
    MemberView,
    NavState,
    ParseKind,
    QueryContext,
    QueryError,
    QueryErrorKind,
    QueryParseResult,
    ViewParam,
    nav_state_from_dict,
    nav_state_to_dict,
    query_error_from_dict,
    query_error_to_dict,
    query_parse_result_to_dict,
    view_param_from_str,
)
from .resources import (
    MANAGER_ROLE,
    AuthState,
    AuthStatus,
    Project,
    ResourceState,
    Role,
    auth_state_from_dict,
    auth_state_to_dict,
    parse_role,
    project_from_dict,
    project_to_dict,
)
from .routes import (
    MEMBER_POOL_ROUTE,
    ORG_LEVEL_SECTIONS,
    PROJECT_SCOPED_SECTIONS,
    TOKEN_ROUTE_KINDS,
    AdminSection,
    MemberSection,
    Route,
    RouteKind,
    route_from_dict,
    route_to_dict,
)
from .snapshot import (
    RESOURCE_FIELDS,
    SCOPE_FIELDS,
    Snapshot,
    snapshot_from_dict,
    snapshot_to_dict,
)

__all__ = [
    # Resources and identity
    "ResourceState",
    "Role",
    "AuthStatus",
    "AuthState",
    "Project",
    "MANAGER_ROLE",
    "parse_role",
    "auth_state_to_dict",
    "auth_state_from_dict",
    "project_to_dict",
    "project_from_dict",
    # Navigation state
    "MemberView",
    "AssignmentsView",
    "ViewParam",
    "QueryContext",
    "QueryErrorKind",
    "QueryError",
    "NavState",
    "ParseKind",
    "QueryParseResult",
    "view_param_from_str",
    "nav_state_to_dict",
    "nav_state_from_dict",
    "query_error_to_dict",
    "query_error_from_dict",
    "query_parse_result_to_dict",
    # Routes
    "AdminSection",
    "MemberSection",
    "RouteKind",
    "Route",
    "MEMBER_POOL_ROUTE",
    "ORG_LEVEL_SECTIONS",
    "PROJECT_SCOPED_SECTIONS",
    "TOKEN_ROUTE_KINDS",
    "route_to_dict",
    "route_from_dict",
    # Commands
    "CommandKind",
    "Command",
    "COMMAND_RESOURCES",
    "PROJECT_SCOPED_COMMANDS",
    "command_to_dict",
    "command_from_dict",
    # Snapshot
    "Snapshot",
    "RESOURCE_FIELDS",
    "SCOPE_FIELDS",
    "snapshot_to_dict",
    "snapshot_from_dict",
]
