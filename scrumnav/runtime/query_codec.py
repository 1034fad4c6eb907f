"""
query_codec.py - Parse and serialize the navigation query string.

This module turns the query part of an application URL into a validated,
immutable NavState for a given QueryContext, and renders a NavState back
into a canonical query string.

Parsing never fails. Problems are collected as QueryError values; any
problem downgrades the result from PARSED to REDIRECT, which tells the
caller to canonicalize the address bar. The best-effort state is identical
in both cases and always usable.

Context -> allowed keys:

    member           project, view (member views), type, cap, search, card
    config           project
    org              (none)
    org_assignments  view (assignments views)

Usage:
    from scrumnav.runtime import query_codec
    from scrumnav.runtime.types import QueryContext

    result = query_codec.parse("/app?project=7&view=cards", QueryContext.MEMBER)
    if result.needs_redirect:
        router.replace(query_codec.to_app_url(result.state))

    state = query_codec.with_search(query_codec.empty(), "login bug")
    query_codec.to_query_string_for(QueryContext.MEMBER, state)  # "search=login%20bug"
"""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Dict, List, Optional, Set, Tuple, Type
from urllib.parse import quote, unquote, urlsplit

from scrumnav.runtime.types import (
    AssignmentsView,
    MemberView,
    NavState,
    ParseKind,
    QueryContext,
    QueryError,
    QueryParseResult,
    ViewParam,
)
from scrumnav.runtime.view_tokens import (
    is_assignments_view,
    is_member_view,
    resolve_view_token,
    view_token,
)

logger = logging.getLogger(__name__)

APP_PATH = "/app"

# Canonical key order, used for both serialization and context checks
KEY_ORDER: Tuple[str, ...] = ("project", "view", "type", "cap", "search", "card")

# Query key -> NavState field
_KEY_FIELDS: Dict[str, str] = {
    "project": "project",
    "view": "view",
    "type": "type_filter",
    "cap": "capability_filter",
    "search": "search",
    "card": "expanded_card",
}

# Integer-valued keys and the error recorded when they do not parse
_INT_KEY_ERRORS = {
    "project": QueryError.invalid_project,
    "type": QueryError.invalid_type,
    "cap": QueryError.invalid_capability,
    "card": QueryError.invalid_card,
}

# Keys that must not appear at all in a context
_FORBIDDEN_KEYS: Dict[QueryContext, Tuple[str, ...]] = {
    QueryContext.MEMBER: (),
    QueryContext.CONFIG: ("view", "type", "cap", "search", "card"),
    QueryContext.ORG_ASSIGNMENTS: ("project", "type", "cap", "search", "card"),
    QueryContext.ORG: ("project", "view", "type", "cap", "search", "card"),
}

# View family a context accepts
_VIEW_FAMILY: Dict[QueryContext, Type[ViewParam]] = {
    QueryContext.MEMBER: MemberView,
    QueryContext.ORG_ASSIGNMENTS: AssignmentsView,
}

_INT_PATTERN = re.compile(r"^-?[0-9]+$")


# =============================================================================
# Construction
# =============================================================================


def empty() -> NavState:
    """The navigation state with nothing selected."""
    return NavState()


# =============================================================================
# Builders - each returns a new NavState
# =============================================================================


def with_project(state: NavState, project_id: int) -> NavState:
    return replace(state, project=project_id)


def without_project(state: NavState) -> NavState:
    return replace(state, project=None)


def with_view(state: NavState, member_view: MemberView) -> NavState:
    return replace(state, view=member_view)


def with_assignments_view(state: NavState, assignments: AssignmentsView) -> NavState:
    return replace(state, view=assignments)


def without_view(state: NavState) -> NavState:
    return replace(state, view=None)


def with_type_filter(state: NavState, type_id: Optional[int]) -> NavState:
    return replace(state, type_filter=type_id)


def with_capability_filter(state: NavState, capability_id: Optional[int]) -> NavState:
    return replace(state, capability_filter=capability_id)


def with_search(state: NavState, text: Optional[str]) -> NavState:
    """Set the search text. An empty string clears it."""
    return replace(state, search=text or None)


def with_expanded_card(state: NavState, card_id: Optional[int]) -> NavState:
    return replace(state, expanded_card=card_id)


def clear_filters(state: NavState) -> NavState:
    """Drop the type, capability and search filters.

    Project, view and expanded card are kept.
    """
    return replace(state, type_filter=None, capability_filter=None, search=None)


# =============================================================================
# Accessors
# =============================================================================


def project(state: NavState) -> Optional[int]:
    return state.project


def view(state: NavState) -> MemberView:
    """Member view mode, POOL when unset or not a member view."""
    if is_member_view(state.view):
        return state.view  # type: ignore[return-value]
    return MemberView.POOL


def assignments_view(state: NavState) -> AssignmentsView:
    """Assignments view mode, BY_PROJECT when unset or not an assignments view."""
    if is_assignments_view(state.view):
        return state.view  # type: ignore[return-value]
    return AssignmentsView.BY_PROJECT


def type_filter(state: NavState) -> Optional[int]:
    return state.type_filter


def capability_filter(state: NavState) -> Optional[int]:
    return state.capability_filter


def search(state: NavState) -> Optional[str]:
    return state.search


def expanded_card(state: NavState) -> Optional[int]:
    return state.expanded_card


# =============================================================================
# Parsing
# =============================================================================


def _decode(value: str) -> str:
    """Percent-decode a value, falling back to the raw value."""
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def _parse_int(value: str) -> Optional[int]:
    if _INT_PATTERN.match(value):
        return int(value)
    return None


def _split_pairs(query_string: str) -> List[Tuple[str, str]]:
    """Split ``a=1&b=2`` into pairs, splitting each on the first ``=``."""
    pairs: List[Tuple[str, str]] = []
    for segment in query_string.lstrip("?").split("&"):
        if not segment:
            continue
        key, _, value = segment.partition("=")
        pairs.append((key, value))
    return pairs


def parse(uri: str, context: QueryContext) -> QueryParseResult:
    """Parse the query part of a URI (path, relative or absolute URL).

    Args:
        uri: e.g. "/app?project=3" or "https://host/app?project=3#top".
        context: The route family the URI belongs to.

    Returns:
        PARSED if the query is canonical for the context, REDIRECT otherwise.
    """
    return parse_query(urlsplit(uri).query, context)


def parse_query(query_string: str, context: QueryContext) -> QueryParseResult:
    """Parse a raw query string (without the leading ``?``) for a context.

    Errors are accumulated, never short-circuited: an invalid or unknown
    parameter does not stop the rest from being parsed.
    """
    values: Dict[str, object] = {}
    present: Set[str] = set()
    errors: List[QueryError] = []

    for key, raw_value in _split_pairs(query_string):
        value = _decode(raw_value)
        field_name = _KEY_FIELDS.get(key)
        if field_name is None:
            errors.append(QueryError.unexpected_param(key))
            continue

        present.add(key)
        if key in _INT_KEY_ERRORS:
            parsed = _parse_int(value)
            if parsed is None:
                errors.append(_INT_KEY_ERRORS[key](value))
            values[field_name] = parsed
        elif key == "view":
            resolved = resolve_view_token(value)
            if resolved is None:
                errors.append(QueryError.invalid_view(value))
            values[field_name] = resolved
        else:
            values[field_name] = value or None

    errors.extend(_apply_context_rules(context, values, present))

    state = NavState(**values)  # type: ignore[arg-type]
    if errors:
        logger.debug(
            "Query '%s' is not canonical for %s context: %s",
            query_string,
            context.value,
            ", ".join(f"{e.kind.value}({e.raw})" for e in errors),
        )
        return QueryParseResult(ParseKind.REDIRECT, state, tuple(errors))
    return QueryParseResult(ParseKind.PARSED, state, ())


def _apply_context_rules(
    context: QueryContext,
    values: Dict[str, object],
    present: Set[str],
) -> List[QueryError]:
    """Record and drop parameters the context does not allow.

    Mutates ``values`` so the resulting state only carries what the context
    permits.
    """
    violations: List[QueryError] = []
    forbidden = _FORBIDDEN_KEYS[context]
    view_family = _VIEW_FAMILY.get(context)

    for key in KEY_ORDER:
        field_name = _KEY_FIELDS[key]
        if key in forbidden and key in present:
            violations.append(QueryError.unexpected_param(key))
            values.pop(field_name, None)
        elif key == "view" and view_family is not None:
            current = values.get(field_name)
            if current is not None and not isinstance(current, view_family):
                violations.append(QueryError.unexpected_param(key))
                values.pop(field_name, None)

    return violations


# =============================================================================
# Serialization
# =============================================================================

_ALLOWED_KEYS: Dict[QueryContext, Tuple[str, ...]] = {
    QueryContext.MEMBER: KEY_ORDER,
    QueryContext.CONFIG: ("project",),
    QueryContext.ORG: (),
    QueryContext.ORG_ASSIGNMENTS: ("view",),
}


def _encode_value(key: str, value: object) -> str:
    if key == "search":
        return quote(str(value), safe="")
    if key == "view":
        return view_token(value)  # type: ignore[arg-type]
    return str(value)


def to_query_string_for(context: QueryContext, state: NavState) -> str:
    """Serialize the keys the context permits, in canonical order.

    Absent fields are omitted. Returns "" when nothing is emitted.
    """
    view_family = _VIEW_FAMILY.get(context)
    parts: List[str] = []
    for key in _ALLOWED_KEYS[context]:
        value = getattr(state, _KEY_FIELDS[key])
        if value is None:
            continue
        if key == "view" and view_family is not None and not isinstance(value, view_family):
            continue
        parts.append(f"{key}={_encode_value(key, value)}")
    return "&".join(parts)


def to_app_url(state: NavState) -> str:
    """Member work-area URL: ``/app`` or ``/app?<query>``."""
    query = to_query_string_for(QueryContext.MEMBER, state)
    if query:
        return f"{APP_PATH}?{query}"
    return APP_PATH
