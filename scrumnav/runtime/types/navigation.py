"""Navigation state types for the URL query codec.

This module contains the value types produced and consumed by
``scrumnav.runtime.query_codec``: the navigation state itself, the view
vocabularies, the parse contexts, and the collected parse errors.

NavState is opaque by convention: obtain one from ``query_codec.empty()``,
``query_codec.parse()``/``parse_query()`` or a builder, never by calling the
constructor with hand-picked fields. Instances are frozen.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class MemberView(str, Enum):
    """View modes of the member work area."""

    POOL = "pool"
    LIST = "list"
    CARDS = "cards"
    PEOPLE = "people"


class AssignmentsView(str, Enum):
    """View modes of the org assignments page."""

    BY_PROJECT = "by-project"
    BY_USER = "by-user"


# A view parameter is exactly one of the two disjoint vocabularies
ViewParam = Union[MemberView, AssignmentsView]


class QueryContext(str, Enum):
    """Route family a query string is parsed for.

    Determines which keys are accepted and how states are serialized.
    """

    MEMBER = "member"
    CONFIG = "config"
    ORG = "org"
    ORG_ASSIGNMENTS = "org_assignments"


class QueryErrorKind(str, Enum):
    """Kinds of problems found while parsing a query string."""

    INVALID_PROJECT = "invalid_project"
    INVALID_VIEW = "invalid_view"
    INVALID_TYPE = "invalid_type"
    INVALID_CAPABILITY = "invalid_capability"
    INVALID_CARD = "invalid_card"
    UNEXPECTED_PARAM = "unexpected_param"


@dataclass(frozen=True)
class QueryError:
    """A descriptive, non-fatal parse problem.

    Attributes:
        kind: What went wrong.
        raw: The offending raw value, or the key for UNEXPECTED_PARAM.
    """

    kind: QueryErrorKind
    raw: str

    @classmethod
    def invalid_project(cls, raw: str) -> "QueryError":
        return cls(QueryErrorKind.INVALID_PROJECT, raw)

    @classmethod
    def invalid_view(cls, raw: str) -> "QueryError":
        return cls(QueryErrorKind.INVALID_VIEW, raw)

    @classmethod
    def invalid_type(cls, raw: str) -> "QueryError":
        return cls(QueryErrorKind.INVALID_TYPE, raw)

    @classmethod
    def invalid_capability(cls, raw: str) -> "QueryError":
        return cls(QueryErrorKind.INVALID_CAPABILITY, raw)

    @classmethod
    def invalid_card(cls, raw: str) -> "QueryError":
        return cls(QueryErrorKind.INVALID_CARD, raw)

    @classmethod
    def unexpected_param(cls, key: str) -> "QueryError":
        return cls(QueryErrorKind.UNEXPECTED_PARAM, key)


@dataclass(frozen=True)
class NavState:
    """Validated navigation state carried by the query string.

    A state produced for the CONFIG context never carries a view or
    filters. That rule is enforced by the parser, not by this type, since
    the type is shared across contexts.
    """

    project: Optional[int] = None
    view: Optional[ViewParam] = None
    type_filter: Optional[int] = None
    capability_filter: Optional[int] = None
    search: Optional[str] = None
    expanded_card: Optional[int] = None


class ParseKind(str, Enum):
    """Outcome of parsing a query string."""

    PARSED = "parsed"  # URL is already canonical
    REDIRECT = "redirect"  # Caller must canonicalize the address bar


@dataclass(frozen=True)
class QueryParseResult:
    """Result of parsing a query string: Parsed(state) | Redirect(state).

    The state is the same best-effort value in both cases; only the caller's
    canonicalization behavior differs.
    """

    kind: ParseKind
    state: NavState
    errors: Tuple[QueryError, ...] = ()

    @property
    def needs_redirect(self) -> bool:
        return self.kind is ParseKind.REDIRECT


def view_param_from_str(value: str) -> ViewParam:
    """Decode a serialized view token, trying member views first.

    Raises:
        ValueError: If the token belongs to neither vocabulary.
    """
    for enum_cls in (MemberView, AssignmentsView):
        try:
            return enum_cls(value)
        except ValueError:
            continue
    raise ValueError(f"Unknown view token: {value!r}")


def query_error_to_dict(error: QueryError) -> Dict[str, Any]:
    """Convert QueryError to dictionary for serialization."""
    return {"kind": error.kind.value, "raw": error.raw}


def query_error_from_dict(data: Dict[str, Any]) -> QueryError:
    """Convert dictionary to QueryError."""
    return QueryError(kind=QueryErrorKind(data["kind"]), raw=str(data["raw"]))


def nav_state_to_dict(state: NavState) -> Dict[str, Any]:
    """Convert NavState to dictionary for serialization."""
    return {
        "project": state.project,
        "view": state.view.value if state.view is not None else None,
        "type_filter": state.type_filter,
        "capability_filter": state.capability_filter,
        "search": state.search,
        "expanded_card": state.expanded_card,
    }


def nav_state_from_dict(data: Dict[str, Any]) -> NavState:
    """Convert dictionary to NavState."""
    view = data.get("view")
    return NavState(
        project=data.get("project"),
        view=view_param_from_str(view) if view is not None else None,
        type_filter=data.get("type_filter"),
        capability_filter=data.get("capability_filter"),
        search=data.get("search"),
        expanded_card=data.get("expanded_card"),
    )


def query_parse_result_to_dict(result: QueryParseResult) -> Dict[str, Any]:
    """Convert QueryParseResult to dictionary for serialization."""
    return {
        "kind": result.kind.value,
        "state": nav_state_to_dict(result.state),
        "errors": [query_error_to_dict(e) for e in result.errors],
    }
