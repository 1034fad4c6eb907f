"""Route types: which page to render and with which parameters.

Route is a closed set of variants discriminated by RouteKind. Every planner
branch is exhaustive over RouteKind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .navigation import ViewParam, view_param_from_str
from .resources import require_mapping


class AdminSection(str, Enum):
    """Entries of the admin/config navigation menu.

    The split into org-level and project-scoped sections is fixed data, see
    ORG_LEVEL_SECTIONS and PROJECT_SCOPED_SECTIONS.
    """

    INVITES = "invites"
    ORG_SETTINGS = "org-settings"
    PROJECTS = "projects"
    ASSIGNMENTS = "assignments"
    METRICS = "metrics"
    MEMBERS = "members"
    CAPABILITIES = "capabilities"
    TASK_TYPES = "task-types"
    WORKFLOWS = "workflows"
    TASK_TEMPLATES = "task-templates"


# Require org-admin
ORG_LEVEL_SECTIONS: FrozenSet[AdminSection] = frozenset(
    {
        AdminSection.INVITES,
        AdminSection.ORG_SETTINGS,
        AdminSection.PROJECTS,
        AdminSection.ASSIGNMENTS,
        AdminSection.METRICS,
    }
)

# Require org-admin or project-manager
PROJECT_SCOPED_SECTIONS: FrozenSet[AdminSection] = frozenset(
    {
        AdminSection.MEMBERS,
        AdminSection.CAPABILITIES,
        AdminSection.TASK_TYPES,
        AdminSection.WORKFLOWS,
        AdminSection.TASK_TEMPLATES,
    }
)


class MemberSection(str, Enum):
    """Pages of the member work area."""

    POOL = "pool"
    MY_BAR = "my-bar"
    SKILLS = "skills"


class RouteKind(str, Enum):
    """Route variants."""

    LOGIN = "login"
    ACCEPT_INVITE = "accept_invite"
    RESET_PASSWORD = "reset_password"
    CONFIG = "config"
    ORG = "org"
    MEMBER = "member"


# Routes that carry their own credential and need no session
TOKEN_ROUTE_KINDS: FrozenSet[RouteKind] = frozenset(
    {RouteKind.ACCEPT_INVITE, RouteKind.RESET_PASSWORD}
)


@dataclass(frozen=True)
class Route:
    """A page to render.

    Variants:
        Login
        AcceptInvite(token)
        ResetPassword(token)
        Config(section, project_id)
        Org(section)
        Member(member_section, project_id, view)

    Build instances through the classmethod constructors so that only the
    fields belonging to the variant are populated.
    """

    kind: RouteKind
    token: Optional[str] = None
    section: Optional[AdminSection] = None
    member_section: Optional[MemberSection] = None
    project_id: Optional[int] = None
    view: Optional[ViewParam] = None

    @classmethod
    def login(cls) -> "Route":
        return cls(RouteKind.LOGIN)

    @classmethod
    def accept_invite(cls, token: str) -> "Route":
        return cls(RouteKind.ACCEPT_INVITE, token=token)

    @classmethod
    def reset_password(cls, token: str) -> "Route":
        return cls(RouteKind.RESET_PASSWORD, token=token)

    @classmethod
    def config(cls, section: AdminSection, project_id: Optional[int] = None) -> "Route":
        return cls(RouteKind.CONFIG, section=section, project_id=project_id)

    @classmethod
    def org(cls, section: AdminSection) -> "Route":
        return cls(RouteKind.ORG, section=section)

    @classmethod
    def member(
        cls,
        section: MemberSection = MemberSection.POOL,
        project_id: Optional[int] = None,
        view: Optional[ViewParam] = None,
    ) -> "Route":
        return cls(
            RouteKind.MEMBER,
            member_section=section,
            project_id=project_id,
            view=view,
        )


# Landing page for authenticated users and target of access denials
MEMBER_POOL_ROUTE = Route.member(MemberSection.POOL, None, None)


def route_to_dict(route: Route) -> Dict[str, Any]:
    """Convert Route to dictionary for serialization.

    Only the fields of the route's variant are emitted.
    """
    data: Dict[str, Any] = {"kind": route.kind.value}
    if route.kind in TOKEN_ROUTE_KINDS:
        data["token"] = route.token
    elif route.kind is RouteKind.CONFIG:
        data["section"] = route.section.value if route.section else None
        data["project_id"] = route.project_id
    elif route.kind is RouteKind.ORG:
        data["section"] = route.section.value if route.section else None
    elif route.kind is RouteKind.MEMBER:
        data["section"] = route.member_section.value if route.member_section else None
        data["project_id"] = route.project_id
        data["view"] = route.view.value if route.view is not None else None
    return data


def route_from_dict(data: Dict[str, Any]) -> Route:
    """Convert dictionary to Route.

    Raises:
        ValueError: If the kind or section is unknown, or a required field
            is missing.
    """
    data = require_mapping(data, "route")
    kind = RouteKind(data["kind"])
    if kind is RouteKind.LOGIN:
        return Route.login()
    if kind in TOKEN_ROUTE_KINDS:
        token = data.get("token")
        if not token:
            raise ValueError(f"{kind.value} route requires a token")
        if kind is RouteKind.ACCEPT_INVITE:
            return Route.accept_invite(token)
        return Route.reset_password(token)
    if kind is RouteKind.CONFIG:
        return Route.config(AdminSection(data["section"]), data.get("project_id"))
    if kind is RouteKind.ORG:
        return Route.org(AdminSection(data["section"]))
    view = data.get("view")
    return Route.member(
        MemberSection(data.get("section") or MemberSection.POOL.value),
        data.get("project_id"),
        view_param_from_str(view) if view is not None else None,
    )
