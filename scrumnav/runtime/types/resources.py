"""Resource and identity types for hydration planning.

This module contains the leaf types the planner reasons about: the lifecycle
of one cached resource, the identity probe outcome, and the project records
that drive per-project permission checks.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class ResourceState(str, Enum):
    """Lifecycle of one cached, server-fetched resource.

    Only LOADING may move to LOADED or FAILED. Only NOT_ASKED and FAILED are
    eligible for a new fetch.
    """

    NOT_ASKED = "not_asked"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


class Role(str, Enum):
    """Organization-level role of the signed-in user."""

    ADMIN = "admin"
    MEMBER = "member"


class AuthStatus(str, Enum):
    """Whether the identity probe has resolved, and how."""

    UNKNOWN = "unknown"
    UNAUTHED = "unauthed"
    AUTHED = "authed"


# Project membership role that grants management of a project
MANAGER_ROLE = "manager"


def require_mapping(data: Any, what: str) -> Mapping[str, Any]:
    """Reject serialized values that are not objects."""
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be an object, got {type(data).__name__}")
    return data


def parse_role(value: Optional[str]) -> Role:
    """Decode an org role string. Unknown values get the least privilege."""
    if value is not None and value.strip().lower() == Role.ADMIN.value:
        return Role.ADMIN
    return Role.MEMBER


@dataclass(frozen=True)
class AuthState:
    """Authentication state: Unknown | Unauthed | Authed(role).

    UNKNOWN is the only state before identity is resolved. Use the
    constructors instead of building instances directly.
    """

    status: AuthStatus = AuthStatus.UNKNOWN
    role: Optional[Role] = None

    @classmethod
    def unknown(cls) -> "AuthState":
        return cls(AuthStatus.UNKNOWN, None)

    @classmethod
    def unauthed(cls) -> "AuthState":
        return cls(AuthStatus.UNAUTHED, None)

    @classmethod
    def authed(cls, role: Role) -> "AuthState":
        return cls(AuthStatus.AUTHED, role)

    @property
    def is_known(self) -> bool:
        return self.status is not AuthStatus.UNKNOWN


@dataclass(frozen=True)
class Project:
    """A project visible to the current user.

    Attributes:
        id: Project id.
        name: Display name.
        my_role: The user's membership role in this project
            ("manager" or "member").
    """

    id: int
    name: str = ""
    my_role: str = "member"

    @property
    def is_managed(self) -> bool:
        return self.my_role == MANAGER_ROLE


def auth_state_to_dict(auth: AuthState) -> Dict[str, Any]:
    """Convert AuthState to dictionary for serialization."""
    return {
        "status": auth.status.value,
        "role": auth.role.value if auth.role is not None else None,
    }


def auth_state_from_dict(data: Dict[str, Any]) -> AuthState:
    """Convert dictionary to AuthState.

    Raises:
        ValueError: If the value is not a mapping, the status is not a
            known AuthStatus, or an authed state carries no role.
    """
    data = require_mapping(data, "auth")
    status = AuthStatus(data.get("status", AuthStatus.UNKNOWN.value))
    if status is AuthStatus.AUTHED:
        role = data.get("role")
        if role is None:
            raise ValueError("authed state requires a role")
        return AuthState.authed(Role(role))
    if status is AuthStatus.UNAUTHED:
        return AuthState.unauthed()
    return AuthState.unknown()


def project_to_dict(project: Project) -> Dict[str, Any]:
    """Convert Project to dictionary for serialization."""
    return {"id": project.id, "name": project.name, "my_role": project.my_role}


def project_from_dict(data: Dict[str, Any]) -> Project:
    """Convert dictionary to Project."""
    data = require_mapping(data, "project")
    return Project(
        id=int(data["id"]),
        name=data.get("name", ""),
        my_role=data.get("my_role", "member"),
    )
