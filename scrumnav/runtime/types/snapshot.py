"""Snapshot: the immutable aggregate the hydration planner reads.

A Snapshot carries the auth state, one ResourceState per cacheable
resource, the loaded project list, and for project-scoped caches the
project id the cache currently reflects. It is replaced wholesale on each
update (``dataclasses.replace``), never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .resources import (
    AuthState,
    Project,
    ResourceState,
    auth_state_from_dict,
    auth_state_to_dict,
    project_from_dict,
    project_to_dict,
    require_mapping,
)

# Project-scoped resource field -> field holding the project id it reflects
SCOPE_FIELDS: Dict[str, str] = {
    "members": "members_project_id",
    "task_types": "task_types_project_id",
    "org_metrics_project_tasks": "org_metrics_project_id",
}


@dataclass(frozen=True)
class Snapshot:
    """Aggregate of auth, resource-loading states and project-scope tags.

    Attributes:
        auth: Identity probe outcome.
        me: State of the identity probe request itself.
        projects .. org_metrics_project_tasks: One state per cached resource.
        project_list: Projects visible to the user, valid when projects
            is LOADED.
        is_any_project_manager: Whether the user manages any project,
            valid only when projects is LOADED.
        members_project_id: Project the members cache reflects.
        task_types_project_id: Project the task types cache reflects.
        org_metrics_project_id: Project the per-project metrics cache
            reflects.
    """

    auth: AuthState = field(default_factory=AuthState.unknown)
    me: ResourceState = ResourceState.NOT_ASKED
    projects: ResourceState = ResourceState.NOT_ASKED
    invite_links: ResourceState = ResourceState.NOT_ASKED
    capabilities: ResourceState = ResourceState.NOT_ASKED
    me_capability_ids: ResourceState = ResourceState.NOT_ASKED
    org_settings_users: ResourceState = ResourceState.NOT_ASKED
    org_users_cache: ResourceState = ResourceState.NOT_ASKED
    members: ResourceState = ResourceState.NOT_ASKED
    task_types: ResourceState = ResourceState.NOT_ASKED
    member_tasks: ResourceState = ResourceState.NOT_ASKED
    work_sessions: ResourceState = ResourceState.NOT_ASKED
    me_metrics: ResourceState = ResourceState.NOT_ASKED
    org_metrics_overview: ResourceState = ResourceState.NOT_ASKED
    org_metrics_project_tasks: ResourceState = ResourceState.NOT_ASKED
    project_list: Tuple[Project, ...] = ()
    is_any_project_manager: bool = False
    members_project_id: Optional[int] = None
    task_types_project_id: Optional[int] = None
    org_metrics_project_id: Optional[int] = None

    def state_of(self, resource: str) -> ResourceState:
        """Look up a resource state by field name."""
        if resource not in RESOURCE_FIELDS:
            raise KeyError(f"Unknown resource: {resource}")
        return getattr(self, resource)

    def scope_of(self, resource: str) -> Optional[int]:
        """Project id a project-scoped cache reflects (None otherwise)."""
        scope_field = SCOPE_FIELDS.get(resource)
        if scope_field is None:
            return None
        return getattr(self, scope_field)

    def find_project(self, project_id: Optional[int]) -> Optional[Project]:
        if project_id is None:
            return None
        for project in self.project_list:
            if project.id == project_id:
                return project
        return None


RESOURCE_FIELDS: Tuple[str, ...] = (
    "me",
    "projects",
    "invite_links",
    "capabilities",
    "me_capability_ids",
    "org_settings_users",
    "org_users_cache",
    "members",
    "task_types",
    "member_tasks",
    "work_sessions",
    "me_metrics",
    "org_metrics_overview",
    "org_metrics_project_tasks",
)


def snapshot_to_dict(snapshot: Snapshot) -> Dict[str, Any]:
    """Convert Snapshot to dictionary for serialization."""
    data: Dict[str, Any] = {"auth": auth_state_to_dict(snapshot.auth)}
    for name in RESOURCE_FIELDS:
        data[name] = getattr(snapshot, name).value
    data["project_list"] = [project_to_dict(p) for p in snapshot.project_list]
    data["is_any_project_manager"] = snapshot.is_any_project_manager
    for scope_field in SCOPE_FIELDS.values():
        data[scope_field] = getattr(snapshot, scope_field)
    return data


def snapshot_from_dict(data: Dict[str, Any]) -> Snapshot:
    """Convert dictionary to Snapshot.

    Missing keys take their defaults, so partial snapshots are accepted.

    Raises:
        ValueError: If the value is not a mapping, or a resource state or
            auth value is unknown.
    """
    data = require_mapping(data, "snapshot")
    kwargs: Dict[str, Any] = {}
    if "auth" in data:
        kwargs["auth"] = auth_state_from_dict(data["auth"])
    for name in RESOURCE_FIELDS:
        if name in data:
            kwargs[name] = ResourceState(data[name])
    if "project_list" in data:
        kwargs["project_list"] = tuple(project_from_dict(p) for p in data["project_list"])
    if "is_any_project_manager" in data:
        kwargs["is_any_project_manager"] = bool(data["is_any_project_manager"])
    for scope_field in SCOPE_FIELDS.values():
        if scope_field in data:
            kwargs[scope_field] = data[scope_field]
    return Snapshot(**kwargs)
