"""Command types: the output of hydration planning.

Each fetch command names exactly one Data Service read and maps to exactly
one Snapshot resource field (COMMAND_RESOURCES). REDIRECT is the contract
with the Router. Commands are created fresh by every plan() call and are
never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from .routes import Route, route_from_dict, route_to_dict


class CommandKind(str, Enum):
    """Fetch intents plus the redirect intent."""

    FETCH_ME = "fetch_me"
    FETCH_PROJECTS = "fetch_projects"
    FETCH_INVITE_LINKS = "fetch_invite_links"
    FETCH_CAPABILITIES = "fetch_capabilities"
    FETCH_ME_CAPABILITY_IDS = "fetch_me_capability_ids"
    FETCH_ORG_SETTINGS_USERS = "fetch_org_settings_users"
    FETCH_ORG_USERS_CACHE = "fetch_org_users_cache"
    FETCH_MEMBERS = "fetch_members"
    FETCH_TASK_TYPES = "fetch_task_types"
    REFRESH_MEMBER = "refresh_member"
    FETCH_WORK_SESSIONS = "fetch_work_sessions"
    FETCH_ME_METRICS = "fetch_me_metrics"
    FETCH_ORG_METRICS_OVERVIEW = "fetch_org_metrics_overview"
    FETCH_ORG_METRICS_PROJECT_TASKS = "fetch_org_metrics_project_tasks"
    REDIRECT = "redirect"


# Fetches that target a single project's cache
PROJECT_SCOPED_COMMANDS: FrozenSet[CommandKind] = frozenset(
    {
        CommandKind.FETCH_MEMBERS,
        CommandKind.FETCH_TASK_TYPES,
        CommandKind.FETCH_ORG_METRICS_PROJECT_TASKS,
    }
)

# Fetch kind -> name of the Snapshot field it resolves
COMMAND_RESOURCES: Dict[CommandKind, str] = {
    CommandKind.FETCH_ME: "me",
    CommandKind.FETCH_PROJECTS: "projects",
    CommandKind.FETCH_INVITE_LINKS: "invite_links",
    CommandKind.FETCH_CAPABILITIES: "capabilities",
    CommandKind.FETCH_ME_CAPABILITY_IDS: "me_capability_ids",
    CommandKind.FETCH_ORG_SETTINGS_USERS: "org_settings_users",
    CommandKind.FETCH_ORG_USERS_CACHE: "org_users_cache",
    CommandKind.FETCH_MEMBERS: "members",
    CommandKind.FETCH_TASK_TYPES: "task_types",
    CommandKind.REFRESH_MEMBER: "member_tasks",
    CommandKind.FETCH_WORK_SESSIONS: "work_sessions",
    CommandKind.FETCH_ME_METRICS: "me_metrics",
    CommandKind.FETCH_ORG_METRICS_OVERVIEW: "org_metrics_overview",
    CommandKind.FETCH_ORG_METRICS_PROJECT_TASKS: "org_metrics_project_tasks",
}


@dataclass(frozen=True)
class Command:
    """A single intent produced by the planner.

    Attributes:
        kind: The intent.
        project_id: Target project for project-scoped fetches.
        route: Destination for REDIRECT.
    """

    kind: CommandKind
    project_id: Optional[int] = None
    route: Optional[Route] = None

    @classmethod
    def fetch(cls, kind: CommandKind, project_id: Optional[int] = None) -> "Command":
        """Build a fetch command.

        Raises:
            ValueError: If kind is REDIRECT, or a project-scoped kind is
                given no project id.
        """
        if kind is CommandKind.REDIRECT:
            raise ValueError("use Command.redirect() for redirects")
        if kind in PROJECT_SCOPED_COMMANDS and project_id is None:
            raise ValueError(f"{kind.value} requires a project id")
        if kind not in PROJECT_SCOPED_COMMANDS:
            project_id = None
        return cls(kind, project_id=project_id)

    @classmethod
    def redirect(cls, route: Route) -> "Command":
        return cls(CommandKind.REDIRECT, route=route)

    @property
    def is_redirect(self) -> bool:
        return self.kind is CommandKind.REDIRECT

    @property
    def resource(self) -> Optional[str]:
        """Snapshot field this command resolves, None for redirects."""
        return COMMAND_RESOURCES.get(self.kind)


def command_to_dict(command: Command) -> Dict[str, Any]:
    """Convert Command to dictionary for serialization."""
    data: Dict[str, Any] = {"kind": command.kind.value}
    if command.kind in PROJECT_SCOPED_COMMANDS:
        data["project_id"] = command.project_id
    if command.route is not None:
        data["route"] = route_to_dict(command.route)
    return data


def command_from_dict(data: Dict[str, Any]) -> Command:
    """Convert dictionary to Command."""
    kind = CommandKind(data["kind"])
    if kind is CommandKind.REDIRECT:
        return Command.redirect(route_from_dict(data["route"]))
    return Command.fetch(kind, data.get("project_id"))
