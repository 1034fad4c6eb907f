"""
workspace_state.py - Load lifecycle of the selected project's working set.

States:
    NO_PROJECT                  nothing selected
    LOADING(project_id)         a load for project_id is in flight
    READY(workspace)            workspace for the selected project is loaded
    ERROR(project_id, message)  the load for project_id failed

Every transition is a total function returning a new WorkspaceState. A
newer selection always preempts an older load; a result that does not
belong to the load in flight is dropped and the state returned unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


class WorkspaceStatus(str, Enum):
    NO_PROJECT = "no_project"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(frozen=True)
class Workspace:
    """One project's working set, swapped in atomically."""

    project_id: int
    tasks: Tuple[Any, ...] = ()
    cards: Tuple[Any, ...] = ()
    members: Tuple[Any, ...] = ()
    capabilities: Tuple[Any, ...] = ()
    task_types: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class WorkspaceState:
    status: WorkspaceStatus = WorkspaceStatus.NO_PROJECT
    project_id: Optional[int] = None
    workspace: Optional[Workspace] = None
    message: Optional[str] = None

    @classmethod
    def no_project(cls) -> "WorkspaceState":
        return cls()

    @classmethod
    def loading(cls, project_id: int) -> "WorkspaceState":
        return cls(WorkspaceStatus.LOADING, project_id=project_id)

    @classmethod
    def ready(cls, workspace: Workspace) -> "WorkspaceState":
        return cls(WorkspaceStatus.READY, project_id=workspace.project_id, workspace=workspace)

    @classmethod
    def error(cls, project_id: int, message: str) -> "WorkspaceState":
        return cls(WorkspaceStatus.ERROR, project_id=project_id, message=message)


def select_project(state: WorkspaceState, project_id: int) -> WorkspaceState:
    """Start loading a project's workspace, from any state."""
    if state.status is WorkspaceStatus.LOADING and state.project_id != project_id:
        logger.debug(
            "Workspace load for project %s preempted by project %s",
            state.project_id,
            project_id,
        )
    return WorkspaceState.loading(project_id)


def workspace_loaded(state: WorkspaceState, workspace: Workspace) -> WorkspaceState:
    """Accept a loaded workspace only if it is the load in flight."""
    if state.status is WorkspaceStatus.LOADING and state.project_id == workspace.project_id:
        return WorkspaceState.ready(workspace)
    logger.debug(
        "Dropping stale workspace for project %s (state=%s, project=%s)",
        workspace.project_id,
        state.status.value,
        state.project_id,
    )
    return state


def workspace_failed(state: WorkspaceState, message: str) -> WorkspaceState:
    """Record a failure for the load in flight; otherwise no change."""
    if state.status is WorkspaceStatus.LOADING and state.project_id is not None:
        return WorkspaceState.error(state.project_id, message)
    logger.debug("Ignoring workspace failure in state %s: %s", state.status.value, message)
    return state


def clear_project(state: WorkspaceState) -> WorkspaceState:
    return WorkspaceState.no_project()


def update_workspace(
    state: WorkspaceState,
    update: Callable[[Workspace], Workspace],
) -> WorkspaceState:
    """Apply ``update`` to the ready workspace; other states pass through.

    The state is rebuilt from the updated workspace, so its project id always
    matches the workspace it holds.
    """
    if state.status is WorkspaceStatus.READY and state.workspace is not None:
        return WorkspaceState.ready(update(state.workspace))
    return state
