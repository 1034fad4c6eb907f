"""
snapshot_reducer.py - Request bookkeeping on the Snapshot.

The planner only decides what to fetch. This module records what happens to
those fetches, as pure Snapshot -> Snapshot functions:

- begin_request(): mark the command's resource LOADING *before* the request
  is issued, and tag the request with the project scope it was made for.
- apply_response(): resolve LOADING to LOADED/FAILED on exactly the one
  matching field.

A response for a project-scoped resource whose ticket scope no longer
matches the scope the user is looking at is discarded, and the resource is
reset to NOT_ASKED so the next planning pass requests the right project.
A response for a resource that is not LOADING is dropped.

Usage:
    snapshot, ticket = begin_request(snapshot, command)
    data_service.request(ticket)
    ...
    snapshot = apply_response(snapshot, ticket, ResponseOutcome.success(data), route.project_id)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from scrumnav.runtime.permissions import any_project_manager
from scrumnav.runtime.types import (
    SCOPE_FIELDS,
    AuthState,
    Command,
    CommandKind,
    Project,
    ResourceState,
    Role,
    Snapshot,
    parse_role,
    project_from_dict,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestTicket:
    """A dispatched fetch tagged with the project scope active at dispatch."""

    command: Command
    scope_id: Optional[int] = None

    @property
    def resource(self) -> str:
        return self.command.resource or ""


@dataclass(frozen=True)
class ResponseOutcome:
    """What the Data Service reported for one request."""

    ok: bool
    payload: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, payload: Any = None) -> "ResponseOutcome":
        return cls(True, payload=payload)

    @classmethod
    def failure(cls, error: str) -> "ResponseOutcome":
        return cls(False, error=error)


def begin_request(snapshot: Snapshot, command: Command) -> Tuple[Snapshot, Optional[RequestTicket]]:
    """Mark a fetch as in flight.

    Returns:
        The updated snapshot and a ticket for the request. Redirects are not
        requests and yield no ticket.
    """
    if command.is_redirect or command.resource is None:
        return snapshot, None
    updated = replace(snapshot, **{command.resource: ResourceState.LOADING})
    return updated, RequestTicket(command, command.project_id)


def begin_requests(
    snapshot: Snapshot, commands: Iterable[Command]
) -> Tuple[Snapshot, List[RequestTicket]]:
    """begin_request() for every fetch in a plan."""
    tickets: List[RequestTicket] = []
    for command in commands:
        snapshot, ticket = begin_request(snapshot, command)
        if ticket is not None:
            tickets.append(ticket)
    return snapshot, tickets


def _role_from_payload(payload: Any) -> Role:
    """Extract the org role from an identity payload.

    Accepts a Role, a role string, or a mapping with ``org_role``/``role``.
    """
    if isinstance(payload, Role):
        return payload
    if isinstance(payload, Mapping):
        return parse_role(payload.get("org_role") or payload.get("role"))
    if isinstance(payload, str):
        return parse_role(payload)
    return parse_role(None)


def _projects_from_payload(payload: Any) -> Tuple[Project, ...]:
    projects: List[Project] = []
    for item in payload or ():
        projects.append(item if isinstance(item, Project) else project_from_dict(item))
    return tuple(projects)


def apply_response(
    snapshot: Snapshot,
    ticket: RequestTicket,
    outcome: ResponseOutcome,
    current_scope_id: Optional[int] = None,
) -> Snapshot:
    """Resolve an in-flight request.

    Args:
        snapshot: Current snapshot.
        ticket: The ticket returned by begin_request().
        outcome: What the Data Service reported.
        current_scope_id: Project the user is looking at now. Only consulted
            for project-scoped resources.

    Returns:
        The updated snapshot. Exactly one resource field changes (plus the
        auth state for FETCH_ME and the project list for FETCH_PROJECTS).
    """
    command = ticket.command
    resource = command.resource
    if resource is None:
        return snapshot

    if snapshot.state_of(resource) is not ResourceState.LOADING:
        logger.debug(
            "Dropping %s response: resource is %s, not loading",
            command.kind.value,
            snapshot.state_of(resource).value,
        )
        return snapshot

    scope_field = SCOPE_FIELDS.get(resource)
    if scope_field is not None and ticket.scope_id != current_scope_id:
        logger.debug(
            "Discarding stale %s response for project %s (now viewing %s)",
            command.kind.value,
            ticket.scope_id,
            current_scope_id,
        )
        return replace(snapshot, **{resource: ResourceState.NOT_ASKED})

    if not outcome.ok:
        logger.debug("%s failed: %s", command.kind.value, outcome.error)

    if command.kind is CommandKind.FETCH_ME:
        if outcome.ok:
            return replace(
                snapshot,
                me=ResourceState.LOADED,
                auth=AuthState.authed(_role_from_payload(outcome.payload)),
            )
        return replace(snapshot, me=ResourceState.FAILED, auth=AuthState.unauthed())

    if command.kind is CommandKind.FETCH_PROJECTS and outcome.ok:
        projects = _projects_from_payload(outcome.payload)
        return replace(
            snapshot,
            projects=ResourceState.LOADED,
            project_list=projects,
            is_any_project_manager=any_project_manager(projects),
        )

    updates = {resource: ResourceState.LOADED if outcome.ok else ResourceState.FAILED}
    if scope_field is not None and outcome.ok:
        updates[scope_field] = ticket.scope_id
    return replace(snapshot, **updates)
