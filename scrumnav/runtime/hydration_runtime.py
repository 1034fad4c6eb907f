"""
hydration_runtime.py - Event-driven glue between the core and its collaborators.

Control flow:

    URL change -> parse_location -> (canonicalize) -> plan -> dispatch
    response   -> apply_response -> plan -> dispatch

The runtime owns the current Snapshot and Location. It does no transport
itself: fetches go to a DataService, URL changes to a Router. Responses are
delivered later through on_response(); a DataService must not call back
synchronously from request().

Usage:
    runtime = HydrationRuntime(data_service, router)
    runtime.navigate("/config/members?project=3")
    ...
    runtime.on_response(ticket, ResponseOutcome.success(payload))
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from scrumnav.config.runtime_config import get_max_redirect_hops
from scrumnav.runtime.hydration_planner import plan
from scrumnav.runtime.route_paths import Location, canonical_url, format_route, parse_location
from scrumnav.runtime.snapshot_reducer import (
    RequestTicket,
    ResponseOutcome,
    apply_response,
    begin_requests,
)
from scrumnav.runtime.types import Command, Route, Snapshot

logger = logging.getLogger(__name__)


class DataService(Protocol):
    """Performs the named read for a ticket and reports back later."""

    def request(self, ticket: RequestTicket) -> None: ...


class Router(Protocol):
    """Replaces the browser address (replace-history)."""

    def replace_url(self, url: str) -> None: ...


class HydrationRuntime:
    """Drive planning for the current location and dispatch its commands.

    Attributes:
        snapshot: The current snapshot (replaced on every update).
        location: The location being rendered, None before navigate().
    """

    def __init__(
        self,
        data_service: DataService,
        router: Router,
        snapshot: Optional[Snapshot] = None,
        max_redirect_hops: Optional[int] = None,
    ):
        self._data_service = data_service
        self._router = router
        self._snapshot = snapshot if snapshot is not None else Snapshot()
        self._location: Optional[Location] = None
        self._max_redirect_hops = (
            max_redirect_hops if max_redirect_hops is not None else get_max_redirect_hops()
        )

    @property
    def snapshot(self) -> Snapshot:
        return self._snapshot

    @property
    def location(self) -> Optional[Location]:
        return self._location

    @property
    def route(self) -> Optional[Route]:
        return self._location.route if self._location is not None else None

    def navigate(self, uri: str) -> List[Command]:
        """Handle a URL change.

        Returns:
            The commands planned for the final location (after following
            redirects).
        """
        return self._navigate(uri, hops=0)

    def on_response(self, ticket: RequestTicket, outcome: ResponseOutcome) -> List[Command]:
        """Fold a Data Service result into the snapshot and re-plan."""
        scope_id = self.route.project_id if self.route is not None else None
        self._snapshot = apply_response(self._snapshot, ticket, outcome, scope_id)
        if self._location is None:
            return []
        return self._hydrate(hops=0)

    def _navigate(self, uri: str, hops: int) -> List[Command]:
        location = parse_location(uri)
        self._location = location
        if location.needs_canonical_url:
            url = canonical_url(location)
            logger.info("Canonicalizing %s -> %s", uri, url)
            self._router.replace_url(url)
        return self._hydrate(hops)

    def _hydrate(self, hops: int) -> List[Command]:
        assert self._location is not None
        commands = plan(self._location.route, self._snapshot)

        redirect = next((command for command in commands if command.is_redirect), None)
        if redirect is not None and redirect.route is not None:
            if hops >= self._max_redirect_hops:
                logger.warning(
                    "Redirect limit (%d) reached at %s, not following",
                    self._max_redirect_hops,
                    self._location.route.kind.value,
                )
                return commands
            url = format_route(redirect.route)
            logger.info("Redirecting %s -> %s", self._location.route.kind.value, url)
            self._router.replace_url(url)
            return self._navigate(url, hops + 1)

        self._snapshot, tickets = begin_requests(self._snapshot, commands)
        for ticket in tickets:
            self._data_service.request(ticket)
        return commands
