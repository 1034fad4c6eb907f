"""
Preview endpoints for the navigation core.

Provides read-only REST endpoints that run the core on caller-supplied input:
- URL parse preview: route, navigation state, errors and canonical URL
- Hydration plan preview: commands a route needs for a given snapshot
- Section preview: admin sections visible to a role

Nothing is stored between requests; every call computes from its body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from scrumnav.runtime import query_codec
from scrumnav.runtime.hydration_planner import plan
from scrumnav.runtime.permissions import is_org_admin, visible_sections_for
from scrumnav.runtime.route_paths import (
    canonical_url,
    canonical_url_in,
    context_for_route,
    parse_location,
)
from scrumnav.runtime.types import (
    QueryContext,
    command_to_dict,
    nav_state_to_dict,
    parse_role,
    query_error_to_dict,
    route_from_dict,
    route_to_dict,
    snapshot_from_dict,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/preview", tags=["preview"])


# =============================================================================
# Pydantic Models
# =============================================================================


class ParsePreviewRequest(BaseModel):
    """Request for URL parse preview endpoint."""

    uri: str = Field(description="Application URL, e.g. '/app?project=7&view=cards'")
    context: Optional[QueryContext] = Field(
        default=None,
        description="Query context to parse with; derived from the path when omitted",
    )


class ParsePreviewResponse(BaseModel):
    """Response for URL parse preview endpoint."""

    kind: str = Field(description="'parsed' or 'redirect'")
    state: Dict[str, Any] = Field(description="Best-effort navigation state")
    errors: List[Dict[str, Any]] = Field(
        default_factory=list,
        description="Collected query errors, in encounter order",
    )
    route: Dict[str, Any] = Field(description="Route the path resolves to")
    canonical_url: str = Field(
        description="URL the address bar should show, rendered in the parse context"
    )


class PlanPreviewRequest(BaseModel):
    """Request for hydration plan preview endpoint."""

    uri: Optional[str] = Field(default=None, description="URL to plan for")
    route: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Serialized route to plan for (takes precedence over uri)",
    )
    snapshot: Dict[str, Any] = Field(
        default_factory=dict,
        description="Serialized snapshot; missing keys take their defaults",
    )


class PlanPreviewResponse(BaseModel):
    """Response for hydration plan preview endpoint."""

    route: Dict[str, Any] = Field(description="The route that was planned")
    commands: List[Dict[str, Any]] = Field(description="Planned commands, in order")


class SectionsPreviewResponse(BaseModel):
    """Response for visible sections preview endpoint."""

    sections: List[str] = Field(description="Admin section slugs, in menu order")


# =============================================================================
# Endpoints
# =============================================================================


@router.post("/parse", response_model=ParsePreviewResponse)
async def preview_parse(request: ParsePreviewRequest):
    """Parse a URL the way the client would.

    Args:
        request: The URL and an optional explicit query context.

    Returns:
        ParsePreviewResponse. When an explicit context is given, kind, state
        and errors come from parsing the query in that context, and
        canonical_url carries only the keys that context permits. The route
        always comes from the path.
    """
    location = parse_location(request.uri)
    context = request.context or context_for_route(location.route)
    if request.context is not None:
        result = query_codec.parse(request.uri, request.context)
        url = canonical_url_in(location, request.context, result.state)
    else:
        result = location.query
        url = canonical_url(location)

    logger.debug(
        "Parse preview for %s in %s context: %s",
        request.uri,
        context.value if context else "no",
        result.kind.value,
    )
    kind = result.kind.value
    if not location.recognized:
        kind = "redirect"
    return ParsePreviewResponse(
        kind=kind,
        state=nav_state_to_dict(result.state),
        errors=[query_error_to_dict(e) for e in result.errors],
        route=route_to_dict(location.route),
        canonical_url=url,
    )


@router.post("/plan", response_model=PlanPreviewResponse)
async def preview_plan(request: PlanPreviewRequest):
    """Compute the hydration plan for a route and snapshot.

    Args:
        request: A route (or URL) and a snapshot.

    Returns:
        PlanPreviewResponse with the planned commands.

    Raises:
        422: If neither route nor uri is given, or the route or snapshot
            body is malformed.
    """
    try:
        if request.route is not None:
            route = route_from_dict(request.route)
        elif request.uri is not None:
            route = parse_location(request.uri).route
        else:
            raise ValueError("either 'route' or 'uri' is required")
        snapshot = snapshot_from_dict(request.snapshot)
    except (ValueError, KeyError, TypeError) as e:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "invalid_plan_request",
                "message": str(e),
            },
        )

    commands = plan(route, snapshot)
    return PlanPreviewResponse(
        route=route_to_dict(route),
        commands=[command_to_dict(c) for c in commands],
    )


@router.get("/sections", response_model=SectionsPreviewResponse)
async def preview_sections(
    role: str = Query("member", description="Org role ('admin' or 'member')"),
    any_manager: bool = Query(False, description="Whether the user manages any project"),
):
    """List the admin sections visible to a role."""
    sections = visible_sections_for(is_org_admin(parse_role(role)), any_manager)
    return SectionsPreviewResponse(sections=[s.value for s in sections])
