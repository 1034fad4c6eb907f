# scrumnav/runtime package
# Navigation state resolution and hydration planning for the web client.
#
# Core components:
#   - types: Value types (Route, Command, Snapshot, NavState, ...)
#   - query_codec: Parse/serialize the navigation query string per context
#   - permissions: Access predicates and visible section tables
#   - hydration_planner: (Route, Snapshot) -> Commands
#   - workspace_state: Load lifecycle of the selected project's working set
#   - route_paths: URL <-> Route mapping
#   - snapshot_reducer: Scope-tagged request bookkeeping on the Snapshot
#   - hydration_runtime: Glue between the core and its collaborators
#
# Usage:
#     from scrumnav.runtime import plan, parse_location
#     location = parse_location("/config/members?project=3")
#     commands = plan(location.route, snapshot)

from typing import TYPE_CHECKING

from .types import (
    AuthState,
    Command,
    CommandKind,
    NavState,
    QueryContext,
    ResourceState,
    Route,
    RouteKind,
    Snapshot,
)

# TYPE_CHECKING stubs for static type checkers
# These allow `from scrumnav.runtime import plan` to type-check correctly
# while still using lazy imports at runtime to avoid circular dependencies
if TYPE_CHECKING:
    from .hydration_planner import plan as plan
    from .hydration_runtime import HydrationRuntime as HydrationRuntime
    from .route_paths import parse_location as parse_location

__all__ = [
    # Types
    "AuthState",
    "Command",
    "CommandKind",
    "NavState",
    "QueryContext",
    "ResourceState",
    "Route",
    "RouteKind",
    "Snapshot",
    # Lazily imported
    "plan",
    "parse_location",
    "HydrationRuntime",
]


def __getattr__(name: str):
    """Lazy import for planner and runtime to avoid circular dependencies."""
    if name == "plan":
        from .hydration_planner import plan

        return plan
    if name == "parse_location":
        from .route_paths import parse_location

        return parse_location
    if name == "HydrationRuntime":
        from .hydration_runtime import HydrationRuntime

        return HydrationRuntime
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
