"""
Test fixtures for the navigation core tests.

This module provides reusable snapshots, projects and a config reset so that
each test starts from the YAML/default configuration.
"""

import sys
from pathlib import Path

import pytest

_repo_root = Path(__file__).parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from scrumnav.config.runtime_config import reset_config  # noqa: E402
from scrumnav.runtime.types import (  # noqa: E402
    AuthState,
    Project,
    ResourceState,
    Role,
    Snapshot,
)

# ============================================================================
# Configuration
# ============================================================================

_CONFIG_ENV_VARS = (
    "SCRUMNAV_LOG_LEVEL",
    "SCRUMNAV_API_HOST",
    "SCRUMNAV_API_PORT",
    "SCRUMNAV_MAX_REDIRECT_HOPS",
    "SCRUMNAV_DEFAULT_CONFIG_SECTION",
    "SCRUMNAV_DEFAULT_ORG_SECTION",
)


@pytest.fixture(autouse=True)
def clean_config(monkeypatch):
    """Clear SCRUMNAV_* overrides and the config cache around every test."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


# ============================================================================
# Projects
# ============================================================================


@pytest.fixture
def managed_project() -> Project:
    return Project(id=1, name="Platform", my_role="manager")


@pytest.fixture
def plain_project() -> Project:
    return Project(id=2, name="Website", my_role="member")


# ============================================================================
# Snapshots
# ============================================================================


@pytest.fixture
def unknown_snapshot() -> Snapshot:
    """Fresh client: identity not yet probed."""
    return Snapshot()


@pytest.fixture
def admin_snapshot(managed_project, plain_project) -> Snapshot:
    """Org admin with the project list loaded."""
    return Snapshot(
        auth=AuthState.authed(Role.ADMIN),
        me=ResourceState.LOADED,
        projects=ResourceState.LOADED,
        project_list=(managed_project, plain_project),
        is_any_project_manager=True,
    )


@pytest.fixture
def member_snapshot() -> Snapshot:
    """Org member whose project list has not been requested yet."""
    return Snapshot(auth=AuthState.authed(Role.MEMBER), me=ResourceState.LOADED)


@pytest.fixture
def manager_snapshot(managed_project, plain_project) -> Snapshot:
    """Org member who manages project 1 but not project 2."""
    return Snapshot(
        auth=AuthState.authed(Role.MEMBER),
        me=ResourceState.LOADED,
        projects=ResourceState.LOADED,
        project_list=(managed_project, plain_project),
        is_any_project_manager=True,
    )
