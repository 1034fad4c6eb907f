"""
permissions.py - Pure access predicates for the admin/config area.

Section visibility is an enumeration of four fixed tables selected by the
pair (is_org_admin, any_project_manager) rather than a per-section
computation. can_access_section() and visible_sections() must be updated
together when a section is added.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

from scrumnav.runtime.types import (
    ORG_LEVEL_SECTIONS,
    PROJECT_SCOPED_SECTIONS,
    AdminSection,
    Project,
    Role,
)

# =============================================================================
# Visible section tables
# =============================================================================

ADMIN_WITH_MANAGED_PROJECTS_SECTIONS: Tuple[AdminSection, ...] = (
    AdminSection.INVITES,
    AdminSection.ORG_SETTINGS,
    AdminSection.PROJECTS,
    AdminSection.ASSIGNMENTS,
    AdminSection.METRICS,
    AdminSection.MEMBERS,
    AdminSection.CAPABILITIES,
    AdminSection.TASK_TYPES,
    AdminSection.WORKFLOWS,
    AdminSection.TASK_TEMPLATES,
)

# Org admins pass every project-scoped check, managed projects or not
ADMIN_SECTIONS: Tuple[AdminSection, ...] = ADMIN_WITH_MANAGED_PROJECTS_SECTIONS

MANAGER_SECTIONS: Tuple[AdminSection, ...] = (
    AdminSection.MEMBERS,
    AdminSection.CAPABILITIES,
    AdminSection.TASK_TYPES,
    AdminSection.WORKFLOWS,
    AdminSection.TASK_TEMPLATES,
)

NO_SECTIONS: Tuple[AdminSection, ...] = ()

# (is_org_admin, any_project_manager) -> visible sections
_VISIBLE_SECTIONS: Dict[Tuple[bool, bool], Tuple[AdminSection, ...]] = {
    (True, True): ADMIN_WITH_MANAGED_PROJECTS_SECTIONS,
    (True, False): ADMIN_SECTIONS,
    (False, True): MANAGER_SECTIONS,
    (False, False): NO_SECTIONS,
}


# =============================================================================
# Predicates
# =============================================================================


def is_org_admin(role: Optional[Role]) -> bool:
    return role is Role.ADMIN


def is_project_manager(project: Project) -> bool:
    return project.is_managed


def any_project_manager(projects: Iterable[Project]) -> bool:
    return any(is_project_manager(p) for p in projects)


def is_org_level(section: AdminSection) -> bool:
    return section in ORG_LEVEL_SECTIONS


def is_project_scoped(section: AdminSection) -> bool:
    return section in PROJECT_SCOPED_SECTIONS


def can_access_section(
    section: AdminSection,
    role: Optional[Role],
    projects: Iterable[Project],
    selected_project: Optional[Project],
) -> bool:
    """Decide whether the user may open a section.

    Org-level sections require org admin. Project-scoped sections require
    org admin, or management of the selected project, or (with no project
    selected) management of any project.

    Args:
        section: The section being opened.
        role: The user's org role.
        projects: Projects visible to the user.
        selected_project: The project the page is scoped to, if any.

    Returns:
        True if access is granted.
    """
    if is_org_admin(role):
        return True
    if is_org_level(section):
        return False
    if selected_project is not None:
        return is_project_manager(selected_project)
    return any_project_manager(projects)


def visible_sections(role: Optional[Role], projects: Iterable[Project]) -> Tuple[AdminSection, ...]:
    """Ordered sections shown in the admin navigation for this user."""
    return visible_sections_for(is_org_admin(role), any_project_manager(projects))


def visible_sections_for(org_admin: bool, manages_any_project: bool) -> Tuple[AdminSection, ...]:
    return _VISIBLE_SECTIONS[(bool(org_admin), bool(manages_any_project))]
