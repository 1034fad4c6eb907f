"""
view_tokens.py - Centralized URL token vocabulary.

This module provides the single source of truth for the tokens that appear in
application URLs: view modes in the ``view=`` query parameter and section
slugs in paths. The query codec and the route path mapping both import from
here instead of keeping their own tables.

Token Vocabulary:
- Member views: pool, list, cards, people
- Assignments views: by-project, by-user
- Admin sections: invites, org-settings, projects, assignments, metrics,
  members, capabilities, task-types, workflows, task-templates
- Member sections: pool (path /app), my-bar, skills
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from scrumnav.runtime.types import (
    AdminSection,
    AssignmentsView,
    MemberSection,
    MemberView,
    ViewParam,
)

logger = logging.getLogger(__name__)


# =============================================================================
# VIEW TOKENS - tried in this order: member first, then assignments
# =============================================================================

MEMBER_VIEW_TOKENS: Dict[str, MemberView] = {view.value: view for view in MemberView}

ASSIGNMENTS_VIEW_TOKENS: Dict[str, AssignmentsView] = {
    view.value: view for view in AssignmentsView
}

# =============================================================================
# SECTION SLUGS
# =============================================================================

ADMIN_SECTION_SLUGS: Dict[str, AdminSection] = {
    section.value: section for section in AdminSection
}

MEMBER_SECTION_SLUGS: Dict[str, MemberSection] = {
    section.value: section for section in MemberSection
}


def resolve_view_token(token: str) -> Optional[ViewParam]:
    """Resolve a ``view=`` token to a view parameter.

    The member vocabulary is tried first; falling through, the assignments
    vocabulary is tried.

    Args:
        token: The decoded query value (case-sensitive).

    Returns:
        The MemberView or AssignmentsView, or None if the token belongs to
        neither vocabulary.
    """
    member_view = MEMBER_VIEW_TOKENS.get(token)
    if member_view is not None:
        return member_view

    assignments_view = ASSIGNMENTS_VIEW_TOKENS.get(token)
    if assignments_view is not None:
        return assignments_view

    logger.debug("Unrecognized view token '%s'", token)
    return None


def view_token(view: ViewParam) -> str:
    """Get the canonical URL token for a view parameter."""
    return view.value


def parse_admin_section(slug: str) -> Optional[AdminSection]:
    """Resolve an admin section slug from a path segment."""
    return ADMIN_SECTION_SLUGS.get(slug.strip().lower())


def parse_member_section(slug: str) -> Optional[MemberSection]:
    """Resolve a member section slug from a path segment."""
    return MEMBER_SECTION_SLUGS.get(slug.strip().lower())


def is_member_view(view: Optional[ViewParam]) -> bool:
    return isinstance(view, MemberView)


def is_assignments_view(view: Optional[ViewParam]) -> bool:
    return isinstance(view, AssignmentsView)
