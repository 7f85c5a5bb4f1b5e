"""
Roles and status transitions.

Permission checks are role comparisons; status changes are validated
against per-entity transition tables.
"""

from typing import Dict, FrozenSet, Optional

from internhub.core.exceptions import InvalidTransitionError

STUDENT_ROLES = frozenset({"student", "user"})


def normalize_role(role: Optional[str]) -> str:
    if role in STUDENT_ROLES or not role:
        return "student"
    return role


def is_student(user: dict) -> bool:
    return normalize_role(user.get("role")) == "student"


def is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


def is_superadmin(user: dict) -> bool:
    return user.get("role") == "superadmin"


# ============================================================
# TRANSITION TABLES
# ============================================================

APPLICATION_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"shortlisted", "rejected", "withdrawn"}),
    "shortlisted": frozenset({"interviewed", "rejected", "withdrawn"}),
    "interviewed": frozenset({"accepted", "rejected", "withdrawn"}),
    "accepted": frozenset(),
    "rejected": frozenset(),
    "withdrawn": frozenset(),
}

# Statuses only a reviewer (owning admin / superadmin) may set
REVIEWER_STATUSES = frozenset({"shortlisted", "interviewed", "accepted", "rejected"})
# Statuses only the applicant may set
APPLICANT_STATUSES = frozenset({"withdrawn"})

INTERNSHIP_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "draft": frozenset({"open", "closed"}),
    "open": frozenset({"closed"}),
    "closed": frozenset({"open"}),
}

COMPANY_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "pending": frozenset({"approved", "rejected"}),
    "approved": frozenset({"suspended"}),
    "suspended": frozenset({"approved"}),
    "rejected": frozenset({"pending"}),
}

# Companies in these states cannot post and are hidden from public listings
INACTIVE_COMPANY_STATUSES = frozenset({"rejected", "suspended"})

# Legacy status names still found in the document store
_APPLICATION_ALIASES = {"applied": "pending", "reviewing": "pending"}


def normalize_application_status(status: Optional[str]) -> str:
    if not status:
        return "pending"
    return _APPLICATION_ALIASES.get(status, status)


def can_transition(table: Dict[str, FrozenSet[str]], current: str, requested: str) -> bool:
    return requested in table.get(current, frozenset())


def ensure_transition(entity: str, table: Dict[str, FrozenSet[str]], current: str, requested: str) -> None:
    """Raise InvalidTransitionError unless current -> requested is allowed."""
    if not can_transition(table, current, requested):
        raise InvalidTransitionError(entity, current, requested)
