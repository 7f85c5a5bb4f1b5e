import pytest

from internhub.core.exceptions import InvalidTransitionError
from internhub.services.status_rules import (
    APPLICATION_TRANSITIONS, COMPANY_TRANSITIONS, INTERNSHIP_TRANSITIONS,
    can_transition, ensure_transition, is_student, normalize_application_status,
    normalize_role
)


def test_legacy_user_role_is_a_student():
    assert normalize_role("user") == "student"
    assert normalize_role(None) == "student"
    assert normalize_role("admin") == "admin"
    assert is_student({"role": "user"})


def test_legacy_application_statuses_read_as_pending():
    assert normalize_application_status("applied") == "pending"
    assert normalize_application_status(None) == "pending"
    assert normalize_application_status("shortlisted") == "shortlisted"


@pytest.mark.parametrize("current,requested", [
    ("pending", "shortlisted"),
    ("shortlisted", "interviewed"),
    ("interviewed", "accepted"),
    ("interviewed", "withdrawn"),
])
def test_allowed_application_transitions(current, requested):
    assert can_transition(APPLICATION_TRANSITIONS, current, requested)


@pytest.mark.parametrize("terminal", ["accepted", "rejected", "withdrawn"])
def test_terminal_application_statuses(terminal):
    assert APPLICATION_TRANSITIONS[terminal] == frozenset()


def test_application_cannot_skip_to_accepted():
    assert not can_transition(APPLICATION_TRANSITIONS, "pending", "accepted")


def test_internship_and_company_tables():
    assert can_transition(INTERNSHIP_TRANSITIONS, "closed", "open")
    assert not can_transition(INTERNSHIP_TRANSITIONS, "open", "draft")
    assert can_transition(COMPANY_TRANSITIONS, "rejected", "pending")
    assert not can_transition(COMPANY_TRANSITIONS, "approved", "rejected")


def test_ensure_transition_reports_both_statuses():
    with pytest.raises(InvalidTransitionError) as excinfo:
        ensure_transition("company", COMPANY_TRANSITIONS, "approved", "pending")
    assert excinfo.value.status_code == 409
    assert "'approved'" in excinfo.value.message
    assert "'pending'" in excinfo.value.message
