from datetime import datetime

import pytest

from drims.db import JournalRecord
from drims.errors import InvalidStateTransition, ValidationError
from drims.models import ApprovalAction, ApprovalStatus
from drims.services.workflow import (
    allowed_actions,
    apply_transition,
    ensure_owner_editable,
    next_status,
)

NOW = datetime(2025, 3, 1, 12, 0)


def _journal(status: ApprovalStatus = ApprovalStatus.SUBMITTED, remarks: str | None = None) -> JournalRecord:
    return JournalRecord(
        owner_kind="FACULTY",
        owner_id="F1",
        title="Deep Nets",
        year=2024,
        approval_status=status.value,
        remarks=remarks,
    )


@pytest.mark.parametrize(
    ("current", "action", "expected"),
    [
        (ApprovalStatus.SUBMITTED, ApprovalAction.APPROVE, ApprovalStatus.APPROVED),
        (ApprovalStatus.SENT_BACK, ApprovalAction.REJECT, ApprovalStatus.REJECTED),
        (ApprovalStatus.SUBMITTED, ApprovalAction.SEND_BACK, ApprovalStatus.SENT_BACK),
        (ApprovalStatus.APPROVED, ApprovalAction.LOCK, ApprovalStatus.LOCKED),
    ],
)
def test_next_status_table(current, action, expected) -> None:
    assert next_status(current, action) is expected


@pytest.mark.parametrize(
    ("current", "action"),
    [
        (ApprovalStatus.SUBMITTED, ApprovalAction.LOCK),
        (ApprovalStatus.LOCKED, ApprovalAction.APPROVE),
        (ApprovalStatus.REJECTED, ApprovalAction.SEND_BACK),
        (ApprovalStatus.APPROVED, ApprovalAction.REJECT),
    ],
)
def test_next_status_rejects_illegal_moves(current, action) -> None:
    with pytest.raises(InvalidStateTransition):
        next_status(current, action)


def test_terminal_states_have_no_actions() -> None:
    assert allowed_actions(ApprovalStatus.LOCKED) == []
    assert allowed_actions(ApprovalStatus.REJECTED) == []
    assert allowed_actions(ApprovalStatus.APPROVED) == [ApprovalAction.LOCK]


def test_approve_records_reviewer_and_clears_remarks() -> None:
    record = _journal(ApprovalStatus.SENT_BACK, remarks="add DOI")
    apply_transition(record, ApprovalAction.APPROVE, admin_id="admin-1", now=NOW)

    assert record.approval_status == "APPROVED"
    assert record.approved_by == "admin-1"
    assert record.approved_at == NOW
    assert record.remarks is None
    assert record.updated_at == NOW


def test_reject_requires_remarks() -> None:
    record = _journal()
    with pytest.raises(ValidationError):
        apply_transition(record, ApprovalAction.REJECT, admin_id="admin-1", remarks="  ")
    assert record.approval_status == "SUBMITTED"


def test_send_back_without_remarks_keeps_existing_remarks() -> None:
    record = _journal(ApprovalStatus.SENT_BACK, remarks="fix pages")
    apply_transition(record, ApprovalAction.SEND_BACK, admin_id="admin-2", now=NOW)
    assert record.remarks == "fix pages"
    assert record.approved_by == "admin-2"


def test_lock_only_touches_status_and_timestamp() -> None:
    record = _journal(ApprovalStatus.APPROVED)
    record.approved_by = "admin-1"
    record.approved_at = datetime(2025, 1, 1)
    apply_transition(record, ApprovalAction.LOCK, admin_id="admin-9", now=NOW)

    assert record.approval_status == "LOCKED"
    assert record.approved_by == "admin-1"
    assert record.approved_at == datetime(2025, 1, 1)
    assert record.updated_at == NOW


def test_approved_and_locked_records_are_frozen_for_owners() -> None:
    ensure_owner_editable(_journal(ApprovalStatus.SENT_BACK))
    ensure_owner_editable(_journal(ApprovalStatus.REJECTED))
    for status in (ApprovalStatus.APPROVED, ApprovalStatus.LOCKED):
        with pytest.raises(InvalidStateTransition):
            ensure_owner_editable(_journal(status))
