"""Approval state machine shared by every publication kind."""

from __future__ import annotations

from datetime import datetime

from drims.db import PublicationRecord
from drims.errors import InvalidStateTransition, ValidationError
from drims.models import ApprovalAction, ApprovalStatus
from drims.utils import is_blank, utcnow

PENDING_STATUSES = (ApprovalStatus.SUBMITTED, ApprovalStatus.SENT_BACK)
COUNTED_STATUSES = (ApprovalStatus.APPROVED, ApprovalStatus.LOCKED)
OWNER_FROZEN_STATUSES = frozenset(COUNTED_STATUSES)

TRANSITIONS: dict[tuple[ApprovalStatus, ApprovalAction], ApprovalStatus] = {
    (ApprovalStatus.SUBMITTED, ApprovalAction.APPROVE): ApprovalStatus.APPROVED,
    (ApprovalStatus.SENT_BACK, ApprovalAction.APPROVE): ApprovalStatus.APPROVED,
    (ApprovalStatus.SUBMITTED, ApprovalAction.REJECT): ApprovalStatus.REJECTED,
    (ApprovalStatus.SENT_BACK, ApprovalAction.REJECT): ApprovalStatus.REJECTED,
    (ApprovalStatus.SUBMITTED, ApprovalAction.SEND_BACK): ApprovalStatus.SENT_BACK,
    (ApprovalStatus.SENT_BACK, ApprovalAction.SEND_BACK): ApprovalStatus.SENT_BACK,
    (ApprovalStatus.APPROVED, ApprovalAction.LOCK): ApprovalStatus.LOCKED,
}


def next_status(current: ApprovalStatus, action: ApprovalAction) -> ApprovalStatus:
    target = TRANSITIONS.get((current, action))
    if target is not None:
        return target
    if action is ApprovalAction.LOCK:
        raise InvalidStateTransition(
            f"Only approved publications can be locked (current status {current.value})"
        )
    raise InvalidStateTransition(f"Cannot {action.value} a publication in status {current.value}")


def allowed_actions(current: ApprovalStatus) -> list[ApprovalAction]:
    return [action for (status, action) in TRANSITIONS if status is current]


def apply_transition(
    record: PublicationRecord,
    action: ApprovalAction,
    *,
    admin_id: str,
    remarks: str | None = None,
    now: datetime | None = None,
) -> ApprovalStatus:
    """Move ``record`` through ``action`` in place and return the new status."""
    if action is ApprovalAction.REJECT and is_blank(remarks):
        raise ValidationError("Remarks are required for rejection")
    target = next_status(ApprovalStatus(record.approval_status), action)
    now = now or utcnow()

    record.approval_status = target.value
    if action is not ApprovalAction.LOCK:
        record.approved_by = admin_id
        record.approved_at = now
        if action is ApprovalAction.APPROVE:
            record.remarks = None
        elif action is ApprovalAction.REJECT or remarks is not None:
            record.remarks = remarks
    record.updated_at = now
    return target


def ensure_owner_editable(record: PublicationRecord) -> None:
    status = ApprovalStatus(record.approval_status)
    if status in OWNER_FROZEN_STATUSES:
        raise InvalidStateTransition(
            f"Cannot modify a publication that is {status.value.lower()}"
        )
