"""Ownership checks applied before any owner-initiated read or mutation."""

from __future__ import annotations

from typing import Protocol

from drims.errors import UnauthorizedError
from drims.models import Actor, OwnerKind, Role

_OWNER_KIND_BY_ROLE = {
    Role.FACULTY: OwnerKind.FACULTY,
    Role.STUDENT: OwnerKind.STUDENT,
}


class OwnedRecord(Protocol):
    id: str
    owner_kind: str
    owner_id: str


def owns(record: OwnedRecord, actor: Actor) -> bool:
    expected = _OWNER_KIND_BY_ROLE.get(actor.role)
    if expected is None or not actor.owned_profile_id:
        return False
    return record.owner_kind == expected.value and record.owner_id == actor.owned_profile_id


def assert_owner(record: OwnedRecord, actor: Actor) -> None:
    """Raise ``UnauthorizedError`` unless ``actor`` owns ``record``.

    The owner column compared is selected by the actor's role, so a
    faculty id never matches a student-owned record and vice versa.
    Administrators own nothing.
    """
    if not owns(record, actor):
        raise UnauthorizedError(f"{actor.identity} is not the owner of record {record.id}")
