"""Per-kind publication storage with owner-scoped mutations."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

import pydantic
import structlog
from sqlalchemy import delete, update
from sqlmodel import Session, select

from drims.db import (
    BookChapterRecord,
    BookRecord,
    ConferenceRecord,
    JournalRecord,
    PatentRecord,
    PublicationRecord,
    get_engine,
    store_errors,
)
from drims.errors import (
    ConcurrentUpdateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from drims.models import (
    Actor,
    ApprovalStatus,
    BookChapterPayload,
    BookPayload,
    ConferencePayload,
    JournalPayload,
    Owner,
    OwnerKind,
    PatentPayload,
    PublicationKind,
    PublicationPayload,
    PublicationView,
)
from drims.settings import Settings
from drims.utils import utcnow
from .ownership import assert_owner
from .workflow import ensure_owner_editable

logger = structlog.get_logger(__name__)

COMMON_FIELDS = frozenset(PublicationRecord.model_fields)
JSON_LIST_FIELDS = {"co_authors": "co_authors_json"}


@dataclass(frozen=True, slots=True)
class KindBinding:
    """Storage and payload types used for one publication kind."""

    kind: PublicationKind
    table: type[PublicationRecord]
    payload: type[PublicationPayload]
    student_allowed: bool


KIND_REGISTRY: dict[PublicationKind, KindBinding] = {
    PublicationKind.JOURNAL: KindBinding(PublicationKind.JOURNAL, JournalRecord, JournalPayload, True),
    PublicationKind.CONFERENCE: KindBinding(
        PublicationKind.CONFERENCE, ConferenceRecord, ConferencePayload, True
    ),
    PublicationKind.BOOK: KindBinding(PublicationKind.BOOK, BookRecord, BookPayload, False),
    PublicationKind.BOOK_CHAPTER: KindBinding(
        PublicationKind.BOOK_CHAPTER, BookChapterRecord, BookChapterPayload, False
    ),
    PublicationKind.PATENT: KindBinding(PublicationKind.PATENT, PatentRecord, PatentPayload, False),
}


def binding_for(kind: PublicationKind | str) -> KindBinding:
    return KIND_REGISTRY[PublicationKind.parse(kind)]


def record_to_view(kind: PublicationKind, record: PublicationRecord) -> PublicationView:
    """Map any publication row onto the kind-independent view."""
    data = record.model_dump()
    common = {key: value for key, value in data.items() if key in COMMON_FIELDS}
    details: dict[str, Any] = {}
    for key, value in data.items():
        if key in COMMON_FIELDS:
            continue
        if key.endswith("_json"):
            details[key[: -len("_json")]] = json.loads(value or "[]")
        else:
            details[key] = value
    return PublicationView(kind=kind, details=details, **common)


class RecordService:
    """Create, edit and query one kind of publication record."""

    def __init__(self, settings: Settings, kind: PublicationKind | str) -> None:
        self._engine = get_engine(str(settings.db_path))
        self._binding = binding_for(kind)

    @property
    def kind(self) -> PublicationKind:
        return self._binding.kind

    @property
    def table(self) -> type[PublicationRecord]:
        return self._binding.table

    # Owner operations -----------------------------------------------------

    def create(self, actor: Actor, payload: PublicationPayload | Mapping[str, Any]) -> PublicationView:
        owner = self._owner_for_create(actor)
        data = self.validate(payload)
        now = utcnow()
        record = self.table(
            owner_kind=owner.kind.value,
            owner_id=owner.id,
            approval_status=ApprovalStatus.SUBMITTED.value,
            created_at=now,
            updated_at=now,
        )
        self._apply_payload(record, data, creating=True)
        with store_errors(f"create {self.kind.value.lower()}"):
            with Session(self._engine, expire_on_commit=False) as session:
                session.add(record)
                session.commit()
                session.refresh(record)
        logger.info("records.created", kind=self.kind.value, id=record.id, owner=owner.id)
        return record_to_view(self.kind, record)

    def get(self, publication_id: str, actor: Actor) -> PublicationView:
        record = self._load(publication_id)
        assert_owner(record, actor)
        return record_to_view(self.kind, record)

    def update(
        self,
        publication_id: str,
        actor: Actor,
        payload: PublicationPayload | Mapping[str, Any],
    ) -> PublicationView:
        def edit(record: PublicationRecord) -> None:
            assert_owner(record, actor)
            ensure_owner_editable(record)
            data = self.validate(payload)
            self._apply_payload(record, data, creating=False)
            record.updated_at = utcnow()

        view = self.mutate(publication_id, edit)
        logger.info("records.updated", kind=self.kind.value, id=publication_id, actor=actor.identity)
        return view

    def delete(self, publication_id: str, actor: Actor) -> None:
        record = self._load(publication_id)
        assert_owner(record, actor)
        ensure_owner_editable(record)
        table = self.table
        with store_errors(f"delete {self.kind.value.lower()}"):
            with self._engine.begin() as conn:
                result = conn.execute(
                    delete(table).where(table.id == record.id, table.version == record.version)
                )
        if result.rowcount == 0:
            raise ConcurrentUpdateError(f"{self.kind.value} {publication_id} changed while deleting")
        logger.info("records.deleted", kind=self.kind.value, id=publication_id, actor=actor.identity)

    def list_by_owner(self, actor: Actor) -> list[PublicationView]:
        owner = actor.owner
        if owner is None:
            raise UnauthorizedError(f"{actor.identity} does not own publication records")
        return self.list_for_owner(owner)

    def list_for_owner(self, owner: Owner) -> list[PublicationView]:
        table = self.table
        stmt = (
            select(table)
            .where(table.owner_kind == owner.kind.value, table.owner_id == owner.id)
            .order_by(table.created_at.asc())
        )
        return self._select_views(stmt)

    # Unscoped reads used by admin and aggregate flows ---------------------

    def list_all(self) -> list[PublicationView]:
        table = self.table
        return self._select_views(select(table).order_by(table.created_at.asc()))

    def list_by_status(self, statuses: Iterable[ApprovalStatus]) -> list[PublicationView]:
        table = self.table
        values = [ApprovalStatus(status).value for status in statuses]
        stmt = (
            select(table)
            .where(table.approval_status.in_(values))
            .order_by(table.created_at.asc())
        )
        return self._select_views(stmt)

    def fetch(self, publication_id: str) -> PublicationView:
        return record_to_view(self.kind, self._load(publication_id))

    def mutate(
        self, publication_id: str, change: Callable[[PublicationRecord], Any]
    ) -> PublicationView:
        """Load a record, apply ``change`` and write it back if unchanged meanwhile."""
        record = self._load(publication_id)
        read_version = record.version
        change(record)
        record.version = read_version + 1
        values = record.model_dump(exclude={"id"})
        table = self.table
        with store_errors(f"update {self.kind.value.lower()}"):
            with self._engine.begin() as conn:
                result = conn.execute(
                    update(table)
                    .where(table.id == publication_id, table.version == read_version)
                    .values(**values)
                )
        if result.rowcount == 0:
            raise ConcurrentUpdateError(f"{self.kind.value} {publication_id} changed while updating")
        return record_to_view(self.kind, record)

    # Internal helpers -----------------------------------------------------

    def _load(self, publication_id: str) -> PublicationRecord:
        with store_errors(f"load {self.kind.value.lower()}"):
            with Session(self._engine, expire_on_commit=False) as session:
                record = session.get(self.table, publication_id)
        if record is None:
            raise NotFoundError(f"{self.kind.label[:-1]} not found: {publication_id}")
        return record

    def _select_views(self, stmt) -> list[PublicationView]:
        with store_errors(f"query {self.kind.value.lower()}"):
            with Session(self._engine, expire_on_commit=False) as session:
                records = session.exec(stmt).all()
        return [record_to_view(self.kind, record) for record in records]

    def _owner_for_create(self, actor: Actor) -> Owner:
        owner = actor.owner
        if owner is None:
            raise UnauthorizedError(f"{actor.identity} cannot submit publication records")
        if owner.kind is OwnerKind.STUDENT and not self._binding.student_allowed:
            raise UnauthorizedError(f"Students cannot submit {self.kind.label.lower()}")
        return owner

    def validate(self, payload: PublicationPayload | Mapping[str, Any]) -> dict[str, Any]:
        """Check ``payload`` against this kind's model without storing anything."""
        payload_cls = self._binding.payload
        if isinstance(payload, payload_cls):
            model = payload
        else:
            raw = payload.model_dump() if isinstance(payload, pydantic.BaseModel) else dict(payload)
            try:
                model = payload_cls.model_validate(raw)
            except pydantic.ValidationError as exc:
                raise ValidationError(str(exc)) from exc
        return model.model_dump()

    def _apply_payload(self, record: PublicationRecord, data: dict[str, Any], *, creating: bool) -> None:
        proof_fields = set(self._binding.payload.proof_fields)
        for key, value in data.items():
            if key in proof_fields and value is None and not creating:
                continue
            if key in JSON_LIST_FIELDS:
                setattr(record, JSON_LIST_FIELDS[key], json.dumps(list(value or [])))
                continue
            setattr(record, key, value)

