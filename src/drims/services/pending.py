"""Cross-kind queue of publications awaiting an administrator decision."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import structlog
from sqlmodel import Session

from drims.db import FacultyProfileRecord, StudentProfileRecord, get_engine, store_errors
from drims.models import ApprovalStatus, OwnerKind, PublicationKind, PublicationView
from drims.settings import Settings
from .records import KIND_REGISTRY, RecordService
from .workflow import PENDING_STATUSES

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class PendingEntry:
    id: str
    kind: PublicationKind
    title: str
    approval_status: ApprovalStatus
    submitted_at: datetime
    updated_at: datetime
    owner_faculty_id: str | None = None
    owner_faculty_name: str | None = None
    owner_student_id: str | None = None
    owner_student_name: str | None = None


class PendingApprovalService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engine = get_engine(str(settings.db_path))

    def list_pending(self, kind: PublicationKind | str | None = None) -> list[PendingEntry]:
        """Every SUBMITTED or SENT_BACK record, optionally for a single kind.

        Entries follow registry order, then creation order within a kind;
        callers that need a specific order should sort the result.
        """
        kinds = [PublicationKind.parse(kind)] if kind else list(KIND_REGISTRY)
        views: list[PublicationView] = []
        for item in kinds:
            views.extend(RecordService(self._settings, item).list_by_status(PENDING_STATUSES))
        faculty_names, student_names = self._resolve_names(views)
        entries = [self._to_entry(view, faculty_names, student_names) for view in views]
        logger.debug("pending.listed", kinds=[item.value for item in kinds], count=len(entries))
        return entries

    def count_pending(self, kind: PublicationKind | str | None = None) -> dict[PublicationKind, int]:
        counts = {item: 0 for item in ([PublicationKind.parse(kind)] if kind else KIND_REGISTRY)}
        for entry in self.list_pending(kind):
            counts[entry.kind] += 1
        return counts

    def _resolve_names(
        self, views: list[PublicationView]
    ) -> tuple[dict[str, str], dict[str, str]]:
        faculty_ids = {view.owner_id for view in views if view.owner_kind is OwnerKind.FACULTY}
        student_ids = {view.owner_id for view in views if view.owner_kind is OwnerKind.STUDENT}
        faculty_names: dict[str, str] = {}
        student_names: dict[str, str] = {}
        with store_errors("resolve owner names"), Session(self._engine) as session:
            for faculty_id in faculty_ids:
                profile = session.get(FacultyProfileRecord, faculty_id)
                if profile is None:
                    logger.info("pending.owner_missing", owner_kind="FACULTY", owner_id=faculty_id)
                    continue
                faculty_names[faculty_id] = profile.name
            for student_id in student_ids:
                profile = session.get(StudentProfileRecord, student_id)
                if profile is None:
                    logger.info("pending.owner_missing", owner_kind="STUDENT", owner_id=student_id)
                    continue
                student_names[student_id] = profile.name
        return faculty_names, student_names

    def _to_entry(
        self,
        view: PublicationView,
        faculty_names: dict[str, str],
        student_names: dict[str, str],
    ) -> PendingEntry:
        return PendingEntry(
            id=view.id,
            kind=view.kind,
            title=view.title,
            approval_status=view.approval_status,
            submitted_at=view.created_at,
            updated_at=view.updated_at,
            owner_faculty_id=view.faculty_id,
            owner_faculty_name=faculty_names.get(view.faculty_id) if view.faculty_id else None,
            owner_student_id=view.student_id,
            owner_student_name=student_names.get(view.student_id) if view.student_id else None,
        )
