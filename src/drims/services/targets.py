"""Annual output targets per faculty member."""

from __future__ import annotations

from typing import Any, Mapping

import pydantic
import structlog
from sqlmodel import Session, select

from drims.db import FacultyProfileRecord, TargetRecord, get_engine, store_errors
from drims.errors import NotFoundError, ValidationError
from drims.models import MIN_PUBLICATION_YEAR, TargetCounts
from drims.settings import Settings
from drims.utils import utcnow

logger = structlog.get_logger(__name__)


class TargetService:
    def __init__(self, settings: Settings) -> None:
        self._engine = get_engine(str(settings.db_path))

    def upsert_target(
        self,
        faculty_id: str,
        year: int,
        counts: TargetCounts | Mapping[str, Any],
    ) -> TargetRecord:
        """Create or overwrite the single target row for ``(faculty_id, year)``."""
        if year < MIN_PUBLICATION_YEAR:
            raise ValidationError(f"Target year must be {MIN_PUBLICATION_YEAR} or later")
        if not isinstance(counts, TargetCounts):
            try:
                counts = TargetCounts.model_validate(dict(counts))
            except pydantic.ValidationError as exc:
                raise ValidationError(str(exc)) from exc

        with store_errors("upsert target"), Session(self._engine, expire_on_commit=False) as session:
            if session.get(FacultyProfileRecord, faculty_id) is None:
                raise NotFoundError(f"Faculty profile not found: {faculty_id}")
            stmt = select(TargetRecord).where(
                TargetRecord.faculty_id == faculty_id, TargetRecord.year == year
            )
            target = session.exec(stmt).first()
            now = utcnow()
            created = target is None
            if target is None:
                target = TargetRecord(faculty_id=faculty_id, year=year, created_at=now)
            for key, value in counts.model_dump().items():
                setattr(target, key, value)
            target.updated_at = now
            session.add(target)
            session.commit()
            session.refresh(target)
        logger.info("targets.upserted", faculty_id=faculty_id, year=year, created=created)
        return target

    def list_targets(self, faculty_id: str) -> list[TargetRecord]:
        stmt = select(TargetRecord).where(TargetRecord.faculty_id == faculty_id)
        with store_errors("list targets"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(stmt).all()

    def list_all(self) -> list[TargetRecord]:
        with store_errors("list targets"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(select(TargetRecord)).all()
