"""Dashboard rollups over every stored publication."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from sqlmodel import Session, select

from drims.db import FacultyProfileRecord, get_engine, store_errors
from drims.models import OwnerKind, PublicationKind, PublicationView
from drims.settings import Settings
from .records import KIND_REGISTRY, RecordService


@dataclass(slots=True)
class AnalyticsSummary:
    year_wise: dict[int, int] = field(default_factory=dict)
    kind_wise: dict[str, int] = field(default_factory=dict)
    faculty_wise: dict[str, int] = field(default_factory=dict)
    status_wise: dict[str, int] = field(default_factory=dict)
    approval_status_wise: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.kind_wise.values())


class AnalyticsService:
    """Submission-volume counts.

    Unlike the institutional reports these include records in every
    approval status.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engine = get_engine(str(settings.db_path))

    def summary(self) -> AnalyticsSummary:
        by_kind: dict[PublicationKind, list[PublicationView]] = {
            kind: RecordService(self._settings, kind).list_all() for kind in KIND_REGISTRY
        }
        records = [view for views in by_kind.values() for view in views]

        year_wise = Counter(view.year for view in records if view.year is not None)
        status_wise = Counter(view.status for view in records if view.status)
        approval_wise = Counter(view.approval_status.value for view in records)
        owner_counts = Counter(
            view.owner_id for view in records if view.owner_kind is OwnerKind.FACULTY
        )

        faculty_wise: dict[str, int] = {}
        for profile in self._faculty():
            count = owner_counts.get(profile.id, 0)
            if count > 0:
                faculty_wise[profile.name] = faculty_wise.get(profile.name, 0) + count

        return AnalyticsSummary(
            year_wise=dict(sorted(year_wise.items())),
            kind_wise={kind.label: len(views) for kind, views in by_kind.items()},
            faculty_wise=faculty_wise,
            status_wise=dict(status_wise),
            approval_status_wise=dict(approval_wise),
        )

    def _faculty(self) -> list[FacultyProfileRecord]:
        with store_errors("list faculty"), Session(self._engine) as session:
            return session.exec(select(FacultyProfileRecord)).all()
