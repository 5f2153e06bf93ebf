"""Institutional reports (NAAC, NBA, NIRF) over approved output only."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import structlog
from sqlmodel import Session

from drims.db import FacultyProfileRecord, get_engine, store_errors
from drims.models import PublicationKind, PublicationView, ReportType
from drims.settings import Settings
from drims.utils import parse_impact_factor, utcnow
from .records import KIND_REGISTRY, RecordService
from .workflow import COUNTED_STATUSES

logger = structlog.get_logger(__name__)

NOT_SPECIFIED = "Not Specified"
UNKNOWN_FACULTY = "Unknown Faculty"
HIGH_IMPACT_THRESHOLD = 3.0
QUALITY_THRESHOLD = 2.0


@dataclass(slots=True)
class ReportBundle:
    report_type: ReportType
    generated_at: datetime
    year: int | None
    faculty_id: str | None
    totals: dict[PublicationKind, int] = field(default_factory=dict)
    by_category: dict[PublicationKind, dict[str, int]] = field(default_factory=dict)
    year_wise_journals: dict[int, int] = field(default_factory=dict)
    year_wise_conferences: dict[int, int] = field(default_factory=dict)
    faculty_wise_journals: dict[str, int] = field(default_factory=dict)
    index_type_distribution: dict[str, int] | None = None
    high_impact_journals: int | None = None
    publication_quality_score: float | None = None

    @property
    def total_journals(self) -> int:
        return self.totals.get(PublicationKind.JOURNAL, 0)

    @property
    def total_conferences(self) -> int:
        return self.totals.get(PublicationKind.CONFERENCE, 0)

    @property
    def total_books(self) -> int:
        return self.totals.get(PublicationKind.BOOK, 0)

    @property
    def total_book_chapters(self) -> int:
        return self.totals.get(PublicationKind.BOOK_CHAPTER, 0)

    @property
    def total_patents(self) -> int:
        return self.totals.get(PublicationKind.PATENT, 0)

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "reportType": self.report_type.value,
            "generatedAt": self.generated_at.isoformat(),
            "year": self.year,
            "facultyId": self.faculty_id,
            "totalJournals": self.total_journals,
            "totalConferences": self.total_conferences,
            "totalBooks": self.total_books,
            "totalBookChapters": self.total_book_chapters,
            "totalPatents": self.total_patents,
            "byCategory": {kind.value: counts for kind, counts in self.by_category.items()},
            "yearWiseJournals": self.year_wise_journals,
            "yearWiseConferences": self.year_wise_conferences,
            "facultyWiseJournals": self.faculty_wise_journals,
        }
        if self.index_type_distribution is not None:
            payload["indexTypeDistribution"] = self.index_type_distribution
        if self.high_impact_journals is not None:
            payload["highImpactJournals"] = self.high_impact_journals
        if self.publication_quality_score is not None:
            payload["publicationQualityScore"] = self.publication_quality_score
        return payload


def meets_impact_threshold(view: PublicationView, threshold: float) -> bool:
    """Unparseable or missing impact factors never meet the threshold."""
    impact = parse_impact_factor(view.details.get("impact_factor"))
    return impact is not None and impact >= threshold


def quality_score(journals: list[PublicationView], conferences: list[PublicationView]) -> float:
    total = len(journals) + len(conferences)
    if total == 0:
        return 0.0
    qualifying = sum(
        1 for view in [*journals, *conferences] if meets_impact_threshold(view, QUALITY_THRESHOLD)
    )
    return qualifying / total * 100


class ReportService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engine = get_engine(str(settings.db_path))

    def report(
        self,
        report_type: ReportType | str,
        year: int | None = None,
        faculty_id: str | None = None,
    ) -> ReportBundle:
        report_type = ReportType.parse(report_type)
        counted = self.counted_records(year=year, faculty_id=faculty_id)
        journals = counted[PublicationKind.JOURNAL]
        conferences = counted[PublicationKind.CONFERENCE]

        bundle = ReportBundle(
            report_type=report_type,
            generated_at=utcnow(),
            year=year,
            faculty_id=faculty_id,
            totals={kind: len(views) for kind, views in counted.items()},
            by_category={
                kind: dict(Counter(view.category or NOT_SPECIFIED for view in views))
                for kind, views in counted.items()
            },
            year_wise_journals=_count_years(journals),
            year_wise_conferences=_count_years(conferences),
            faculty_wise_journals=self._faculty_wise(journals),
        )
        if report_type is ReportType.NBA:
            bundle.index_type_distribution = dict(
                Counter(view.details["index_type"] for view in journals if view.details.get("index_type"))
            )
        elif report_type is ReportType.NIRF:
            bundle.high_impact_journals = sum(
                1 for view in journals if meets_impact_threshold(view, HIGH_IMPACT_THRESHOLD)
            )
            bundle.publication_quality_score = quality_score(journals, conferences)
        logger.info(
            "reports.generated",
            report_type=report_type.value,
            year=year,
            faculty_id=faculty_id,
            journals=bundle.total_journals,
        )
        return bundle

    def counted_records(
        self, *, year: int | None = None, faculty_id: str | None = None
    ) -> dict[PublicationKind, list[PublicationView]]:
        """APPROVED and LOCKED records, narrowed by year and faculty owner."""
        counted: dict[PublicationKind, list[PublicationView]] = {}
        for kind in KIND_REGISTRY:
            views = RecordService(self._settings, kind).list_by_status(COUNTED_STATUSES)
            if year is not None:
                views = [view for view in views if view.year == year]
            if faculty_id is not None:
                views = [view for view in views if view.faculty_id == faculty_id]
            counted[kind] = views
        return counted

    def _faculty_wise(self, journals: list[PublicationView]) -> dict[str, int]:
        counts: Counter[str] = Counter()
        names: dict[str, str] = {}
        with store_errors("resolve faculty names"), Session(self._engine) as session:
            for view in journals:
                faculty_id = view.faculty_id
                if faculty_id is None:
                    continue
                if faculty_id not in names:
                    profile = session.get(FacultyProfileRecord, faculty_id)
                    names[faculty_id] = profile.name if profile else UNKNOWN_FACULTY
                counts[names[faculty_id]] += 1
        return dict(counts)


def _count_years(views: list[PublicationView]) -> dict[int, int]:
    return dict(sorted(Counter(view.year for view in views if view.year is not None).items()))
