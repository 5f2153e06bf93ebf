import pytest

from drims.errors import ValidationError
from drims.models import Actor, PublicationKind, ReportType, Role
from drims.services import ApprovalService, RecordService, ReportService
from drims.services.reports import NOT_SPECIFIED, UNKNOWN_FACULTY, quality_score


def _approved(settings, actor, admin, kind, **payload):
    view = RecordService(settings, kind).create(actor, {"year": 2025, **payload})
    return ApprovalService(settings).approve(kind, view.id, admin)


def test_naac_counts_only_approved_and_locked(settings, faculty, faculty_actor, admin) -> None:
    first = _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="J1", category="International")
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="J2")
    ApprovalService(settings).lock(PublicationKind.JOURNAL, first.id, admin)
    RecordService(settings, PublicationKind.JOURNAL).create(faculty_actor, {"title": "J3", "year": 2025})

    bundle = ReportService(settings).report("NAAC", year=2025)

    assert bundle.report_type is ReportType.NAAC
    assert bundle.total_journals == 2
    assert bundle.total_patents == 0
    assert bundle.by_category[PublicationKind.JOURNAL] == {"International": 1, NOT_SPECIFIED: 1}
    assert bundle.year_wise_journals == {2025: 2}
    assert bundle.faculty_wise_journals == {"Dr. Asha Rao": 2}
    assert bundle.index_type_distribution is None
    assert bundle.high_impact_journals is None


def test_year_and_faculty_filters(settings, faculty, faculty_actor, admin) -> None:
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="Now")
    old = RecordService(settings, PublicationKind.JOURNAL).create(faculty_actor, {"title": "Old", "year": 2021})
    ApprovalService(settings).approve(PublicationKind.JOURNAL, old.id, admin)

    service = ReportService(settings)
    assert service.report(ReportType.NBA, year=2021).total_journals == 1
    assert service.report(ReportType.NBA, faculty_id=faculty.id).total_journals == 2
    assert service.report(ReportType.NBA, faculty_id="someone-else").total_journals == 0


def test_nba_index_type_distribution(settings, faculty_actor, admin) -> None:
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="A", index_type="Scopus")
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="B", index_type="Scopus")
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="C")

    bundle = ReportService(settings).report("nba")

    assert bundle.index_type_distribution == {"Scopus": 2}


def test_nirf_tolerates_unparseable_impact_factors(settings, faculty_actor, admin) -> None:
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="High", impact_factor="3.5")
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="Mid", impact_factor="2.1")
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="Bad", impact_factor="N/A")
    _approved(settings, faculty_actor, admin, PublicationKind.CONFERENCE, title="Talk")

    bundle = ReportService(settings).report(ReportType.NIRF)

    assert bundle.high_impact_journals == 1
    assert bundle.publication_quality_score == pytest.approx(50.0)
    assert bundle.as_dict()["publicationQualityScore"] == pytest.approx(50.0)


def test_quality_score_of_empty_report_is_zero() -> None:
    assert quality_score([], []) == 0.0


def test_missing_faculty_profile_is_reported_as_unknown(settings, admin) -> None:
    ghost = Actor(identity="ghost", role=Role.FACULTY, owned_profile_id="gone")
    _approved(settings, ghost, admin, PublicationKind.JOURNAL, title="Orphan")

    bundle = ReportService(settings).report("NAAC")

    assert bundle.faculty_wise_journals == {UNKNOWN_FACULTY: 1}


def test_unknown_report_type(settings) -> None:
    with pytest.raises(ValidationError):
        ReportService(settings).report("QS")


def test_infinite_impact_factor_never_qualifies(settings, faculty_actor, admin) -> None:
    _approved(settings, faculty_actor, admin, PublicationKind.JOURNAL, title="Typo", impact_factor="inf")

    bundle = ReportService(settings).report(ReportType.NIRF)

    assert bundle.high_impact_journals == 0
    assert bundle.publication_quality_score == 0.0
