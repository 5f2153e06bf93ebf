from drims.models import PublicationKind
from drims.services import AnalyticsService, ApprovalService, RecordService


def test_summary_counts_every_status(settings, faculty, faculty_actor, student_actor, admin) -> None:
    journals = RecordService(settings, PublicationKind.JOURNAL)
    approved = journals.create(faculty_actor, {"title": "A", "year": 2024, "status": "Published"})
    journals.create(faculty_actor, {"title": "B", "year": 2025, "status": "Accepted"})
    RecordService(settings, PublicationKind.CONFERENCE).create(student_actor, {"title": "C", "year": 2025})
    ApprovalService(settings).approve(PublicationKind.JOURNAL, approved.id, admin)

    summary = AnalyticsService(settings).summary()

    assert summary.total == 3
    assert summary.year_wise == {2024: 1, 2025: 2}
    assert summary.kind_wise["Journals"] == 2
    assert summary.kind_wise["Patents"] == 0
    assert summary.faculty_wise == {"Dr. Asha Rao": 2}
    assert summary.status_wise == {"Published": 1, "Accepted": 1}
    assert summary.approval_status_wise == {"APPROVED": 1, "SUBMITTED": 2}


def test_faculty_without_output_is_absent(settings, faculty) -> None:
    summary = AnalyticsService(settings).summary()
    assert summary.faculty_wise == {}
    assert summary.total == 0
