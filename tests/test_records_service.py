import pytest

from drims.errors import (
    ConcurrentUpdateError,
    InvalidStateTransition,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from drims.models import Actor, ApprovalStatus, JournalPayload, OwnerKind, PublicationKind, Role
from drims.services import ApprovalService, RecordService


def _journal_payload(**overrides):
    payload = {
        "title": "Graph Learning",
        "year": 2024,
        "journal_name": "J. Graphs",
        "co_authors": ["Ravi", "Lee"],
        "impact_factor": "2.4",
        "published_paper_path": "proofs/paper.pdf",
    }
    payload.update(overrides)
    return payload


def test_create_sets_owner_and_submitted_status(settings, faculty, faculty_actor) -> None:
    service = RecordService(settings, PublicationKind.JOURNAL)
    view = service.create(faculty_actor, _journal_payload())

    assert view.approval_status is ApprovalStatus.SUBMITTED
    assert view.owner_kind is OwnerKind.FACULTY
    assert view.faculty_id == faculty.id
    assert view.student_id is None
    assert view.created_at == view.updated_at
    assert view.details["co_authors"] == ["Ravi", "Lee"]
    assert view.approved_by is None


def test_create_accepts_payload_models(settings, faculty_actor) -> None:
    service = RecordService(settings, "journal")
    view = service.create(faculty_actor, JournalPayload(title="Typed", year=2023))
    assert view.title == "Typed"


def test_invalid_payload_is_rejected(settings, faculty_actor) -> None:
    service = RecordService(settings, PublicationKind.JOURNAL)
    with pytest.raises(ValidationError):
        service.create(faculty_actor, {"title": "", "year": 2024})
    with pytest.raises(ValidationError):
        service.create(faculty_actor, {"title": "Too old", "year": 1998})


def test_students_submit_only_journals_and_conferences(settings, student_actor) -> None:
    conference = RecordService(settings, PublicationKind.CONFERENCE).create(
        student_actor, {"title": "Edge AI", "year": 2025, "conference_name": "ICML"}
    )
    assert conference.owner_kind is OwnerKind.STUDENT

    with pytest.raises(UnauthorizedError):
        RecordService(settings, PublicationKind.PATENT).create(
            student_actor, {"title": "Widget", "year": 2025}
        )


def test_admin_cannot_create(settings, admin) -> None:
    with pytest.raises(UnauthorizedError):
        RecordService(settings, PublicationKind.BOOK).create(admin, {"title": "Book", "year": 2024})


def test_only_owner_may_read_update_or_delete(settings, faculty_actor, student_actor) -> None:
    service = RecordService(settings, PublicationKind.JOURNAL)
    view = service.create(faculty_actor, _journal_payload())
    stranger = Actor(identity="other", role=Role.FACULTY, owned_profile_id="someone-else")

    for actor in (stranger, student_actor):
        with pytest.raises(UnauthorizedError):
            service.get(view.id, actor)
        with pytest.raises(UnauthorizedError):
            service.update(view.id, actor, _journal_payload(title="Hijack"))
        with pytest.raises(UnauthorizedError):
            service.delete(view.id, actor)

    assert service.get(view.id, faculty_actor).title == "Graph Learning"


def test_update_keeps_proof_paths_and_status(settings, faculty_actor, admin) -> None:
    service = RecordService(settings, PublicationKind.JOURNAL)
    view = service.create(faculty_actor, _journal_payload())
    ApprovalService(settings).send_back(PublicationKind.JOURNAL, view.id, admin, remarks="add DOI")

    updated = service.update(
        view.id, faculty_actor, _journal_payload(doi="10.1/abc", published_paper_path=None)
    )

    assert updated.details["doi"] == "10.1/abc"
    assert updated.details["published_paper_path"] == "proofs/paper.pdf"
    assert updated.approval_status is ApprovalStatus.SENT_BACK
    assert updated.remarks == "add DOI"
    assert updated.version == view.version + 2
    assert updated.updated_at >= view.updated_at


@pytest.mark.parametrize("kind", list(PublicationKind))
def test_approved_and_locked_records_are_frozen_for_every_kind(settings, faculty_actor, admin, kind) -> None:
    service = RecordService(settings, kind)
    approvals = ApprovalService(settings)
    view = service.create(faculty_actor, {"title": "Frozen", "year": 2024})

    approvals.approve(kind, view.id, admin)
    with pytest.raises(InvalidStateTransition):
        service.update(view.id, faculty_actor, {"title": "Changed", "year": 2024})
    with pytest.raises(InvalidStateTransition):
        service.delete(view.id, faculty_actor)

    approvals.lock(kind, view.id, admin)
    with pytest.raises(InvalidStateTransition):
        service.update(view.id, faculty_actor, {"title": "Changed", "year": 2024})
    with pytest.raises(InvalidStateTransition):
        service.delete(view.id, faculty_actor)

    stored = service.fetch(view.id)
    assert stored.title == "Frozen"
    assert stored.approval_status is ApprovalStatus.LOCKED


@pytest.mark.parametrize("kind", list(PublicationKind))
def test_created_at_is_stable_across_edits_and_reviews(settings, faculty_actor, admin, kind) -> None:
    service = RecordService(settings, kind)
    approvals = ApprovalService(settings)
    view = service.create(faculty_actor, {"title": "Draft", "year": 2024})

    steps = [
        lambda: approvals.send_back(kind, view.id, admin, remarks="add proof"),
        lambda: service.update(view.id, faculty_actor, {"title": "Revised", "year": 2024}),
        lambda: approvals.approve(kind, view.id, admin),
        lambda: approvals.lock(kind, view.id, admin),
    ]
    previous = view
    for step in steps:
        current = step()
        assert current.created_at == view.created_at
        assert current.created_at <= current.updated_at
        assert current.updated_at >= previous.updated_at
        previous = current

    assert service.fetch(view.id).created_at == view.created_at


def test_delete_removes_record(settings, faculty_actor) -> None:
    service = RecordService(settings, PublicationKind.BOOK_CHAPTER)
    view = service.create(faculty_actor, {"title": "Chapter 3", "year": 2022})
    service.delete(view.id, faculty_actor)

    with pytest.raises(NotFoundError):
        service.fetch(view.id)


def test_missing_record_is_not_found(settings, faculty_actor) -> None:
    with pytest.raises(NotFoundError, match="Patent not found"):
        RecordService(settings, PublicationKind.PATENT).get("nope", faculty_actor)


def test_list_by_owner_is_scoped(settings, faculty_actor, student_actor) -> None:
    service = RecordService(settings, PublicationKind.JOURNAL)
    service.create(faculty_actor, _journal_payload(title="Mine"))
    service.create(student_actor, _journal_payload(title="Student's"))

    assert [view.title for view in service.list_by_owner(faculty_actor)] == ["Mine"]
    assert [view.title for view in service.list_by_owner(student_actor)] == ["Student's"]
    assert len(service.list_all()) == 2


def test_stale_write_is_detected(settings, faculty_actor) -> None:
    service = RecordService(settings, PublicationKind.JOURNAL)
    view = service.create(faculty_actor, _journal_payload())

    def interleave(record) -> None:
        service.mutate(view.id, lambda other: setattr(other, "title", "First writer"))
        record.title = "Second writer"

    with pytest.raises(ConcurrentUpdateError):
        service.mutate(view.id, interleave)
    assert service.fetch(view.id).title == "First writer"
