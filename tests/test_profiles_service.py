import pytest

from drims.errors import NotFoundError, ValidationError
from drims.models import PublicationKind
from drims.services import ProfileService, RecordService, TargetService


def test_duplicate_faculty_is_rejected(settings, faculty) -> None:
    service = ProfileService(settings)
    with pytest.raises(ValidationError):
        service.create_faculty(employee_id="EMP999", name="Clone", email="ASHA.RAO@drims.edu")
    with pytest.raises(ValidationError):
        service.create_faculty(employee_id="EMP001", name="Clone", email="clone@drims.edu")


def test_student_guide_name_is_resolved(student, faculty) -> None:
    assert student.guide_id == faculty.id
    assert student.guide_name == "Dr. Asha Rao"


def test_update_faculty_changes_given_fields_only(settings, faculty) -> None:
    updated = ProfileService(settings).update_faculty(
        faculty.id, designation="Professor", research_areas=["ML", "Vision"]
    )
    assert updated.designation == "Professor"
    assert updated.department == "CSE"
    assert updated.name == "Dr. Asha Rao"


def test_faculty_overview_collects_output(settings, faculty, faculty_actor) -> None:
    RecordService(settings, PublicationKind.JOURNAL).create(faculty_actor, {"title": "J", "year": 2025})
    RecordService(settings, PublicationKind.PATENT).create(faculty_actor, {"title": "P", "year": 2025})
    TargetService(settings).upsert_target(faculty.id, 2025, {"journal_target": 4})
    ProfileService(settings).update_faculty(faculty.id, research_areas=["ML"])

    overview = ProfileService(settings).faculty_overview(faculty.id)

    assert overview.total_publications == 2
    assert len(overview.publications[PublicationKind.JOURNAL]) == 1
    assert overview.targets[0].journal_target == 4
    assert overview.research_areas == ["ML"]


def test_lookup_helpers(settings, faculty, student) -> None:
    service = ProfileService(settings)
    assert service.find_faculty_by_email(" Asha.Rao@drims.edu ").id == faculty.id
    assert service.find_student_by_register_number("REG001").id == student.id
    assert service.find_faculty_by_employee_id("EMP404") is None
    with pytest.raises(NotFoundError):
        service.get_student("missing")
