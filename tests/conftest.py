from __future__ import annotations

import pytest
import structlog

from drims.models import Actor, Role
from drims.services import ProfileService
from drims.settings import Settings


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(data_dir=tmp_path)


@pytest.fixture
def faculty(settings):
    return ProfileService(settings).create_faculty(
        employee_id="EMP001", name="Dr. Asha Rao", email="asha.rao@drims.edu", department="CSE"
    )


@pytest.fixture
def student(settings, faculty):
    return ProfileService(settings).create_student(
        register_number="REG001", name="Kiran", program="M.Tech", guide_id=faculty.id
    )


@pytest.fixture
def faculty_actor(faculty) -> Actor:
    return Actor(identity="asha", role=Role.FACULTY, owned_profile_id=faculty.id)


@pytest.fixture
def student_actor(student) -> Actor:
    return Actor(identity="kiran", role=Role.STUDENT, owned_profile_id=student.id)


@pytest.fixture
def admin() -> Actor:
    return Actor(identity="admin-1", role=Role.ADMIN)
