"""Faculty and student profiles that anchor record ownership."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Iterable

import structlog
from sqlmodel import Session, select

from drims.db import FacultyProfileRecord, StudentProfileRecord, TargetRecord, get_engine, store_errors
from drims.errors import NotFoundError, ValidationError
from drims.models import Owner, PublicationKind, PublicationView
from drims.settings import Settings
from drims.utils import is_blank, utcnow
from .records import KIND_REGISTRY, RecordService
from .targets import TargetService

logger = structlog.get_logger(__name__)


@dataclass(slots=True)
class FacultyOverview:
    """Everything recorded against one faculty member."""

    profile: FacultyProfileRecord
    publications: dict[PublicationKind, list[PublicationView]] = field(default_factory=dict)
    targets: list[TargetRecord] = field(default_factory=list)

    @property
    def research_areas(self) -> list[str]:
        return json.loads(self.profile.research_areas_json or "[]")

    @property
    def total_publications(self) -> int:
        return sum(len(items) for items in self.publications.values())


class ProfileService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._engine = get_engine(str(settings.db_path))

    # Faculty --------------------------------------------------------------

    def create_faculty(
        self,
        *,
        employee_id: str,
        name: str,
        email: str,
        designation: str | None = None,
        department: str | None = None,
        research_areas: Iterable[str] = (),
        orcid_id: str | None = None,
        scopus_id: str | None = None,
        google_scholar_link: str | None = None,
        user_id: str | None = None,
    ) -> FacultyProfileRecord:
        if is_blank(employee_id) or is_blank(name) or is_blank(email):
            raise ValidationError("employee_id, name and email are required")
        email = email.strip().lower()
        with store_errors("create faculty"), Session(self._engine, expire_on_commit=False) as session:
            duplicate = session.exec(
                select(FacultyProfileRecord).where(
                    (FacultyProfileRecord.email == email)
                    | (FacultyProfileRecord.employee_id == employee_id)
                )
            ).first()
            if duplicate is not None:
                raise ValidationError(f"Faculty already registered: {employee_id} / {email}")
            now = utcnow()
            profile = FacultyProfileRecord(
                employee_id=employee_id,
                name=name,
                email=email,
                designation=designation,
                department=department,
                research_areas_json=json.dumps(list(research_areas)),
                orcid_id=orcid_id,
                scopus_id=scopus_id,
                google_scholar_link=google_scholar_link,
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            session.add(profile)
            session.commit()
            session.refresh(profile)
        logger.info("profiles.faculty_created", id=profile.id, employee_id=employee_id)
        return profile

    def get_faculty(self, faculty_id: str) -> FacultyProfileRecord:
        with store_errors("load faculty"), Session(self._engine, expire_on_commit=False) as session:
            profile = session.get(FacultyProfileRecord, faculty_id)
        if profile is None:
            raise NotFoundError(f"Faculty profile not found: {faculty_id}")
        return profile

    def find_faculty_by_email(self, email: str) -> FacultyProfileRecord | None:
        stmt = select(FacultyProfileRecord).where(FacultyProfileRecord.email == email.strip().lower())
        with store_errors("find faculty"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(stmt).first()

    def find_faculty_by_employee_id(self, employee_id: str) -> FacultyProfileRecord | None:
        stmt = select(FacultyProfileRecord).where(FacultyProfileRecord.employee_id == employee_id)
        with store_errors("find faculty"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(stmt).first()

    def list_faculty(self) -> list[FacultyProfileRecord]:
        stmt = select(FacultyProfileRecord).order_by(FacultyProfileRecord.name.asc())
        with store_errors("list faculty"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(stmt).all()

    def update_faculty(
        self,
        faculty_id: str,
        *,
        name: str | None = None,
        designation: str | None = None,
        department: str | None = None,
        research_areas: Iterable[str] | None = None,
        orcid_id: str | None = None,
        scopus_id: str | None = None,
        google_scholar_link: str | None = None,
    ) -> FacultyProfileRecord:
        with store_errors("update faculty"), Session(self._engine, expire_on_commit=False) as session:
            profile = session.get(FacultyProfileRecord, faculty_id)
            if profile is None:
                raise NotFoundError(f"Faculty profile not found: {faculty_id}")
            if name is not None:
                if is_blank(name):
                    raise ValidationError("name must not be blank")
                profile.name = name
            if research_areas is not None:
                profile.research_areas_json = json.dumps(list(research_areas))
            for key, value in (
                ("designation", designation),
                ("department", department),
                ("orcid_id", orcid_id),
                ("scopus_id", scopus_id),
                ("google_scholar_link", google_scholar_link),
            ):
                if value is not None:
                    setattr(profile, key, value)
            profile.updated_at = utcnow()
            session.add(profile)
            session.commit()
            session.refresh(profile)
        return profile

    def faculty_overview(self, faculty_id: str) -> FacultyOverview:
        profile = self.get_faculty(faculty_id)
        owner = Owner.faculty(faculty_id)
        publications = {
            kind: RecordService(self._settings, kind).list_for_owner(owner) for kind in KIND_REGISTRY
        }
        targets = TargetService(self._settings).list_targets(faculty_id)
        return FacultyOverview(profile=profile, publications=publications, targets=targets)

    # Students -------------------------------------------------------------

    def create_student(
        self,
        *,
        register_number: str,
        name: str,
        department: str | None = None,
        program: str | None = None,
        current_year: str | None = None,
        guide_id: str | None = None,
        user_id: str | None = None,
    ) -> StudentProfileRecord:
        if is_blank(register_number) or is_blank(name):
            raise ValidationError("register_number and name are required")
        guide_name = None
        if guide_id:
            guide = self._faculty_or_none(guide_id)
            guide_name = guide.name if guide else None
        with store_errors("create student"), Session(self._engine, expire_on_commit=False) as session:
            duplicate = session.exec(
                select(StudentProfileRecord).where(
                    StudentProfileRecord.register_number == register_number
                )
            ).first()
            if duplicate is not None:
                raise ValidationError(f"Student already registered: {register_number}")
            now = utcnow()
            profile = StudentProfileRecord(
                register_number=register_number,
                name=name,
                department=department,
                program=program,
                current_year=current_year,
                guide_id=guide_id,
                guide_name=guide_name,
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            session.add(profile)
            session.commit()
            session.refresh(profile)
        logger.info("profiles.student_created", id=profile.id, register_number=register_number)
        return profile

    def get_student(self, student_id: str) -> StudentProfileRecord:
        with store_errors("load student"), Session(self._engine, expire_on_commit=False) as session:
            profile = session.get(StudentProfileRecord, student_id)
        if profile is None:
            raise NotFoundError(f"Student profile not found: {student_id}")
        return profile

    def find_student_by_register_number(self, register_number: str) -> StudentProfileRecord | None:
        stmt = select(StudentProfileRecord).where(
            StudentProfileRecord.register_number == register_number
        )
        with store_errors("find student"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(stmt).first()

    def list_students(self) -> list[StudentProfileRecord]:
        stmt = select(StudentProfileRecord).order_by(StudentProfileRecord.name.asc())
        with store_errors("list students"), Session(self._engine, expire_on_commit=False) as session:
            return session.exec(stmt).all()

    def _faculty_or_none(self, faculty_id: str) -> FacultyProfileRecord | None:
        with store_errors("load faculty"), Session(self._engine, expire_on_commit=False) as session:
            return session.get(FacultyProfileRecord, faculty_id)
