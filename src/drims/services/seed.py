"""One-time, idempotent bootstrap of faculty, students and their output from JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from drims.errors import ValidationError
from drims.models import MIN_PUBLICATION_YEAR, Actor, PublicationKind, Role, TargetCounts
from drims.settings import Settings
from drims.utils import email_local_part
from .profiles import ProfileService
from .records import RecordService
from .targets import TargetService

logger = structlog.get_logger(__name__)

SEED_PUBLICATION_KEYS: dict[str, PublicationKind] = {
    "journals": PublicationKind.JOURNAL,
    "conferences": PublicationKind.CONFERENCE,
    "books": PublicationKind.BOOK,
    "book_chapters": PublicationKind.BOOK_CHAPTER,
    "patents": PublicationKind.PATENT,
}
STUDENT_PUBLICATION_KEYS = ("journals", "conferences")


@dataclass(slots=True)
class SeedSummary:
    faculty_created: int = 0
    faculty_skipped: int = 0
    students_created: int = 0
    students_skipped: int = 0
    targets_written: int = 0
    publications_created: dict[PublicationKind, int] = field(default_factory=dict)

    @property
    def total_publications(self) -> int:
        return sum(self.publications_created.values())


class SeedLoader:
    """Loads a declarative seed file; existing people are left untouched."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._profiles = ProfileService(settings)
        self._targets = TargetService(settings)

    def load(self, path: Path) -> SeedSummary:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Seed file is not valid JSON: {exc}") from exc
        return self.load_data(payload)

    def load_data(self, payload: dict[str, Any]) -> SeedSummary:
        summary = SeedSummary()
        faculty_by_employee: dict[str, str] = {}
        for index, entry in enumerate(payload.get("faculty", []), start=1):
            faculty_id = self._load_faculty(entry, index, summary)
            if faculty_id and entry.get("employee_id"):
                faculty_by_employee[entry["employee_id"]] = faculty_id
        for entry in payload.get("students", []):
            self._load_student(entry, faculty_by_employee, summary)
        logger.info(
            "seed.loaded",
            faculty_created=summary.faculty_created,
            faculty_skipped=summary.faculty_skipped,
            students_created=summary.students_created,
            publications=summary.total_publications,
        )
        return summary

    def _load_faculty(self, entry: dict[str, Any], index: int, summary: SeedSummary) -> str | None:
        name = entry.get("name")
        if not name:
            raise ValidationError(f"Faculty entry {index} has no name")
        employee_id = entry.get("employee_id") or f"EMP{index:03d}"
        existing = self._profiles.find_faculty_by_employee_id(employee_id)
        if existing is None and entry.get("email"):
            existing = self._profiles.find_faculty_by_email(entry["email"])
        if existing is not None:
            logger.info("seed.faculty_skipped", name=name, employee_id=existing.employee_id)
            summary.faculty_skipped += 1
            return existing.id

        targets = self._validated_targets(entry, index)
        publications = self._validated_publications(entry, SEED_PUBLICATION_KEYS)
        profile = self._profiles.create_faculty(
            employee_id=employee_id,
            name=name,
            email=entry.get("email") or self._generate_email(name),
            designation=entry.get("designation"),
            department=entry.get("department"),
            research_areas=entry.get("research_areas", []),
            orcid_id=entry.get("orcid_id"),
            scopus_id=entry.get("scopus_id"),
            google_scholar_link=entry.get("google_scholar_link"),
        )
        summary.faculty_created += 1

        for year, counts in targets:
            self._targets.upsert_target(profile.id, year, counts)
            summary.targets_written += 1

        actor = Actor(identity=f"seed:{employee_id}", role=Role.FACULTY, owned_profile_id=profile.id)
        self._store_publications(actor, publications, summary)
        return profile.id

    def _load_student(
        self, entry: dict[str, Any], faculty_by_employee: dict[str, str], summary: SeedSummary
    ) -> None:
        register_number = entry.get("register_number")
        if not register_number or not entry.get("name"):
            raise ValidationError("Student entries need register_number and name")
        if self._profiles.find_student_by_register_number(register_number) is not None:
            logger.info("seed.student_skipped", register_number=register_number)
            summary.students_skipped += 1
            return
        keys = {key: SEED_PUBLICATION_KEYS[key] for key in STUDENT_PUBLICATION_KEYS}
        publications = self._validated_publications(entry, keys)
        guide_id = entry.get("guide_id")
        if not guide_id and entry.get("guide_employee_id"):
            guide_id = faculty_by_employee.get(entry["guide_employee_id"])
        profile = self._profiles.create_student(
            register_number=register_number,
            name=entry["name"],
            department=entry.get("department"),
            program=entry.get("program"),
            current_year=entry.get("current_year"),
            guide_id=guide_id,
        )
        summary.students_created += 1
        actor = Actor(identity=f"seed:{register_number}", role=Role.STUDENT, owned_profile_id=profile.id)
        self._store_publications(actor, publications, summary)

    def _validated_targets(self, entry: dict[str, Any], index: int) -> list[tuple[int, TargetCounts]]:
        targets: list[tuple[int, TargetCounts]] = []
        for target in entry.get("targets", []):
            try:
                year = int(target["year"])
                counts = TargetCounts.model_validate({k: v for k, v in target.items() if k != "year"})
            except (KeyError, TypeError, ValueError) as exc:
                raise ValidationError(f"Faculty entry {index} has an invalid target: {exc}") from exc
            if year < MIN_PUBLICATION_YEAR:
                raise ValidationError(f"Target year must be {MIN_PUBLICATION_YEAR} or later")
            targets.append((year, counts))
        return targets

    def _validated_publications(
        self, entry: dict[str, Any], keys: dict[str, PublicationKind]
    ) -> list[tuple[RecordService, dict[str, Any]]]:
        """Validate every nested submission up front so a bad item writes nothing."""
        validated: list[tuple[RecordService, dict[str, Any]]] = []
        for key, kind in keys.items():
            service = RecordService(self._settings, kind)
            for item in entry.get(key, []):
                validated.append((service, service.validate(item)))
        return validated

    def _store_publications(
        self,
        actor: Actor,
        publications: list[tuple[RecordService, dict[str, Any]]],
        summary: SeedSummary,
    ) -> None:
        for service, data in publications:
            service.create(actor, data)
            summary.publications_created[service.kind] = summary.publications_created.get(service.kind, 0) + 1

    def _generate_email(self, name: str) -> str:
        local = email_local_part(name)
        domain = self._settings.email_domain
        candidate = f"{local}@{domain}"
        counter = 1
        while self._profiles.find_faculty_by_email(candidate) is not None:
            candidate = f"{local}{counter}@{domain}"
            counter += 1
        return candidate
