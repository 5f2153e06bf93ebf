"""Core data models used throughout the DRIMS application."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from drims.errors import ValidationError

MIN_PUBLICATION_YEAR = 2000


def _normalize_token(value: str) -> str:
    return value.strip().upper().replace("-", "_").replace(" ", "_")


class Role(str, Enum):
    FACULTY = "FACULTY"
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class OwnerKind(str, Enum):
    FACULTY = "FACULTY"
    STUDENT = "STUDENT"


class ApprovalStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    SENT_BACK = "SENT_BACK"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    LOCKED = "LOCKED"


class ApprovalAction(str, Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    SEND_BACK = "SEND_BACK"
    LOCK = "LOCK"

    @classmethod
    def parse(cls, value: "str | ApprovalAction") -> "ApprovalAction":
        if isinstance(value, cls):
            return value
        try:
            return cls(_normalize_token(str(value)))
        except ValueError as exc:
            raise ValidationError(f"Invalid approval action: {value}") from exc


class PublicationKind(str, Enum):
    JOURNAL = "JOURNAL"
    CONFERENCE = "CONFERENCE"
    BOOK = "BOOK"
    BOOK_CHAPTER = "BOOK_CHAPTER"
    PATENT = "PATENT"

    @classmethod
    def parse(cls, value: "str | PublicationKind") -> "PublicationKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(_normalize_token(str(value)))
        except ValueError as exc:
            raise ValidationError(f"Invalid publication type: {value}") from exc

    @property
    def label(self) -> str:
        return KIND_LABELS[self]


KIND_LABELS: dict[PublicationKind, str] = {
    PublicationKind.JOURNAL: "Journals",
    PublicationKind.CONFERENCE: "Conferences",
    PublicationKind.BOOK: "Books",
    PublicationKind.BOOK_CHAPTER: "Book Chapters",
    PublicationKind.PATENT: "Patents",
}


class ReportType(str, Enum):
    NAAC = "NAAC"
    NBA = "NBA"
    NIRF = "NIRF"

    @classmethod
    def parse(cls, value: "str | ReportType") -> "ReportType":
        if isinstance(value, cls):
            return value
        try:
            return cls(_normalize_token(str(value)))
        except ValueError as exc:
            raise ValidationError(f"Invalid report type: {value}") from exc


class Owner(BaseModel):
    """The single faculty member or student a record belongs to."""

    model_config = ConfigDict(frozen=True)

    kind: OwnerKind
    id: str

    @classmethod
    def faculty(cls, faculty_id: str) -> "Owner":
        return cls(kind=OwnerKind.FACULTY, id=faculty_id)

    @classmethod
    def student(cls, student_id: str) -> "Owner":
        return cls(kind=OwnerKind.STUDENT, id=student_id)


class Actor(BaseModel):
    """Authenticated caller as asserted by the identity layer."""

    identity: str
    role: Role
    owned_profile_id: str | None = None

    @property
    def owner(self) -> Owner | None:
        if not self.owned_profile_id:
            return None
        if self.role is Role.FACULTY:
            return Owner.faculty(self.owned_profile_id)
        if self.role is Role.STUDENT:
            return Owner.student(self.owned_profile_id)
        return None


# Owner payloads -----------------------------------------------------------


class PublicationPayload(BaseModel):
    """Fields every owner submission carries."""

    proof_fields: ClassVar[tuple[str, ...]] = ()

    title: str = Field(min_length=1)
    year: int = Field(ge=MIN_PUBLICATION_YEAR)
    status: str | None = None  # Published, Accepted, Submitted, Filed, Granted
    category: str | None = None  # National or International

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value


class JournalPayload(PublicationPayload):
    proof_fields: ClassVar[tuple[str, ...]] = (
        "acceptance_mail_path",
        "published_paper_path",
        "index_proof_path",
    )

    journal_name: str | None = None
    authors: str | None = None
    co_authors: list[str] = Field(default_factory=list, max_length=5)
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    doi: str | None = None
    impact_factor: str | None = None
    index_type: str | None = None  # SCI, SCIE, Scopus, ESCI, WoS, UGC CARE
    publisher: str | None = None
    issn: str | None = None
    open_access: str | None = None
    acceptance_mail_path: str | None = None
    published_paper_path: str | None = None
    index_proof_path: str | None = None


class ConferencePayload(PublicationPayload):
    proof_fields: ClassVar[tuple[str, ...]] = ("registration_receipt_path", "certificate_path")

    conference_name: str | None = None
    organizer: str | None = None
    authors: str | None = None
    location: str | None = None
    date: str | None = None
    registration_amount: str | None = None
    payment_mode: str | None = None
    student_name: str | None = None
    student_register_number: str | None = None
    guide_id: str | None = None
    guide_name: str | None = None
    registration_receipt_path: str | None = None
    certificate_path: str | None = None


class BookPayload(PublicationPayload):
    proof_fields: ClassVar[tuple[str, ...]] = ("book_cover_path", "isbn_proof_path")

    publisher: str | None = None
    isbn: str | None = None
    role: str | None = None  # Author or Editor
    book_cover_path: str | None = None
    isbn_proof_path: str | None = None


class BookChapterPayload(PublicationPayload):
    proof_fields: ClassVar[tuple[str, ...]] = ("chapter_proof_path",)

    book_title: str | None = None
    authors: str | None = None
    editors: str | None = None
    publisher: str | None = None
    pages: str | None = None
    isbn: str | None = None
    chapter_proof_path: str | None = None


class PatentPayload(PublicationPayload):
    proof_fields: ClassVar[tuple[str, ...]] = (
        "filing_proof_path",
        "publication_certificate_path",
        "grant_certificate_path",
    )

    application_number: str | None = None
    filing_date: str | None = None
    patent_number: str | None = None
    inventors: str | None = None
    country: str | None = None
    filing_proof_path: str | None = None
    publication_certificate_path: str | None = None
    grant_certificate_path: str | None = None


# Read models --------------------------------------------------------------


class PublicationView(BaseModel):
    """Kind-independent view of a stored publication record."""

    id: str
    kind: PublicationKind
    owner_kind: OwnerKind
    owner_id: str
    title: str
    year: int | None = None
    status: str | None = None
    category: str | None = None
    approval_status: ApprovalStatus
    remarks: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    version: int = 1
    created_at: datetime
    updated_at: datetime
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def owner(self) -> Owner:
        return Owner(kind=self.owner_kind, id=self.owner_id)

    @property
    def faculty_id(self) -> str | None:
        return self.owner_id if self.owner_kind is OwnerKind.FACULTY else None

    @property
    def student_id(self) -> str | None:
        return self.owner_id if self.owner_kind is OwnerKind.STUDENT else None


class ApprovalRequest(BaseModel):
    """Administrator action on a single publication."""

    action: ApprovalAction
    publication_type: PublicationKind
    publication_id: str
    remarks: str | None = None

    @field_validator("action", mode="before")
    @classmethod
    def _parse_action(cls, value: Any) -> Any:
        return _normalize_token(value) if isinstance(value, str) else value

    @field_validator("publication_type", mode="before")
    @classmethod
    def _parse_kind(cls, value: Any) -> Any:
        return _normalize_token(value) if isinstance(value, str) else value


class TargetCounts(BaseModel):
    """Annual expected output for one faculty member."""

    journal_target: int = Field(default=0, ge=0)
    conference_target: int = Field(default=0, ge=0)
    patent_target: int = Field(default=0, ge=0)
    book_chapter_target: int = Field(default=0, ge=0)
