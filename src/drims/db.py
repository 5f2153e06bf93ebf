"""SQLite persistence layer for DRIMS."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator
from uuid import uuid4

import structlog
from sqlalchemy import DateTime, UniqueConstraint
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, SQLModel, create_engine

from drims.errors import StoreFailure
from drims.utils import utcnow

logger = structlog.get_logger(__name__)

# Timestamps are stored as naive UTC; see drims.utils.utcnow.
NAIVE_UTC = DateTime(timezone=False)


def _new_id() -> str:
    return uuid4().hex


class FacultyProfileRecord(SQLModel, table=True):
    __tablename__ = "faculty_profiles"

    id: str = Field(default_factory=_new_id, primary_key=True)
    employee_id: str = Field(index=True, unique=True)
    name: str
    designation: str | None = None
    department: str | None = None
    research_areas_json: str = Field(default="[]")
    orcid_id: str | None = None
    scopus_id: str | None = None
    google_scholar_link: str | None = None
    email: str = Field(index=True, unique=True)
    user_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)


class StudentProfileRecord(SQLModel, table=True):
    __tablename__ = "student_profiles"

    id: str = Field(default_factory=_new_id, primary_key=True)
    register_number: str = Field(index=True, unique=True)
    name: str
    department: str | None = None
    program: str | None = None  # B.Tech, M.Tech, Ph.D.
    current_year: str | None = None
    guide_id: str | None = None  # weak reference to a faculty profile
    guide_name: str | None = None
    user_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)


class TargetRecord(SQLModel, table=True):
    __tablename__ = "targets"
    __table_args__ = (UniqueConstraint("faculty_id", "year", name="uq_target_faculty_year"),)

    id: str = Field(default_factory=_new_id, primary_key=True)
    faculty_id: str = Field(index=True)
    year: int
    journal_target: int = 0
    conference_target: int = 0
    patent_target: int = 0
    book_chapter_target: int = 0
    created_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)


class PublicationRecord(SQLModel):
    """Columns shared by every publication table."""

    id: str = Field(default_factory=_new_id, primary_key=True)
    owner_kind: str = Field(index=True)
    owner_id: str = Field(index=True)
    title: str
    year: int | None = Field(default=None, index=True)
    status: str | None = None
    category: str | None = None
    approval_status: str = Field(default="SUBMITTED", index=True)
    remarks: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = Field(default=None, sa_type=NAIVE_UTC)
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)
    updated_at: datetime = Field(default_factory=utcnow, sa_type=NAIVE_UTC)


class JournalRecord(PublicationRecord, table=True):
    __tablename__ = "journals"

    journal_name: str | None = None
    authors: str | None = None
    co_authors_json: str = Field(default="[]")
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    doi: str | None = None
    impact_factor: str | None = None
    index_type: str | None = None
    publisher: str | None = None
    issn: str | None = None
    open_access: str | None = None
    acceptance_mail_path: str | None = None
    published_paper_path: str | None = None
    index_proof_path: str | None = None


class ConferenceRecord(PublicationRecord, table=True):
    __tablename__ = "conferences"

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


class BookRecord(PublicationRecord, table=True):
    __tablename__ = "books"

    publisher: str | None = None
    isbn: str | None = None
    role: str | None = None
    book_cover_path: str | None = None
    isbn_proof_path: str | None = None


class BookChapterRecord(PublicationRecord, table=True):
    __tablename__ = "book_chapters"

    book_title: str | None = None
    authors: str | None = None
    editors: str | None = None
    publisher: str | None = None
    pages: str | None = None
    isbn: str | None = None
    chapter_proof_path: str | None = None


class PatentRecord(PublicationRecord, table=True):
    __tablename__ = "patents"

    application_number: str | None = None
    filing_date: str | None = None
    patent_number: str | None = None
    inventors: str | None = None
    country: str | None = None
    filing_proof_path: str | None = None
    publication_certificate_path: str | None = None
    grant_certificate_path: str | None = None


def create_engine_for_path(db_path: Path):
    db_path.parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(engine) -> None:
    SQLModel.metadata.create_all(engine)


@lru_cache(maxsize=4)
def get_engine(path_str: str):
    engine = create_engine_for_path(Path(path_str))
    init_db(engine)
    return engine


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """Translate driver errors into ``StoreFailure`` without retrying."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("store.failure", operation=operation, error=str(exc))
        raise StoreFailure(f"{operation} failed: {exc}") from exc
