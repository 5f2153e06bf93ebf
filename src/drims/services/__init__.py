"""Service layer for the DRIMS application."""

from .analytics import AnalyticsService, AnalyticsSummary
from .approvals import ApprovalService
from .ownership import assert_owner, owns
from .pending import PendingApprovalService, PendingEntry
from .profiles import FacultyOverview, ProfileService
from .records import KIND_REGISTRY, KindBinding, RecordService, binding_for, record_to_view
from .reports import ReportBundle, ReportService
from .seed import SeedLoader, SeedSummary
from .targets import TargetService
from .workflow import allowed_actions, apply_transition, ensure_owner_editable, next_status

__all__ = [
    "RecordService",
    "KindBinding",
    "KIND_REGISTRY",
    "binding_for",
    "record_to_view",
    "assert_owner",
    "owns",
    "ApprovalService",
    "apply_transition",
    "next_status",
    "allowed_actions",
    "ensure_owner_editable",
    "PendingApprovalService",
    "PendingEntry",
    "TargetService",
    "ProfileService",
    "FacultyOverview",
    "AnalyticsService",
    "AnalyticsSummary",
    "ReportService",
    "ReportBundle",
    "SeedLoader",
    "SeedSummary",
]
