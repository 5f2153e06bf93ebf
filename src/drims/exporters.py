"""Tabular and JSON export helpers."""

from __future__ import annotations

import csv
import io
import json
from typing import Any

from drims.models import PublicationView
from drims.services.reports import ReportBundle

BASE_COLUMNS = (
    "id",
    "kind",
    "title",
    "year",
    "status",
    "category",
    "approval_status",
    "owner_kind",
    "owner_id",
    "remarks",
    "approved_by",
    "approved_at",
    "created_at",
    "updated_at",
)


def record_to_row(view: PublicationView) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": view.id,
        "kind": view.kind.value,
        "title": view.title,
        "year": view.year,
        "status": view.status or "",
        "category": view.category or "",
        "approval_status": view.approval_status.value,
        "owner_kind": view.owner_kind.value,
        "owner_id": view.owner_id,
        "remarks": view.remarks or "",
        "approved_by": view.approved_by or "",
        "approved_at": view.approved_at.isoformat() if view.approved_at else "",
        "created_at": view.created_at.isoformat(),
        "updated_at": view.updated_at.isoformat(),
    }
    for key, value in view.details.items():
        if isinstance(value, list):
            value = "; ".join(str(item) for item in value)
        row[key] = "" if value is None else value
    return row


def records_to_rows(views: list[PublicationView]) -> list[dict[str, Any]]:
    return [record_to_row(view) for view in views]


def export_rows_csv(rows: list[dict[str, Any]]) -> str:
    """Render rows as CSV; columns follow first appearance across all rows."""
    fieldnames = list(BASE_COLUMNS)
    for row in rows:
        for key in row:
            if key not in fieldnames:
                fieldnames.append(key)
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, restval="")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue()


def export_rows_json(rows: list[dict[str, Any]]) -> str:
    return json.dumps(rows, indent=2, default=str)


def report_to_json(bundle: ReportBundle) -> str:
    return json.dumps(bundle.as_dict(), indent=2, default=str)
