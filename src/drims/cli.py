"""Command-line interface for the DRIMS project."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import structlog
import typer
from rich.console import Console
from rich.table import Table

from drims import exporters
from drims.db import get_engine
from drims.errors import DrimsError
from drims.models import Actor, ApprovalAction, PublicationKind, Role, TargetCounts
from drims.services import (
    KIND_REGISTRY,
    AnalyticsService,
    ApprovalService,
    PendingApprovalService,
    ProfileService,
    RecordService,
    ReportService,
    SeedLoader,
    TargetService,
    allowed_actions,
)
from drims.settings import configure_logging, get_settings
from drims.utils import slugify

console = Console()
app = typer.Typer(help="DRIMS – research output tracking and approval")
logger = structlog.get_logger(__name__)


def _fail(exc: Exception) -> None:
    console.print(f"[red]{exc}[/red]")
    raise typer.Exit(code=1) from exc


@app.callback()
def main() -> None:
    """Route log output according to DRIMS_LOG_LEVEL."""
    configure_logging(get_settings().log_level)


@app.command()
def config(
    json_output: bool = typer.Option(False, "--json", help="Output settings as JSON"),
) -> None:
    """Display the resolved settings."""
    settings = get_settings()
    if json_output:
        typer.echo(settings.model_dump_json(indent=2))
        return
    table = Table(title="DRIMS Settings")
    table.add_column("Key")
    table.add_column("Value", overflow="fold")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)


@app.command()
def init() -> None:
    """Create the data directory and the database schema."""
    settings = get_settings()
    get_engine(str(settings.db_path))
    console.print(f"[green]Database ready:[/green] {settings.db_path}")


@app.command()
def seed(
    seed_file: Optional[Path] = typer.Argument(None, help="JSON seed file (defaults to DRIMS_SEED_FILE)"),
) -> None:
    """Load faculty, students, targets and publications from a seed file."""
    settings = get_settings()
    path = seed_file or settings.seed_file
    if path is None:
        raise typer.BadParameter("Provide a seed file or set DRIMS_SEED_FILE.")
    if not path.exists():
        raise typer.BadParameter(f"Seed file not found: {path}")
    try:
        summary = SeedLoader(settings).load(path)
    except DrimsError as exc:
        _fail(exc)
    console.print(
        f"[green]Seeded[/green] {summary.faculty_created} faculty "
        f"({summary.faculty_skipped} already present), "
        f"{summary.students_created} students, "
        f"{summary.total_publications} publications"
    )


@app.command()
def faculty() -> None:
    """List registered faculty profiles."""
    profiles = ProfileService(get_settings()).list_faculty()
    if not profiles:
        console.print("[yellow]No faculty registered.")
        return
    table = Table(title=f"Faculty ({len(profiles)})")
    table.add_column("ID", overflow="fold")
    table.add_column("Employee ID")
    table.add_column("Name")
    table.add_column("Department")
    table.add_column("Email")
    for profile in profiles:
        table.add_row(
            profile.id,
            profile.employee_id,
            profile.name,
            profile.department or "—",
            profile.email,
        )
    console.print(table)


@app.command()
def pending(
    kind: Optional[str] = typer.Option(None, "--kind", "-k", help="Restrict to one publication kind"),
) -> None:
    """Show publications awaiting an administrator decision."""
    try:
        entries = PendingApprovalService(get_settings()).list_pending(kind)
    except DrimsError as exc:
        _fail(exc)
    if not entries:
        console.print("[green]Nothing awaiting review.")
        return
    table = Table(title=f"Pending approvals ({len(entries)})")
    table.add_column("Kind")
    table.add_column("ID", overflow="fold")
    table.add_column("Title", overflow="fold")
    table.add_column("Status")
    table.add_column("Owner")
    table.add_column("Submitted")
    for entry in entries:
        owner = entry.owner_faculty_name or entry.owner_student_name
        if owner is None:
            owner = entry.owner_faculty_id or entry.owner_student_id or "—"
        table.add_row(
            entry.kind.label,
            entry.id,
            entry.title,
            entry.approval_status.value,
            owner,
            entry.submitted_at.strftime("%Y-%m-%d"),
        )
    console.print(table)


@app.command()
def review(
    kind: str = typer.Argument(..., help="JOURNAL, CONFERENCE, BOOK, BOOK_CHAPTER or PATENT"),
    publication_id: str = typer.Argument(..., help="Publication identifier"),
    action: str = typer.Argument(..., help="APPROVE, REJECT, SEND_BACK or LOCK"),
    admin: str = typer.Option(..., "--admin", help="Identity of the reviewing administrator"),
    remarks: Optional[str] = typer.Option(None, "--remarks", "-r", help="Reviewer remarks"),
) -> None:
    """Apply an administrator action to a publication."""
    actor = Actor(identity=admin, role=Role.ADMIN)
    try:
        view = ApprovalService(get_settings()).transition(
            kind, publication_id, action, actor, remarks=remarks
        )
    except DrimsError as exc:
        _fail(exc)
    console.print(f"[green]{view.kind.label[:-1]} {view.id}[/green] is now {view.approval_status.value}")
    following = allowed_actions(view.approval_status)
    if following:
        console.print("Next actions: " + ", ".join(item.value for item in following))


@app.command()
def report(
    report_type: str = typer.Argument(..., help="NAAC, NBA or NIRF"),
    year: Optional[int] = typer.Option(None, help="Restrict to one publication year"),
    faculty_id: Optional[str] = typer.Option(None, "--faculty", help="Restrict to one faculty member"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to file"),
) -> None:
    """Build an institutional report over approved and locked output."""
    try:
        bundle = ReportService(get_settings()).report(report_type, year=year, faculty_id=faculty_id)
    except DrimsError as exc:
        _fail(exc)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(exporters.report_to_json(bundle), encoding="utf-8")
        console.print(f"[green]Wrote {bundle.report_type.value} report to {output}")
        return

    table = Table(title=f"{bundle.report_type.value} report")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for kind, total in bundle.totals.items():
        table.add_row(f"Total {kind.label.lower()}", str(total))
    if bundle.index_type_distribution is not None:
        for index_type, count in sorted(bundle.index_type_distribution.items()):
            table.add_row(f"Indexed in {index_type}", str(count))
    if bundle.high_impact_journals is not None:
        table.add_row("High impact journals", str(bundle.high_impact_journals))
    if bundle.publication_quality_score is not None:
        table.add_row("Publication quality score", f"{bundle.publication_quality_score:.1f}%")
    console.print(table)


@app.command()
def analytics() -> None:
    """Submission counts across every approval status."""
    summary = AnalyticsService(get_settings()).summary()
    table = Table(title=f"Analytics ({summary.total} records)")
    table.add_column("Group")
    table.add_column("Key")
    table.add_column("Count", justify="right")
    for group, counts in (
        ("Kind", summary.kind_wise),
        ("Year", summary.year_wise),
        ("Faculty", summary.faculty_wise),
        ("Status", summary.status_wise),
        ("Approval", summary.approval_status_wise),
    ):
        for key, count in counts.items():
            table.add_row(group, str(key), str(count))
    console.print(table)


@app.command()
def targets(
    faculty_id: str = typer.Argument(..., help="Faculty profile identifier"),
    year: Optional[int] = typer.Option(None, help="Set the target for this year"),
    journals: int = typer.Option(0, help="Journal target"),
    conferences: int = typer.Option(0, help="Conference target"),
    patents: int = typer.Option(0, help="Patent target"),
    book_chapters: int = typer.Option(0, help="Book chapter target"),
) -> None:
    """Show a faculty member's targets, or set one year with --year."""
    service = TargetService(get_settings())
    try:
        if year is not None:
            counts = TargetCounts(
                journal_target=journals,
                conference_target=conferences,
                patent_target=patents,
                book_chapter_target=book_chapters,
            )
            service.upsert_target(faculty_id, year, counts)
            console.print(f"[green]Target for {year} saved.")
        rows = service.list_targets(faculty_id)
    except (DrimsError, ValueError) as exc:
        _fail(exc)
    if not rows:
        console.print("[yellow]No targets recorded.")
        return
    table = Table(title="Targets")
    for column in ("Year", "Journals", "Conferences", "Patents", "Book chapters"):
        table.add_column(column, justify="right")
    for row in sorted(rows, key=lambda item: item.year):
        table.add_row(
            str(row.year),
            str(row.journal_target),
            str(row.conference_target),
            str(row.patent_target),
            str(row.book_chapter_target),
        )
    console.print(table)


@app.command()
def export(
    kind: str = typer.Argument(..., help="Publication kind to export"),
    format: str = typer.Option("csv", "--format", "-f", help="csv or json", case_sensitive=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to file"),
) -> None:
    """Export every record of one kind as CSV or JSON."""
    fmt = format.lower()
    if fmt not in {"csv", "json"}:
        raise typer.BadParameter("Format must be 'csv' or 'json'.")
    try:
        publication_kind = PublicationKind.parse(kind)
        views = RecordService(get_settings(), publication_kind).list_all()
    except DrimsError as exc:
        _fail(exc)
    if not views:
        console.print(f"[yellow]No {publication_kind.label.lower()} to export.")
        return
    rows = exporters.records_to_rows(views)
    destination = output or Path(f"drims-{slugify(publication_kind.label)}-export.{fmt}")
    destination.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "csv":
        destination.write_text(exporters.export_rows_csv(rows), encoding="utf-8")
    else:
        destination.write_text(exporters.export_rows_json(rows), encoding="utf-8")
    logger.info("cli.exported", kind=publication_kind.value, rows=len(rows), path=str(destination))
    console.print(f"[green]Wrote {len(rows)} {publication_kind.label.lower()} to {destination}")


@app.command()
def kinds() -> None:
    """List publication kinds and who may submit them."""
    table = Table(title="Publication kinds")
    table.add_column("Kind")
    table.add_column("Label")
    table.add_column("Students")
    for kind, binding in KIND_REGISTRY.items():
        table.add_row(kind.value, kind.label, "yes" if binding.student_allowed else "no")
    console.print(table)
    console.print("Review actions: " + ", ".join(action.value for action in ApprovalAction))


if __name__ == "__main__":
    app()
