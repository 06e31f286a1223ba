from __future__ import annotations

import logging
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from ..attendance.model import AttendanceEvent
from ..common.datetime_utils import now_local
from ..core.enums import ExportFormat, FieldSet, QuickRange, ReportPeriod
from ..core.exceptions import ExportError, ValidationError
from ..reports.model import StatSummary
from ..reports.service import AttendanceReportService
from ..roster.model import OrganizationContext
from .columns import columns_for, row_values
from .csv_writer import render_csv
from .excel import render_excel
from .pdf import render_pdf

logger = logging.getLogger(__name__)

EXTENSIONS = {
    ExportFormat.CSV: "csv",
    ExportFormat.EXCEL: "xlsx",
    ExportFormat.PDF: "pdf",
}
MIMETYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.EXCEL: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.PDF: "application/pdf",
}

_UNSAFE = re.compile(r"[\\/:*?\"<>|]+")


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    mimetype: str


def _segment(value: Optional[str]) -> str:
    if value is None:
        return ""
    text = _UNSAFE.sub("", str(value).strip())
    return re.sub(r"\s+", "_", text)


def build_filename(
    org_name: str,
    *,
    report_type: Optional[str] = None,
    format_tag: Optional[str] = None,
    extension: str = "csv",
    on: Optional[date] = None,
) -> str:
    """`{org}_attendance[_{reportType}][_{formatTag}]_{YYYY-MM-DD}.{ext}`"""
    on = on or now_local().date()
    parts = [_segment(org_name), "attendance", _segment(report_type), _segment(format_tag), on.isoformat()]
    return "_".join(p for p in parts if p) + f".{extension.lstrip('.')}"


def serialize(
    events: Iterable[AttendanceEvent],
    fmt: ExportFormat,
    field_set: FieldSet,
    *,
    context: OrganizationContext,
    stats: Optional[Iterable[StatSummary]] = None,
    report_type: Optional[str] = None,
    generated_on: Optional[date] = None,
) -> ExportResult:
    """Render events (detailed) or per-employee stats (summary) to one file.

    Column order is fixed by the field set, never by the data.
    """

    try:
        fmt = ExportFormat(fmt)
        field_set = FieldSet(field_set)
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if field_set == FieldSet.SUMMARY and stats is None:
        raise ValidationError("Summary export needs employee statistics")

    generated_on = generated_on or now_local(context.timezone).date()
    columns = columns_for(field_set)
    try:
        rows = row_values(
            field_set,
            events=events,
            stats=stats or (),
            tz=context.timezone,
            roster=context.roster,
        )
        if fmt == ExportFormat.CSV:
            content = render_csv(columns, rows)
        elif fmt == ExportFormat.EXCEL:
            content = render_excel(columns, rows)
        else:
            title = f"Attendance {'Report' if field_set == FieldSet.DETAILED else 'Summary'}"
            if report_type:
                title = f"{report_type} {title}"
            content = render_pdf(
                columns,
                rows,
                title=title,
                organization_name=context.organization_name,
                generated_on=generated_on,
            )
    except Exception as exc:
        raise ExportError(f"Could not render {fmt.value} export: {exc}") from exc

    filename = build_filename(
        context.organization_name,
        report_type=report_type,
        format_tag=FieldSet.DETAILED.value if field_set == FieldSet.DETAILED else None,
        extension=EXTENSIONS[fmt],
        on=generated_on,
    )
    return ExportResult(filename=filename, content=content, mimetype=MIMETYPES[fmt])


def write_export(result: ExportResult, directory: str | os.PathLike) -> Path:
    """Write atomically: either the complete file exists or nothing does."""
    target_dir = Path(directory)
    target = target_dir / result.filename
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=target_dir, prefix=".export-", suffix=".tmp")
    except OSError as exc:
        raise ExportError(f"Cannot write to {target_dir}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(result.content)
        os.replace(tmp_name, target)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise ExportError(f"Cannot write {target}: {exc}") from exc
    logger.info("Wrote %s (%d bytes)", target, len(result.content))
    return target


class ExportService:
    """Report exports for one organization."""

    def __init__(self, reports: AttendanceReportService):
        self._reports = reports

    def export(
        self,
        fmt: ExportFormat,
        field_set: FieldSet = FieldSet.DETAILED,
        *,
        period: Optional[ReportPeriod] = None,
        preset: Optional[QuickRange] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> ExportResult:
        if period is not None:
            preset = period.quick_range
        if preset is None and start is None and end is None:
            preset = ReportPeriod.DAILY.quick_range
        report = self._reports.build_summary_report(start=start, end=end, preset=preset)
        return serialize(
            report.events,
            fmt,
            field_set,
            context=self._reports.context,
            stats=report.summaries,
            report_type=period.value if period is not None else None,
        )
