from __future__ import annotations

import io
import logging
from datetime import date
from typing import Optional

from flask import Flask, jsonify, request, send_file

from ..common.datetime_utils import parse_iso_date, parse_month
from ..common.validators import optional_positive_int
from ..container import Container
from ..core.enums import ExportFormat, FieldSet, QuickRange, ReportPeriod
from ..core.exceptions import ExportError, TransportError, ValidationError

logger = logging.getLogger(__name__)


def _parse_date(value: Optional[str]) -> Optional[date]:
    return parse_iso_date(value) if value else None


def _parse_preset(value: Optional[str]) -> Optional[QuickRange]:
    if not value:
        return None
    try:
        return QuickRange[value.strip().upper()]
    except KeyError as exc:
        choices = ", ".join(p.name.lower() for p in QuickRange)
        raise ValidationError(f"Unknown preset {value!r} (expected one of {choices})") from exc


def _parse_period(value: Optional[str]) -> Optional[ReportPeriod]:
    if not value:
        return None
    for period in ReportPeriod:
        if period.value.lower() == value.strip().lower():
            return period
    raise ValidationError(f"Unknown report period {value!r}")


def _parse_enum(enum_cls, value: str, field_name: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError as exc:
        raise ValidationError(f"Unknown {field_name} {value!r}") from exc


def register(app: Flask, container: Container) -> None:
    @app.errorhandler(ValidationError)
    def _validation_error(exc: ValidationError):
        return jsonify({"success": False, "message": str(exc)}), 400

    @app.errorhandler(TransportError)
    def _transport_error(exc: TransportError):
        logger.warning("Attendance source unavailable: %s", exc)
        return jsonify({"success": False, "message": "Attendance data is temporarily unavailable, please retry"}), 503

    @app.errorhandler(ExportError)
    def _export_error(exc: ExportError):
        logger.error("Export failed: %s", exc)
        return jsonify({"success": False, "message": str(exc)}), 500

    @app.route("/api/organizations/<org_id>/attendance", methods=["GET"], endpoint="attendance_records")
    def attendance_records(org_id: str):
        reports = container.reports_for(org_id)
        window = reports.load_events(
            start=_parse_date(request.args.get("start")),
            end=_parse_date(request.args.get("end")),
            preset=_parse_preset(request.args.get("preset")),
            page=optional_positive_int(request.args.get("page"), "page"),
        )
        return jsonify(
            {
                "success": True,
                "data": [e.to_dict() for e in window.events],
                "hasMore": window.has_more,
                "mode": window.mode.value,
                "usedFallback": window.used_fallback,
            }
        )

    @app.route("/api/organizations/<org_id>/attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats(org_id: str):
        reports = container.reports_for(org_id)
        report = reports.build_summary_report(
            start=_parse_date(request.args.get("start")),
            end=_parse_date(request.args.get("end")),
            preset=_parse_preset(request.args.get("preset")),
        )
        return jsonify(
            {
                "success": True,
                "data": [s.to_dict() for s in report.summaries],
                "usedFallback": report.used_fallback,
            }
        )

    @app.route("/api/organizations/<org_id>/attendance/overview", methods=["GET"], endpoint="attendance_overview")
    def attendance_overview(org_id: str):
        overview = container.reports_for(org_id).daily_overview(_parse_date(request.args.get("date")))
        return jsonify({"success": True, "data": overview.to_dict()})

    @app.route("/api/organizations/<org_id>/attendance/analytics", methods=["GET"], endpoint="attendance_analytics")
    def attendance_analytics(org_id: str):
        report = container.reports_for(org_id).analytics(
            start=_parse_date(request.args.get("start")),
            end=_parse_date(request.args.get("end")),
            preset=_parse_preset(request.args.get("preset")),
        )
        return jsonify({"success": True, "data": report.to_dict()})

    @app.route(
        "/api/organizations/<org_id>/employees/<employee_id>/stats",
        methods=["GET"],
        endpoint="employee_stats",
    )
    def employee_stats(org_id: str, employee_id: str):
        month = request.args.get("month")
        if not month:
            raise ValidationError("month is required (YYYY-MM)")
        start, end = parse_month(month)
        stats = container.reports_for(org_id).employee_period_stats(employee_id, start=start, end=end)
        return jsonify({"success": True, "data": stats.to_dict()})

    @app.route("/api/organizations/<org_id>/attendance/export", methods=["GET"], endpoint="attendance_export")
    def attendance_export(org_id: str):
        fmt = _parse_enum(ExportFormat, request.args.get("format", "csv"), "format")
        field_set = _parse_enum(FieldSet, request.args.get("kind", "detailed"), "export kind")
        period = _parse_period(request.args.get("period"))
        start = _parse_date(request.args.get("start"))
        end = _parse_date(request.args.get("end"))
        preset = _parse_preset(request.args.get("preset"))
        result = container.exports_for(org_id).export(
            fmt, field_set, period=period, preset=preset, start=start, end=end
        )

        return send_file(
            io.BytesIO(result.content),
            mimetype=result.mimetype,
            as_attachment=True,
            download_name=result.filename,
        )
