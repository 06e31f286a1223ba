"""Ví dụ: dùng service layer (không qua Flask).

Builds the container from the active settings module, prints one
organization's employee summaries for the last 7 days and its department
figures for the last 30 days, then writes the detailed CSV export to
./exports.

    python -m examples.example_usage <organization-id>
"""

import importlib
import sys

from config import get_settings_module

from src.attendance_reporting.attendance_reporting.container import build_container
from src.attendance_reporting.attendance_reporting.core.enums import ExportFormat, FieldSet, QuickRange
from src.attendance_reporting.attendance_reporting.exports.service import write_export


def main(org_id: str):
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings)

    report = container.reports_for(org_id).build_summary_report(preset=QuickRange.LAST_7_DAYS)
    for summary in report.summaries:
        print(summary.to_dict())

    analytics = container.reports_for(org_id).analytics(preset=QuickRange.LAST_30_DAYS)
    for dept in analytics.departments:
        print(dept.to_dict())

    result = container.exports_for(org_id).export(ExportFormat.CSV, FieldSet.DETAILED, preset=QuickRange.LAST_7_DAYS)
    print("wrote", write_export(result, "exports"))


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "1")
