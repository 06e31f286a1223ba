from __future__ import annotations

from datetime import date
from io import BytesIO
from typing import Any, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import LongTable, Paragraph, SimpleDocTemplate, Spacer, TableStyle

MARGIN = 14 * mm
PAGE_SIZE = landscape(A4)
CONTENT_WIDTH = PAGE_SIZE[0] - 2 * MARGIN

PALETTE = {
    "navy": colors.HexColor("#0F172A"),
    "muted": colors.HexColor("#64748B"),
    "stripe_even": colors.HexColor("#F8FAFC"),
    "stripe_odd": colors.HexColor("#F1F5F9"),
    "grid": colors.HexColor("#E2E8F0"),
}

_STYLES = getSampleStyleSheet()
TITLE_STYLE = ParagraphStyle(
    "report-title",
    parent=_STYLES["Heading2"],
    fontName="Helvetica-Bold",
    textColor=PALETTE["navy"],
    spaceAfter=2,
)
SUBTITLE_STYLE = ParagraphStyle(
    "report-subtitle",
    parent=_STYLES["BodyText"],
    fontName="Helvetica",
    fontSize=9,
    textColor=PALETTE["muted"],
)
TABLE_HEADER_STYLE = ParagraphStyle(
    "table-header",
    parent=_STYLES["BodyText"],
    fontName="Helvetica-Bold",
    fontSize=8.6,
    leading=10,
    textColor=colors.white,
    wordWrap="CJK",
)
TABLE_CELL_STYLE = ParagraphStyle(
    "table-cell",
    parent=_STYLES["BodyText"],
    fontName="Helvetica",
    fontSize=8.2,
    leading=10,
    textColor=PALETTE["navy"],
    wordWrap="CJK",
)


def _cell_paragraph(value: Any, *, style: ParagraphStyle) -> Paragraph:
    # Paragraph parses markup, so user text such as notes must be escaped
    return Paragraph(escape("" if value is None else str(value)).replace("\n", "<br/>"), style)


def _build_table(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> LongTable:
    data = [[_cell_paragraph(c, style=TABLE_HEADER_STYLE) for c in columns]]
    data.extend([_cell_paragraph(v, style=TABLE_CELL_STYLE) for v in row] for row in rows)
    col_width = CONTENT_WIDTH / max(1, len(columns))
    table = LongTable(data, colWidths=[col_width] * len(columns), repeatRows=1, hAlign="LEFT")
    style_commands = [
        ("BACKGROUND", (0, 0), (-1, 0), PALETTE["navy"]),
        ("GRID", (0, 0), (-1, -1), 0.4, PALETTE["grid"]),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
    ]
    for idx in range(1, len(data)):
        fill = PALETTE["stripe_even"] if idx % 2 == 0 else PALETTE["stripe_odd"]
        style_commands.append(("BACKGROUND", (0, idx), (-1, idx), fill))
    table.setStyle(TableStyle(style_commands))
    return table


def render_pdf(
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    title: str,
    organization_name: str,
    generated_on: date,
) -> bytes:
    buf = BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=PAGE_SIZE,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=MARGIN,
        bottomMargin=MARGIN,
        title=title,
    )
    story = [
        Paragraph(escape(title), TITLE_STYLE),
        Paragraph(escape(f"{organization_name} - generated {generated_on.isoformat()}"), SUBTITLE_STYLE),
        Spacer(1, 6 * mm),
        _build_table(columns, rows),
    ]
    doc.build(story)
    return buf.getvalue()
