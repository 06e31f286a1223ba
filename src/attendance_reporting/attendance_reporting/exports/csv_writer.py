from __future__ import annotations

import csv
import io
from typing import Sequence

from ..core.constants import CSV_ENCODING


def render_csv(columns: Sequence[str], rows: Sequence[Sequence[str]]) -> bytes:
    """Values with a comma, quote, CR or LF are quoted; quotes are doubled.

    Rows end in CRLF, which also makes the writer quote a bare CR.
    """
    out = io.StringIO()
    writer = csv.writer(out, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(columns)
    writer.writerows(rows)
    return out.getvalue().encode(CSV_ENCODING)
