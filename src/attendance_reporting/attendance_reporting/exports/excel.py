from __future__ import annotations

import io
from typing import Sequence

import pandas as pd

SHEET_NAME = "Attendance"


def render_excel(columns: Sequence[str], rows: Sequence[Sequence[str]], *, sheet_name: str = SHEET_NAME) -> bytes:
    df = pd.DataFrame(list(rows), columns=list(columns))

    # Ghi vào file Excel trong bộ nhớ
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name[:31])
    return output.getvalue()
