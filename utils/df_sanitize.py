import datetime as dt
import math
from typing import Any, Mapping, Sequence

import numpy as np
import pandas as pd


def _to_scalar_str(x: Any):
    """Convert an arbitrary cell to something Arrow can display."""
    if x is None:
        return None
    if isinstance(x, float) and math.isnan(x):
        return None
    if isinstance(x, (bytes, bytearray)):
        return x.decode("utf-8", errors="replace")
    if isinstance(x, (dt.datetime, dt.date, dt.time)):
        return x.isoformat()
    if isinstance(x, (str, int, float, bool, np.number)):
        return x
    return str(x)


def sanitize_for_arrow(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` safe to show with ``st.dataframe``.

    Uploaded sheets often mix numbers, text and dates in one column, which
    Arrow refuses to materialise; such columns are rendered as text.
    """
    df = df.copy()
    for col in df.columns:
        s = df[col]
        if s.dtype == "object":
            mapped = s.map(_to_scalar_str)
            kinds = {type(v) for v in mapped if v is not None}
            if len(kinds) > 1:
                mapped = mapped.map(lambda v: None if v is None else str(v))
            df[col] = mapped
        elif isinstance(s.dtype, pd.CategoricalDtype):
            df[col] = s.astype(str)
    return df


def rows_preview(rows: Sequence[Mapping[str, object]], limit: int = 20) -> pd.DataFrame:
    """Build a display frame from the first ``limit`` parsed rows."""
    frame = pd.DataFrame([dict(row) for row in rows[:limit]])
    return sanitize_for_arrow(frame)
