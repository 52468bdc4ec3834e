import datetime as dt
import math
import re
from typing import Any

import pandas as pd
from openpyxl.utils.datetime import from_excel

_LIST_SPLIT_RE = re.compile(r"[;\n]")

def is_nan(v: Any) -> bool:
    return v is pd.NaT or (isinstance(v, float) and math.isnan(v))

def norm_str(v: Any) -> str | None:
    if v is None or is_nan(v):
        return None
    if isinstance(v, str):
        s = v.strip()
        return s if s else None
    return str(v).strip()

def to_date(v: Any) -> dt.date | None:
    if v is None or is_nan(v):
        return None
    if isinstance(v, dt.datetime):
        return v.date()
    if isinstance(v, dt.date):
        return v
    if isinstance(v, (int, float)) and not isinstance(v, bool) and v > 30000:  # excel serial
        try:
            d = from_excel(v)
            if isinstance(d, dt.datetime):
                return d.date()
            return d
        except (ValueError, OverflowError, TypeError):
            return None
    if isinstance(v, str):
        s = v.strip()
        for fmt in ("%Y-%m-%d", "%d.%m.%Y"):
            try:
                return dt.datetime.strptime(s, fmt).date()
            except ValueError:
                pass
    return None

def to_float(v: Any, default: float | None = None) -> float | None:
    if v is None or is_nan(v):
        return default
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return float(v)
    s = str(v).strip().replace(" ", "").replace(",", ".")
    if not s or s.lower() in ("nan", "none", "-", "—"):
        return default
    try:
        return float(s)
    except ValueError:
        return default

def split_notes(v: Any) -> list[str]:
    """Accepts a list of notes or one text block with one note per line / `;`."""
    if v is None or is_nan(v):
        return []
    if isinstance(v, str):
        parts = _LIST_SPLIT_RE.split(v)
    else:
        parts = [str(p) for p in v]
    return [p.strip() for p in parts if p and p.strip()]
