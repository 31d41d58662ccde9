# utils/helpers.py
import math
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .constants import MISSING_PARENT_SENTINELS


def normalize_text(x) -> str:
    """Return a stripped string, converting NaN/None to ""."""
    try:
        if x is None:
            return ""
        if isinstance(x, float) and np.isnan(x):
            return ""
        if x is pd.NaT:
            return ""
    except Exception:
        return ""
    return str(x).strip()


def coerce_number(x) -> Optional[float]:
    """Return x as a finite float, or None when missing or non-numeric."""
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, str):
        x = x.strip()
        # A comma is a decimal separator only when no dot is present
        x = x.replace(",", "") if "." in x else x.replace(",", ".")
        if x == "":
            return None
    try:
        value = float(x)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def coerce_timestamp(x) -> Optional[pd.Timestamp]:
    """Parse a cell into a Timestamp; None when missing or unparseable."""
    if x is None:
        return None
    if isinstance(x, str) and x.strip() == "":
        return None
    try:
        ts = pd.to_datetime(x)
    except (TypeError, ValueError):
        return None
    if pd.isna(ts):
        return None
    return ts


def is_missing_parent(x) -> bool:
    """True when a parent reference is blank, NaN or the 'empty' sentinel."""
    return normalize_text(x).lower() in MISSING_PARENT_SENTINELS


def ensure_columns(df: pd.DataFrame, columns: Iterable[str]) -> pd.DataFrame:
    """Return a copy of df with every listed column present (missing ones blank)."""
    if not isinstance(df, pd.DataFrame):
        df = pd.DataFrame()
    df2 = df.copy()
    df2.columns = [normalize_text(c) for c in df2.columns]
    for c in columns:
        if c not in df2.columns:
            df2[c] = ""
    return df2


def drop_blank_names(df: pd.DataFrame, name_col: str) -> pd.DataFrame:
    """Drop rows whose name cell is blank."""
    if not isinstance(df, pd.DataFrame) or df.empty or name_col not in df.columns:
        return df
    mask_blank = df[name_col].map(normalize_text) == ""
    return df[~mask_blank].copy()
