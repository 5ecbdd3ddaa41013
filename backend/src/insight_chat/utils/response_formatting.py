"""
Response Formatting Utilities

This module handles formatting of query results: converting store frames into
JSON-safe rows, choosing a chart encoding for a result, and summarising rows
for the answer prompt.
"""

import json
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from ..schemas import CategorySeries, ChartPoint, SingleMetric, TimeSeries


CATEGORY_TRIGGERS = ("category", "group")
TIME_TRIGGERS = ("time", "quarter", "month", "date")


def to_json_scalar(value: Any) -> Any:
    """
    Convert a store value into a JSON-safe Python scalar.

    Args:
        value: Cell value from a DuckDB/pandas result

    Returns:
        str, int, float, bool or None; timestamps become ISO-8601 strings
    """
    if value is None:
        return None
    if isinstance(value, (list, tuple, dict, np.ndarray)):
        return value if not isinstance(value, np.ndarray) else value.tolist()
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    elif isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, (pd.Timestamp, datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (pd.Timedelta, timedelta)):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def dataframe_to_records(df: Optional[pd.DataFrame]) -> List[Dict[str, Any]]:
    """
    Convert a query result DataFrame into ordered row mappings.

    Args:
        df: DataFrame with query results

    Returns:
        One dict per row, keys in column order
    """
    if df is None or df.empty:
        return []
    columns = [str(c) for c in df.columns]
    return [
        {col: to_json_scalar(val) for col, val in zip(columns, row)}
        for row in df.itertuples(index=False, name=None)
    ]


def coerce_number(value: Any) -> float:
    """Parse a chart value; missing or unparseable values become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) or math.isinf(number) else number


def coerce_label(value: Any) -> str:
    if value is None or value == "":
        return "Unknown"
    return str(value)


def _series_points(rows: List[Dict[str, Any]]) -> List[ChartPoint]:
    points = []
    for row in rows:
        values = list(row.values())
        label = values[0] if values else None
        value = values[1] if len(values) > 1 else None
        points.append(ChartPoint(label=coerce_label(label), value=coerce_number(value)))
    return points


def build_visualization(rows: Optional[List[Dict[str, Any]]], message: str):
    """
    Choose a chart encoding for a result set.

    Only the first two columns feed the series encodings (label, value).

    Args:
        rows: Query result rows
        message: Original user message

    Returns:
        CategorySeries, TimeSeries, SingleMetric, or None when no encoding fits
    """
    if not rows:
        return None
    m = (message or "").lower()

    if any(t in m for t in CATEGORY_TRIGGERS):
        return CategorySeries(data=_series_points(rows))
    if any(t in m for t in TIME_TRIGGERS):
        return TimeSeries(data=_series_points(rows))
    if len(rows) == 1:
        return SingleMetric(data=dict(rows[0]))
    return None


def summarize_results(rows: Optional[List[Dict[str, Any]]], sample_size: int = 3) -> str:
    """
    Summarise rows for the answer prompt.

    Args:
        rows: Query result rows
        sample_size: Number of leading rows to include verbatim

    Returns:
        Row count plus a JSON sample, or a no-results note
    """
    if not rows:
        return "Query returned no results."
    sample = json.dumps(rows[:sample_size], default=str)
    return f"Query returned {len(rows)} rows. Sample data: {sample}"
