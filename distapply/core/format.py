"""Shared formatting utilities for displaying apply results."""

import numpy as np
import pandas as pd
from prettytable import PrettyTable, TableStyle

from .dataframe import to_pandas

WIDTH = 78
THICK_SEP = "=" * WIDTH


def _make_table(headers, rows, align_map):
    """Create a PrettyTable with SINGLE_BORDER style and per-column alignment."""
    t = PrettyTable()
    t.set_style(TableStyle.SINGLE_BORDER)
    t.field_names = headers
    for row in rows:
        t.add_row(row)
    for h in headers:
        t.align[h] = align_map.get(h, "r")
    return str(t)


def format_title(title, subtitle=None):
    """Return title block lines with thick separators."""
    lines = [THICK_SEP, f" {title}"]
    if subtitle is not None:
        lines.append(f" {subtitle}")
    lines.append(THICK_SEP)
    return lines


def format_value(val, fmt=".4f", na_str="NA"):
    """Format a numeric value, returning na_str for None/NaN."""
    if val is None or (isinstance(val, float) and np.isnan(val)):
        return na_str
    return f"{val:{fmt}}"


def format_p_value(p):
    """Format a p-value, using ``<0.001`` for very small values."""
    if p is None or np.isnan(p):
        return "NA"
    if p < 0.001:
        return "<0.001"
    return f"{p:.4f}"


def _format_cell(column, val, fmt):
    if column == "p_value" and isinstance(val, (float, np.floating)):
        return format_p_value(float(val))
    if isinstance(val, (float, np.floating)):
        return format_value(float(val), fmt)
    if val is None or val is pd.NA:
        return "NA"
    return str(val)


def format_frame(df, title=None, n=10, fmt=".4f"):
    """Render the first ``n`` rows of a local table.

    Parameters
    ----------
    df : pandas.DataFrame or polars.DataFrame
        Table to render.
    title : str, optional
        Title shown above the table.
    n : int, default 10
        Number of rows to show.
    fmt : str, default ".4f"
        Format spec for floating point cells.

    Returns
    -------
    str
    """
    pdf = to_pandas(df)
    head = pdf.head(n)
    headers = [str(c) for c in head.columns]
    rows = [
        [_format_cell(h, val, fmt) for h, val in zip(headers, row, strict=True)] for row in head.itertuples(index=False)
    ]
    align = {h: "l" for h, dtype in zip(headers, head.dtypes, strict=True) if not pd.api.types.is_numeric_dtype(dtype)}

    lines = format_title(title) if title is not None else []
    lines.append(_make_table(headers, rows, align))
    if len(pdf) > n:
        lines.append(f" ... {len(pdf) - n} more rows")
    return "\n".join(lines)


def format_result_type(result, label):
    """Describe the class of a result, e.g. ``Class of result from gapply(): DataFrame``."""
    cls = type(result)
    return f"Class of result from {label}(): {cls.__module__}.{cls.__qualname__}"
