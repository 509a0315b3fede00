"""DataFrame compatibility layer for pandas/polars interoperability."""

from typing import Any

import narwhals as nw
import pandas as pd
import polars as pl

from .config import OutputFormat

DataFrame = Any  # Any object implementing __arrow_c_stream__


def to_polars(df: Any) -> pl.DataFrame:
    """Convert any Arrow-compatible DataFrame to polars.

    Parameters
    ----------
    df : Any
        Input DataFrame. pandas frames are converted directly; anything else
        must implement the Arrow PyCapsule Interface (``__arrow_c_stream__``),
        e.g. pyarrow Tables or duckdb results.

    Returns
    -------
    pl.DataFrame
        Polars DataFrame.

    Raises
    ------
    TypeError
        If input is neither pandas nor Arrow-compatible.
    """
    if isinstance(df, pl.DataFrame):
        return df
    if isinstance(df, pd.DataFrame):
        return pl.from_pandas(df)

    if hasattr(df, "__arrow_c_stream__"):
        return nw.from_arrow(df, backend=pl).to_native()

    msg = f"Expected object implementing '__arrow_c_stream__', got: {type(df).__name__}"
    raise TypeError(msg)


def to_pandas(df: Any) -> pd.DataFrame:
    """Convert any Arrow-compatible DataFrame to pandas.

    Parameters
    ----------
    df : Any
        pandas, polars, or any object implementing ``__arrow_c_stream__``.

    Returns
    -------
    pd.DataFrame
        pandas DataFrame.

    Raises
    ------
    TypeError
        If input is not a supported DataFrame.
    """
    if isinstance(df, pd.DataFrame):
        return df
    if isinstance(df, pl.DataFrame):
        return df.to_pandas()

    if hasattr(df, "__arrow_c_stream__"):
        return nw.from_arrow(df, backend=pd).to_native()

    msg = f"Expected object implementing '__arrow_c_stream__', got: {type(df).__name__}"
    raise TypeError(msg)


def convert_output(pdf: pd.DataFrame, output: str = "pandas") -> DataFrame:
    """Return a collected pandas result in the requested local format.

    Parameters
    ----------
    pdf : pd.DataFrame
        Collected result.
    output : {"pandas", "polars"}, default "pandas"
        Local table type.

    Returns
    -------
    pd.DataFrame or pl.DataFrame
    """
    try:
        fmt = OutputFormat(output)
    except ValueError:
        raise ValueError(f"output must be one of {[f.value for f in OutputFormat]}, got {output!r}") from None
    if fmt is OutputFormat.POLARS:
        return to_polars(pdf)
    return pdf
