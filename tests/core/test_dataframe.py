"""Tests for the DataFrame compatibility layer."""

import pandas as pd
import polars as pl
import pyarrow as pa
import pytest

from distapply.core.dataframe import convert_output, to_pandas, to_polars


def test_to_polars_from_pandas(small_frame):
    out = to_polars(small_frame)
    assert isinstance(out, pl.DataFrame)
    assert out.columns == ["g", "x", "n"]


def test_to_polars_passthrough():
    df = pl.DataFrame({"a": [1]})
    assert to_polars(df) is df


def test_to_pandas_from_arrow():
    out = to_pandas(pa.table({"a": [1.0, 2.0]}))
    assert isinstance(out, pd.DataFrame)
    assert out["a"].tolist() == [1.0, 2.0]


def test_to_pandas_from_polars():
    out = to_pandas(pl.DataFrame({"a": [1, 2]}))
    assert out["a"].tolist() == [1, 2]


@pytest.mark.parametrize("func", [to_pandas, to_polars])
def test_unsupported_input_raises(func):
    with pytest.raises(TypeError, match="__arrow_c_stream__"):
        func([1, 2, 3])


def test_convert_output(small_frame):
    assert convert_output(small_frame) is small_frame
    assert isinstance(convert_output(small_frame, "polars"), pl.DataFrame)


def test_convert_output_unknown_format_raises(small_frame):
    with pytest.raises(ValueError, match="output must be one of"):
        convert_output(small_frame, "arrow")
