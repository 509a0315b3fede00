"""Tests for result formatting utilities."""

import numpy as np
import pandas as pd
import polars as pl
import pytest

from distapply.core.format import (
    THICK_SEP,
    WIDTH,
    format_frame,
    format_p_value,
    format_result_type,
    format_title,
    format_value,
)


def test_thick_sep_width():
    assert len(THICK_SEP) == WIDTH == 78


def test_format_title_with_subtitle():
    lines = format_title("Result of gapply", "cyl groups")
    assert lines == [THICK_SEP, " Result of gapply", " cyl groups", THICK_SEP]


@pytest.mark.parametrize("val,expected", [(None, "NA"), (float("nan"), "NA"), (1.23456, "1.2346")])
def test_format_value(val, expected):
    assert format_value(val) == expected


@pytest.mark.parametrize("p,expected", [(0.0001, "<0.001"), (0.05, "0.0500"), (float("nan"), "NA")])
def test_format_p_value(p, expected):
    assert format_p_value(p) == expected


def test_format_frame_shows_head_and_remainder():
    pdf = pd.DataFrame({"term": [f"t{i}" for i in range(12)], "estimate": np.arange(12, dtype=float)})
    text = format_frame(pdf, title="Result of dapply", n=10)
    assert "Result of dapply" in text
    assert "t9" in text
    assert "t10" not in text
    assert "2 more rows" in text


def test_format_frame_renders_missing_and_p_values():
    pdf = pd.DataFrame({"term": ["(Intercept)"], "std_error": [np.nan], "p_value": [0.0001]})
    text = format_frame(pdf)
    assert "NA" in text
    assert "<0.001" in text


def test_format_frame_accepts_polars():
    text = format_frame(pl.DataFrame({"mpg": [21.0, 22.8]}))
    assert "21.0000" in text


def test_format_result_type():
    assert format_result_type(pd.DataFrame(), "gapply_collect") == (
        "Class of result from gapply_collect(): pandas.core.frame.DataFrame"
    )
