"""Tests for bundled datasets."""

import numpy as np

from distapply.datasets import MTCARS_COLUMNS, load_mtcars


def test_load_mtcars_shape():
    mtcars = load_mtcars()
    assert mtcars.shape == (32, 11)
    assert list(mtcars.columns) == MTCARS_COLUMNS
    assert mtcars.index.name == "model"
    assert all(dtype == np.float64 for dtype in mtcars.dtypes)


def test_load_mtcars_known_rows():
    mtcars = load_mtcars()
    assert mtcars.loc["Mazda RX4", "mpg"] == 21.0
    assert mtcars.loc["Toyota Corolla", "mpg"] == 33.9


def test_load_mtcars_cylinder_groups():
    counts = load_mtcars()["cyl"].value_counts().sort_index()
    assert counts.to_dict() == {4.0: 11, 6.0: 7, 8.0: 14}


def test_load_mtcars_with_model_column():
    mtcars = load_mtcars(index=True)
    assert mtcars.columns[0] == "model"
    assert mtcars["model"].iloc[0] == "Mazda RX4"
    assert mtcars.index.tolist() == list(range(32))
