"""Tests for copying local tables to Spark."""

import polars as pl
import pytest

from distapply.datasets import MTCARS_COLUMNS
from distapply.spark import copy_to


def test_copy_drops_row_names(spark_session, mtcars):
    sdf = copy_to(spark_session, mtcars)
    assert sdf.columns == MTCARS_COLUMNS
    assert sdf.count() == 32


def test_copy_keeps_index_as_column(spark_session, mtcars):
    sdf = copy_to(spark_session, mtcars, keep_index=True)
    assert sdf.columns[0] == "model"
    assert sdf.filter(sdf.model == "Mazda RX4").count() == 1


def test_copy_registers_view(spark_session, mtcars):
    copy_to(spark_session, mtcars, name="cars_view")
    assert spark_session.table("cars_view").count() == 32


def test_copy_existing_view_without_overwrite_raises(spark_session, mtcars):
    copy_to(spark_session, mtcars, name="cars_once")
    with pytest.raises(ValueError, match="already exists"):
        copy_to(spark_session, mtcars, name="cars_once", overwrite=False)


def test_copy_repartitions(spark_session, mtcars):
    sdf = copy_to(spark_session, mtcars, n_partitions=3)
    assert sdf.rdd.getNumPartitions() == 3


def test_copy_invalid_partitions_raises(spark_session, mtcars):
    with pytest.raises(ValueError, match="n_partitions"):
        copy_to(spark_session, mtcars, n_partitions=0)


def test_copy_from_polars(spark_session):
    sdf = copy_to(spark_session, pl.DataFrame({"a": [1.0, 2.0], "b": ["x", "y"]}))
    assert sorted(r.b for r in sdf.collect()) == ["x", "y"]
