"""Shared fixtures for Spark backend tests."""

import pytest

from distapply.datasets import load_mtcars


def _spark_available():
    """Return True if a local SparkSession can be created."""
    try:
        from pyspark.sql import SparkSession

        spark = (
            SparkSession.builder.master("local[1]")
            .appName("java-check")
            .config("spark.ui.enabled", "false")
            .getOrCreate()
        )
        spark.stop()
        return True
    except (RuntimeError, OSError, ImportError):
        return False


_HAS_SPARK = None


def has_spark():
    """Cached check for Spark availability."""
    global _HAS_SPARK
    if _HAS_SPARK is None:
        _HAS_SPARK = _spark_available()
    return _HAS_SPARK


@pytest.fixture(scope="module")
def spark_session():
    """Shared SparkSession fixture that skips when Java is not available."""
    if not has_spark():
        pytest.skip("Spark/Java not available")
    from pyspark.sql import SparkSession

    spark = (
        SparkSession.builder.master("local[2]")
        .appName("distapply_test")
        .config("spark.ui.enabled", "false")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.default.parallelism", "2")
        .config("spark.sql.execution.arrow.pyspark.enabled", "true")
        .getOrCreate()
    )
    yield spark
    spark.stop()


@pytest.fixture(scope="module")
def mtcars_sdf(spark_session):
    from distapply.spark import copy_to

    return copy_to(spark_session, load_mtcars(), name="mtcars", n_partitions=2)
