"""The distributed apply family on Spark.

Partition closures run through ``mapInPandas``, group closures through
``groupBy().applyInPandas`` and list closures through
``SparkContext.parallelize().map()``. Collect variants ship each result
back pickled in a single binary column and stack the frames on the driver.
"""

from __future__ import annotations

import logging
from functools import reduce

from distapply.core.config import DEFAULT_SAMPLE_ROWS, PAYLOAD_COLUMN
from distapply.core.dataframe import convert_output
from distapply.core.schema import Schema, SchemaError, as_schema
from distapply.distributed import (
    apply_group,
    apply_partition,
    check_callable,
    decode_payloads,
    group_collect_udf,
    group_udf,
    partition_collect_udf,
    partition_udf,
)

from ._utils import distribute_packages, get_or_create_spark, require_spark_dataframe, validate_spark_input

log = logging.getLogger(__name__)


def _payload_schema():
    from pyspark.sql.types import BinaryType, StructField, StructType

    return StructType([StructField(PAYLOAD_COLUMN, BinaryType(), False)])


def _grouping_columns(cols):
    if isinstance(cols, str):
        cols = [cols]
    cols = list(cols)
    if not cols:
        raise ValueError("At least one grouping column is required.")
    return cols


def _collect_payloads(result_sdf):
    rows = result_sdf.collect()
    return decode_payloads(row[PAYLOAD_COLUMN] for row in rows), len(rows)


def infer_schema(sdf, func, group_by=None, sample_rows=DEFAULT_SAMPLE_ROWS):
    """Infer a closure's output schema by running it on a driver-side sample.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        Input data.
    func : callable
        Closure taking one pandas DataFrame.
    group_by : list of str, optional
        When given, the closure runs on the first group and the grouping
        columns are prepended to its output.
    sample_rows : int, default 1000
        Rows sampled when not grouping.

    Returns
    -------
    Schema

    Raises
    ------
    ValueError
        If the input is empty.
    SchemaError
        If the closure produced no columns for the sample.
    """
    if group_by:
        from pyspark.sql import functions as F

        first = sdf.select(*group_by).limit(1).collect()
        if not first:
            raise ValueError("Cannot infer a schema from an empty DataFrame; pass columns explicitly.")
        key = tuple(first[0])
        cond = reduce(lambda a, b: a & b, [F.col(c).eqNullSafe(v) for c, v in zip(group_by, key, strict=True)])
        sample = sdf.filter(cond).toPandas()
        out = apply_group(func, key, sample, pass_key=False, key_names=group_by)
    else:
        if sample_rows < 1:
            raise ValueError(f"sample_rows must be positive, got {sample_rows}")
        sample = sdf.limit(sample_rows).toPandas()
        if len(sample) == 0:
            raise ValueError("Cannot infer a schema from an empty DataFrame; pass columns explicitly.")
        out = apply_partition(func, sample)

    if out is None or len(out.columns) == 0:
        raise SchemaError("The closure returned no columns for the sample; pass columns explicitly.")

    schema = Schema.from_pandas(out)
    log.info("Inferred output schema from a sample of %d rows: %s", len(sample), schema.to_ddl())
    return schema


def spark_apply(sdf, func, group_by=None, columns=None, packages=None, sample_rows=DEFAULT_SAMPLE_ROWS):
    """Apply a closure to each partition, or each group, of a Spark DataFrame.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        Input data.
    func : callable
        ``func(pdf) -> table``. Receives a whole partition, or a whole group
        (grouping columns included) when ``group_by`` is set.
    group_by : str or list of str, optional
        Grouping columns. Grouping columns the closure does not return are
        prepended to its output.
    columns : schema descriptor, optional
        Output schema. When omitted it is inferred by running ``func`` on a
        sample on the driver, which costs an extra pass over the sample.
        When grouping, the grouping columns are prepended if not declared.
    packages : str, Path or list, optional
        Local Python files or archives shipped to workers before running.
    sample_rows : int, default 1000
        Sample size for schema inference without ``group_by``.

    Returns
    -------
    pyspark.sql.DataFrame

    Examples
    --------
    .. code-block:: python

        from distapply.models import fit_group_model

        results = spark_apply(mtcars_sdf, fit_group_model, group_by="cyl", columns=MODEL_SCHEMA)
    """
    check_callable(func)
    require_spark_dataframe(sdf)
    if packages:
        distribute_packages(sdf.sparkSession, packages)

    if group_by is None:
        schema = as_schema(columns) if columns is not None else infer_schema(sdf, func, sample_rows=sample_rows)
        log.info("spark_apply over partitions -> %s", schema.to_ddl())
        return sdf.mapInPandas(partition_udf(func, schema), schema=schema.to_spark())

    keys = _grouping_columns(group_by)
    validate_spark_input(sdf, keys)
    if columns is None:
        schema = infer_schema(sdf, func, group_by=keys)
    else:
        schema = as_schema(columns).prepend(Schema.from_spark(sdf.select(*keys).schema))

    log.info("spark_apply over groups of %s -> %s", keys, schema.to_ddl())
    udf = group_udf(func, schema, pass_key=False, key_names=keys)
    return sdf.groupBy(*keys).applyInPandas(udf, schema=schema.to_spark())


def dapply(sdf, func, schema):
    """Apply a closure to each partition and keep the result distributed.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        Input data.
    func : callable
        ``func(pdf) -> table`` run once per non-empty partition.
    schema : schema descriptor
        Output schema. Required; the closure output is cast to it and a
        value that cannot be cast raises ``SchemaError`` on the worker.

    Returns
    -------
    pyspark.sql.DataFrame
    """
    check_callable(func)
    require_spark_dataframe(sdf)
    schema = as_schema(schema)

    log.info("dapply over partitions -> %s", schema.to_ddl())
    return sdf.mapInPandas(partition_udf(func, schema), schema=schema.to_spark())


def dapply_collect(sdf, func, output="pandas"):
    """Apply a closure to each partition and collect the results to the driver.

    No schema is needed. The combined output must fit in driver memory.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        Input data.
    func : callable
        ``func(pdf) -> table`` run once per non-empty partition.
    output : {"pandas", "polars"}, default "pandas"
        Local table type.

    Returns
    -------
    pandas.DataFrame or polars.DataFrame
    """
    check_callable(func)
    require_spark_dataframe(sdf)

    result_sdf = sdf.mapInPandas(partition_collect_udf(func), schema=_payload_schema())
    pdf, n_parts = _collect_payloads(result_sdf)
    log.info("dapply_collect gathered %d rows from %d partitions to driver", len(pdf), n_parts)
    return convert_output(pdf, output)


def gapply(sdf, cols, func, schema):
    """Apply a closure to each group and keep the result distributed.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        Input data.
    cols : str or list of str
        Grouping columns.
    func : callable
        ``func(key, pdf) -> table`` where ``key`` is a tuple of the group's
        values for ``cols``. The closure adds key columns itself if wanted.
    schema : schema descriptor
        Output schema. Required.

    Returns
    -------
    pyspark.sql.DataFrame
    """
    check_callable(func)
    require_spark_dataframe(sdf)
    keys = _grouping_columns(cols)
    validate_spark_input(sdf, keys)
    schema = as_schema(schema)

    log.info("gapply over groups of %s -> %s", keys, schema.to_ddl())
    return sdf.groupBy(*keys).applyInPandas(group_udf(func, schema), schema=schema.to_spark())


def gapply_collect(sdf, cols, func, output="pandas"):
    """Apply a closure to each group and collect the results to the driver.

    Parameters
    ----------
    sdf : pyspark.sql.DataFrame
        Input data.
    cols : str or list of str
        Grouping columns.
    func : callable
        ``func(key, pdf) -> table``.
    output : {"pandas", "polars"}, default "pandas"
        Local table type.

    Returns
    -------
    pandas.DataFrame or polars.DataFrame
    """
    check_callable(func)
    require_spark_dataframe(sdf)
    keys = _grouping_columns(cols)
    validate_spark_input(sdf, keys)

    result_sdf = sdf.groupBy(*keys).applyInPandas(group_collect_udf(func), schema=_payload_schema())
    pdf, n_groups = _collect_payloads(result_sdf)
    log.info("gapply_collect gathered %d rows from %d groups to driver", len(pdf), n_groups)
    return convert_output(pdf, output)


def spark_lapply(items, func, spark=None, n_slices=None):
    """Apply a closure to each element of a list on the cluster.

    Parameters
    ----------
    items : iterable
        Elements to distribute. Each must be picklable.
    func : callable
        ``func(element) -> value``.
    spark : pyspark.sql.SparkSession, optional
        Spark session. If None, an active session is used or created.
    n_slices : int, optional
        Number of slices. Defaults to one slice per element.

    Returns
    -------
    list
        Results in input order.
    """
    check_callable(func)
    items = list(items)
    if not items:
        return []
    n_slices = len(items) if n_slices is None else n_slices
    if n_slices < 1:
        raise ValueError(f"n_slices must be positive, got {n_slices}")

    spark = get_or_create_spark(spark)
    log.info("spark_lapply over %d elements in %d slices", len(items), n_slices)
    return spark.sparkContext.parallelize(items, n_slices).map(func).collect()
