"""Copy local tables to the cluster."""

from __future__ import annotations

import logging

from distapply.core.dataframe import to_pandas

from ._utils import get_or_create_spark

log = logging.getLogger(__name__)


def copy_to(spark, data, name=None, overwrite=True, n_partitions=None, keep_index=False, index_name="model"):
    """Copy a local table into a Spark DataFrame.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession or None
        Spark session. If None, an active session is used or created.
    data : pandas.DataFrame, polars.DataFrame or Arrow table
        Local data to distribute.
    name : str, optional
        Register the result as a temporary view under this name.
    overwrite : bool, default True
        Replace an existing view called ``name``. When False an existing
        view raises ``ValueError``.
    n_partitions : int, optional
        Repartition the copy into this many partitions.
    keep_index : bool, default False
        Keep a pandas row index as a leading column (row names such as the
        car models of mtcars are otherwise dropped).
    index_name : str, default "model"
        Column name for the kept index when it is unnamed.

    Returns
    -------
    pyspark.sql.DataFrame
    """
    spark = get_or_create_spark(spark)
    pdf = to_pandas(data)

    if keep_index:
        pdf = pdf.rename_axis(pdf.index.name or index_name).reset_index()
    else:
        pdf = pdf.reset_index(drop=True)

    if name is not None and not overwrite and spark.catalog.tableExists(name):
        raise ValueError(f"A table or view named {name!r} already exists; pass overwrite=True to replace it.")

    sdf = spark.createDataFrame(pdf)
    if n_partitions is not None:
        if n_partitions < 1:
            raise ValueError(f"n_partitions must be positive, got {n_partitions}")
        sdf = sdf.repartition(n_partitions)

    if name is not None:
        sdf.createOrReplaceTempView(name)

    log.info("Copied %d rows x %d columns to Spark%s", len(pdf), len(pdf.columns), f" as {name!r}" if name else "")
    return sdf
