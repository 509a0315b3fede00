"""Walkthrough of the distributed apply family on the mtcars data.

Each ``example_*`` function reproduces one step: fit a linear model of
``mpg`` on every other column for each ``cyl`` group, or jitter the ``mpg``
column partition by partition. Run all of them with::

    python -m distapply.examples --master "local[4]"
"""

from __future__ import annotations

import argparse
import logging
from functools import partial

import pandas as pd

from distapply.core.config import APPLY_FAMILY, Granularity, ResultMode, SessionConfig
from distapply.core.format import format_frame, format_result_type
from distapply.core.schema import Schema
from distapply.datasets import load_mtcars
from distapply.models import fit_group_model, jitter_column
from distapply.spark import (
    copy_to,
    dapply,
    dapply_collect,
    gapply,
    gapply_collect,
    get_or_create_spark,
    is_spark_dataframe,
    spark_apply,
    spark_lapply,
)

logger = logging.getLogger(__name__)

MODEL_SCHEMA = Schema(
    [
        ("cyl", "double"),
        ("term", "string"),
        ("estimate", "double"),
        ("std_error", "double"),
        ("statistic", "double"),
        ("p_value", "double"),
    ]
)

JITTER_SCHEMA = Schema([("mpg", "double"), ("jittered_mpg", "double")])

CYLINDERS = (4.0, 6.0, 8.0)


def describe_family():
    """Return the apply family as a table: granularity, input and output of each entry point."""
    outputs = {ResultMode.DISTRIBUTED: "Spark DF", ResultMode.LOCAL: "local table"}
    rows = []
    for name, (granularity, mode) in APPLY_FAMILY.items():
        is_list = granularity is Granularity.ELEMENT
        rows.append(
            {
                "function": name,
                "applied_to": "partition or group" if name == "spark_apply" else granularity.value,
                "input": "list" if is_list else "Spark DF",
                "output": "list" if is_list else outputs[mode],
            }
        )
    return pd.DataFrame(rows)


def _model_with_key_first(key, pdf):
    tidy = fit_group_model(pdf)
    tidy.insert(0, "cyl", key[0])
    return tidy


def _model_with_key_last(key, pdf):
    tidy = fit_group_model(pdf)
    tidy["cyl"] = key[0]
    return tidy


def _fit_cylinder(mtcars, cyl):
    return fit_group_model(mtcars[mtcars["cyl"] == cyl])


def example_spark_apply(spark, mtcars_sdf):
    """Grouped model fit with ``spark_apply``; the grouping column is added automatically."""
    return spark_apply(mtcars_sdf, fit_group_model, group_by="cyl", columns=MODEL_SCHEMA)


def example_gapply(spark, mtcars_sdf):
    """Grouped model fit with ``gapply``; the closure binds the key itself."""
    return gapply(mtcars_sdf, "cyl", _model_with_key_first, MODEL_SCHEMA)


def example_gapply_collect(spark, mtcars_sdf):
    """Same fit as :func:`example_gapply`, collected to the driver without a schema."""
    return gapply_collect(mtcars_sdf, "cyl", _model_with_key_last)


def example_dapply(spark, mtcars_sdf):
    """Jitter ``mpg`` in every partition, keeping the result distributed."""
    return dapply(mtcars_sdf.select("mpg"), jitter_column, JITTER_SCHEMA)


def example_dapply_collect(spark, mtcars_sdf):
    """Jitter ``mpg`` in every partition and collect the result."""
    return dapply_collect(mtcars_sdf.select("mpg"), jitter_column)


def example_spark_lapply(spark, mtcars_sdf=None, cylinders=CYLINDERS):
    """Fit one model per cylinder count from a plain list, then bind the rows.

    The local mtcars frame travels with the closure to every worker.
    """
    results = spark_lapply(list(cylinders), partial(_fit_cylinder, load_mtcars()), spark=spark)
    return pd.concat(results, ignore_index=True)


SECTIONS = {
    "spark_apply": example_spark_apply,
    "gapply": example_gapply,
    "gapply_collect": example_gapply_collect,
    "dapply": example_dapply,
    "dapply_collect": example_dapply_collect,
    "spark_lapply": example_spark_lapply,
}


def run_walkthrough(spark=None, sections=None, emit=print, rows=10, n_partitions=None):
    """Run the walkthrough sections and display each result.

    Parameters
    ----------
    spark : pyspark.sql.SparkSession, optional
        Spark session. If None, an active session is used or created.
    sections : list of str, optional
        Section names from ``SECTIONS``. Defaults to all, in order.
    emit : callable, default print
        Function called with each block of output text.
    rows : int, default 10
        Rows shown per result.
    n_partitions : int, optional
        Partitions for the copied mtcars data.

    Returns
    -------
    dict
        Section name to its raw result (Spark DataFrame or local table).
    """
    sections = list(sections or SECTIONS)
    unknown = [s for s in sections if s not in SECTIONS]
    if unknown:
        raise ValueError(f"Unknown sections {unknown}. Choose from {list(SECTIONS)}")

    spark = get_or_create_spark(spark)
    mtcars_sdf = copy_to(spark, load_mtcars(), name="mtcars", overwrite=True, n_partitions=n_partitions)

    emit(format_frame(describe_family(), title="Distributed apply family"))

    results = {}
    for name in sections:
        logger.info("Running %s example", name)
        result = SECTIONS[name](spark, mtcars_sdf)
        local = result.limit(rows).toPandas() if is_spark_dataframe(result) else result
        emit(format_frame(local, title=f"Result of {name}", n=rows))
        emit(format_result_type(result, name))
        results[name] = result
    return results


def main(argv=None):
    """Run walkthrough CLI."""
    parser = argparse.ArgumentParser(
        description="Distributed apply walkthrough on the mtcars data",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--section",
        action="append",
        choices=list(SECTIONS),
        help="Section to run (repeatable). Defaults to all sections.",
    )
    parser.add_argument("--master", type=str, default="local[*]", help="Spark master URL")
    parser.add_argument("--rows", type=int, default=10, help="Rows shown per result")
    parser.add_argument("--partitions", type=int, default=None, help="Partitions for the copied data")
    parser.add_argument("--no-arrow", action="store_true", help="Disable Arrow transfers")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress logging")

    args = parser.parse_args(argv)

    log_level = logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[logging.StreamHandler()],
    )

    config = SessionConfig(master=args.master, arrow_enabled=not args.no_arrow)
    spark = get_or_create_spark(config=config)
    run_walkthrough(spark, sections=args.section, rows=args.rows, n_partitions=args.partitions)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
