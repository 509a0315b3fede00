"""PySpark backend for the distributed apply family."""

from ._apply import dapply, dapply_collect, gapply, gapply_collect, infer_schema, spark_apply, spark_lapply
from ._copy import copy_to
from ._utils import (
    connect,
    distribute_packages,
    get_default_partitions,
    get_or_create_spark,
    is_spark_dataframe,
    validate_spark_input,
)
from .monitor import monitor_spark

__all__ = [
    "connect",
    "copy_to",
    "dapply",
    "dapply_collect",
    "distribute_packages",
    "gapply",
    "gapply_collect",
    "get_default_partitions",
    "get_or_create_spark",
    "infer_schema",
    "is_spark_dataframe",
    "monitor_spark",
    "spark_apply",
    "spark_lapply",
    "validate_spark_input",
]
