"""Distributed apply: run Python closures per partition, group, or list element on a cluster."""

from distapply.core.config import Granularity, OutputFormat, ResultMode, SessionConfig
from distapply.core.format import format_frame
from distapply.core.schema import Schema, SchemaError, as_schema
from distapply.datasets import load_mtcars
from distapply.models import jitter, tidy_lm
from distapply.spark import (
    connect,
    copy_to,
    dapply,
    dapply_collect,
    gapply,
    gapply_collect,
    monitor_spark,
    spark_apply,
    spark_lapply,
)

__version__ = "0.1.0"

__all__ = [
    "Granularity",
    "OutputFormat",
    "ResultMode",
    "Schema",
    "SchemaError",
    "SessionConfig",
    "__version__",
    "as_schema",
    "connect",
    "copy_to",
    "dapply",
    "dapply_collect",
    "format_frame",
    "gapply",
    "gapply_collect",
    "jitter",
    "load_mtcars",
    "monitor_spark",
    "spark_apply",
    "spark_lapply",
    "tidy_lm",
]
