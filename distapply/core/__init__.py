"""Core schema, configuration, and formatting utilities."""

from .config import APPLY_FAMILY, Granularity, OutputFormat, ResultMode, SessionConfig
from .dataframe import convert_output, to_pandas, to_polars
from .format import format_frame, format_result_type
from .schema import PRIMITIVE_TYPES, Field, Schema, SchemaError, as_schema

__all__ = [
    "APPLY_FAMILY",
    "PRIMITIVE_TYPES",
    "Field",
    "Granularity",
    "OutputFormat",
    "ResultMode",
    "Schema",
    "SchemaError",
    "SessionConfig",
    "as_schema",
    "convert_output",
    "format_frame",
    "format_result_type",
    "to_pandas",
    "to_polars",
]
