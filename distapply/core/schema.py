"""Output schema descriptors for distributed apply closures."""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from typing import NamedTuple

import numpy as np
import pandas as pd

__all__ = [
    "PRIMITIVE_TYPES",
    "Field",
    "Schema",
    "SchemaError",
    "as_schema",
]

_PANDAS_DTYPES = {
    "double": "float64",
    "float": "float32",
    "long": "int64",
    "integer": "int32",
    "short": "int16",
    "byte": "int8",
    "string": "object",
    "boolean": "bool",
    "date": "object",
    "timestamp": "datetime64[ns]",
    "binary": "object",
}

_NULLABLE_INT_DTYPES = {"long": "Int64", "integer": "Int32", "short": "Int16", "byte": "Int8"}

_ALIASES = {
    "int": "integer",
    "bigint": "long",
    "smallint": "short",
    "tinyint": "byte",
    "str": "string",
    "character": "string",
    "bool": "boolean",
    "logical": "boolean",
    "numeric": "double",
    "float64": "double",
    "float32": "float",
    "int64": "long",
    "int32": "integer",
}

PRIMITIVE_TYPES = tuple(_PANDAS_DTYPES)


class SchemaError(ValueError):
    """Raised for malformed schema descriptors or mismatched closure output."""


class Field(NamedTuple):
    """One column of a schema descriptor."""

    name: str
    dtype: str
    nullable: bool = True


def _normalize_dtype(dtype):
    if not isinstance(dtype, str):
        raise SchemaError(f"Column type must be a string, got {type(dtype).__name__}: {dtype!r}")
    key = dtype.strip().lower()
    key = _ALIASES.get(key, key)
    if key not in _PANDAS_DTYPES:
        raise SchemaError(f"Unknown column type {dtype!r}. Supported types: {', '.join(PRIMITIVE_TYPES)}")
    return key


class Schema:
    """Ordered list of ``(column name, primitive type)`` pairs.

    A schema tells the engine what a closure returns so that it does not have
    to sample the output to infer types. Instances are immutable and compare
    equal when their fields are equal.

    Parameters
    ----------
    fields : iterable of Field or (name, dtype) tuples
        Columns in output order.

    Raises
    ------
    SchemaError
        If the descriptor is empty, has duplicate or empty names, or names
        an unknown type.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields):
        normalized = []
        for item in fields:
            if isinstance(item, Field):
                name, dtype, nullable = item
            else:
                try:
                    name, dtype = item
                except (TypeError, ValueError):
                    raise SchemaError(f"Expected a (name, type) pair, got {item!r}") from None
                nullable = True
            if not isinstance(name, str) or not name.strip():
                raise SchemaError(f"Column names must be non-empty strings, got {name!r}")
            normalized.append(Field(name.strip(), _normalize_dtype(dtype), bool(nullable)))

        if not normalized:
            raise SchemaError("Schema must declare at least one column.")

        names = [f.name for f in normalized]
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise SchemaError(f"Duplicate column names in schema: {dupes}")

        self._fields = tuple(normalized)

    @property
    def fields(self):
        return self._fields

    @property
    def names(self):
        return [f.name for f in self._fields]

    @property
    def dtypes(self):
        return [f.dtype for f in self._fields]

    def __len__(self):
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    def __contains__(self, name):
        return name in self.names

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return self._fields == other._fields

    def __hash__(self):
        return hash(self._fields)

    def __repr__(self):
        return f"Schema({self.to_ddl()!r})"

    def prepend(self, other):
        """Return a schema with ``other``'s fields first, skipping names already declared."""
        other = as_schema(other)
        head = [f for f in other if f.name not in self.names]
        return Schema([*head, *self._fields])

    def to_ddl(self):
        """Render as a Spark DDL string, e.g. ``"cyl double, term string"``."""
        return ", ".join(f"{f.name} {f.dtype}" for f in self._fields)

    def to_dict(self):
        return {f.name: f.dtype for f in self._fields}

    def to_spark(self):
        """Convert to a ``pyspark.sql.types.StructType``."""
        from pyspark.sql import types as T

        spark_types = {
            "double": T.DoubleType,
            "float": T.FloatType,
            "long": T.LongType,
            "integer": T.IntegerType,
            "short": T.ShortType,
            "byte": T.ByteType,
            "string": T.StringType,
            "boolean": T.BooleanType,
            "date": T.DateType,
            "timestamp": T.TimestampType,
            "binary": T.BinaryType,
        }
        return T.StructType([T.StructField(f.name, spark_types[f.dtype](), f.nullable) for f in self._fields])

    def to_pandas_meta(self):
        """Return an empty pandas DataFrame with the declared columns and dtypes."""
        return pd.DataFrame({f.name: pd.Series(dtype=_PANDAS_DTYPES[f.dtype]) for f in self._fields})

    def coerce(self, pdf):
        """Cast a closure's output to this schema.

        Columns are matched by name when the output carries exactly the
        declared names, otherwise by position.

        Parameters
        ----------
        pdf : pandas.DataFrame
            Output of a closure.

        Returns
        -------
        pandas.DataFrame
            Frame with the declared column names, order and dtypes.

        Raises
        ------
        SchemaError
            If the column count differs or a value cannot be cast without loss.
        """
        columns = [str(c) for c in pdf.columns]
        if len(columns) != len(self._fields):
            raise SchemaError(
                f"Closure returned {len(columns)} columns {columns} but the schema declares "
                f"{len(self._fields)}: {self.names}"
            )

        pdf = pdf.reset_index(drop=True)
        pdf.columns = columns
        if set(columns) == set(self.names):
            pdf = pdf[self.names]
        else:
            pdf = pdf.set_axis(self.names, axis=1)

        return pd.DataFrame({f.name: _cast_series(pdf[f.name], f) for f in self._fields})

    @classmethod
    def from_pandas(cls, pdf):
        """Derive a schema from a pandas DataFrame's dtypes."""
        return cls([(str(name), _infer_dtype(pdf[name])) for name in pdf.columns])

    @classmethod
    def from_ddl(cls, ddl):
        """Parse a DDL string such as ``"mpg double, jittered_mpg double"``."""
        fields = []
        for part in ddl.split(","):
            part = part.strip()
            if not part:
                continue
            tokens = part.split()
            if len(tokens) != 2:
                raise SchemaError(f"Cannot parse schema column {part!r}; expected '<name> <type>'")
            fields.append((tokens[0].strip("`"), tokens[1]))
        return cls(fields)

    @classmethod
    def from_spark(cls, struct):
        """Convert a ``pyspark.sql.types.StructType``."""
        fields = []
        for sf in struct.fields:
            type_name = sf.dataType.typeName()
            if type_name not in _PANDAS_DTYPES:
                raise SchemaError(f"Unsupported Spark type {type_name!r} for column {sf.name!r}")
            fields.append(Field(sf.name, type_name, sf.nullable))
        return cls(fields)


def as_schema(descriptor):
    """Build a :class:`Schema` from any supported descriptor.

    Parameters
    ----------
    descriptor : Schema, Mapping, sequence of pairs, str or StructType
        ``{"cyl": "double", "term": "string"}``, ``[("cyl", "double")]``,
        ``"cyl double, term string"`` or a Spark ``StructType``.

    Returns
    -------
    Schema
    """
    if isinstance(descriptor, Schema):
        return descriptor
    if isinstance(descriptor, str):
        return Schema.from_ddl(descriptor)
    if isinstance(descriptor, Mapping):
        return Schema(descriptor.items())
    if hasattr(descriptor, "fields") and hasattr(descriptor, "fieldNames"):
        return Schema.from_spark(descriptor)
    if descriptor is None:
        raise SchemaError("A schema descriptor is required.")
    return Schema(descriptor)


def _infer_dtype(series):
    dtype = series.dtype
    if pd.api.types.is_bool_dtype(dtype):
        return "boolean"
    if pd.api.types.is_integer_dtype(dtype):
        return {1: "byte", 2: "short", 4: "integer"}.get(np.dtype(dtype.name.lower()).itemsize, "long")
    if pd.api.types.is_float_dtype(dtype):
        return "float" if np.dtype(dtype.name.lower()).itemsize == 4 else "double"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "timestamp"

    non_null = series.dropna()
    if len(non_null) == 0:
        return "string"
    first = non_null.iloc[0]
    if isinstance(first, (bytes, bytearray)):
        return "binary"
    if isinstance(first, bool):
        return "boolean"
    if isinstance(first, datetime.datetime):
        return "timestamp"
    if isinstance(first, datetime.date):
        return "date"
    return "string"


def _cast_series(series, field):
    dtype = field.dtype
    missing = series.isna()

    if dtype == "string":
        return series.map(lambda v: None if pd.isna(v) else str(v)).astype(object)

    if dtype in ("double", "float"):
        values = pd.to_numeric(series, errors="coerce")
        _check_lossless(values.isna() & ~missing, series, field)
        if dtype == "float":
            as_float = values.astype("float64")
            overflow = np.isfinite(as_float) & (as_float.abs() > np.finfo(np.float32).max)
            _check_lossless(overflow, series, field)
        return values.astype(_PANDAS_DTYPES[dtype])

    if dtype in _NULLABLE_INT_DTYPES:
        values = pd.to_numeric(series, errors="coerce")
        _check_lossless(values.isna() & ~missing, series, field)
        fractional = values.notna() & (values != np.floor(values.astype("float64")))
        _check_lossless(fractional, series, field)
        info = np.iinfo(_PANDAS_DTYPES[dtype])
        out_of_range = values.notna() & ((values < info.min) | (values > info.max))
        _check_lossless(out_of_range, series, field)
        if values.isna().any():
            return values.astype(_NULLABLE_INT_DTYPES[dtype])
        return values.astype(_PANDAS_DTYPES[dtype])

    if dtype == "boolean":
        bad = [not pd.isna(v) and v not in (True, False, 0, 1) for v in series]
        _check_lossless(pd.Series(bad, index=series.index, dtype=bool), series, field)
        if missing.any():
            return series.astype("boolean")
        return series.astype(bool)

    if dtype in ("timestamp", "date"):
        try:
            values = pd.to_datetime(series)
        except (ValueError, TypeError) as e:
            raise SchemaError(f"Column {field.name!r} cannot be cast to {dtype}: {e}") from e
        if dtype == "date":
            return values.dt.date.where(values.notna(), None).astype(object)
        return values

    bad = [not pd.isna(v) and not isinstance(v, (bytes, bytearray)) for v in series]
    _check_lossless(pd.Series(bad, index=series.index, dtype=bool), series, field)
    return series.astype(object)


def _check_lossless(bad_mask, series, field):
    if bad_mask.any():
        examples = series[bad_mask].head(3).tolist()
        raise SchemaError(
            f"Column {field.name!r} cannot be cast to {field.dtype} without loss; offending values: {examples}"
        )
