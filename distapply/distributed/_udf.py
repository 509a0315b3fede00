"""Worker-side wrappers around user closures.

Each wrapper turns a caller-supplied closure into the callable shape an
engine expects (an iterator function for partition apply, a ``(key, pdf)``
function for group apply) and normalizes what the closure returns.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

import numpy as np
import pandas as pd

from distapply.core.dataframe import to_pandas

from ._payload import concat_frames, empty_payload, encode_payload

log = logging.getLogger(__name__)


def check_callable(func, name="func"):
    """Raise ``TypeError`` unless ``func`` is callable."""
    if not callable(func):
        raise TypeError(f"{name} must be callable, got {type(func).__name__}")


def as_pandas_frame(result):
    """Normalize a closure's return value to a pandas DataFrame.

    Parameters
    ----------
    result : object
        ``None``, a pandas/polars/Arrow table, a Series, a mapping of
        columns, or a scalar or sequence.

    Returns
    -------
    pandas.DataFrame or None
        ``None`` when the closure returned ``None``.
    """
    if result is None:
        return None
    if isinstance(result, pd.DataFrame):
        return result
    if isinstance(result, pd.Series):
        return result.to_frame(name=result.name if result.name is not None else "value")
    if isinstance(result, Mapping):
        if all(np.isscalar(v) or v is None for v in result.values()):
            return pd.DataFrame({k: [v] for k, v in result.items()})
        return pd.DataFrame(dict(result))
    if hasattr(result, "__arrow_c_stream__") or type(result).__module__.startswith("polars"):
        return to_pandas(result)
    if np.isscalar(result):
        return pd.DataFrame({"value": [result]})
    return pd.DataFrame({"value": list(result)})


def concat_batches(batches):
    """Concatenate the Arrow batches of one partition into a single frame."""
    frames = [b for b in batches if len(b) > 0]
    if not frames:
        return None
    if len(frames) == 1:
        return frames[0]
    return pd.concat(frames, ignore_index=True)


def attach_keys(pdf, key_names, key):
    """Prepend grouping columns that the closure did not return itself.

    Parameters
    ----------
    pdf : pandas.DataFrame
        Closure output for one group.
    key_names : list of str
        Grouping column names.
    key : tuple
        Grouping values for this group.

    Returns
    -------
    pandas.DataFrame
    """
    missing = [(name, value) for name, value in zip(key_names, key, strict=True) if name not in pdf.columns]
    if not missing:
        return pdf
    keys = pd.DataFrame({name: [value] * len(pdf) for name, value in missing}, index=pdf.index)
    return pd.concat([keys, pdf], axis=1)


def apply_partition(func, pdf, schema=None):
    """Run ``func`` on one partition frame and conform the output.

    Parameters
    ----------
    func : callable
        ``func(pdf) -> table``.
    pdf : pandas.DataFrame or None
        Partition contents.
    schema : Schema, optional
        Declared output schema. When given the output is cast to it.

    Returns
    -------
    pandas.DataFrame or None
        ``None`` for empty partitions or when ``func`` returned ``None``.
    """
    if pdf is None or len(pdf) == 0:
        return None
    out = as_pandas_frame(func(pdf))
    log.debug("Partition of %d rows produced %s rows", len(pdf), "no" if out is None else len(out))
    if out is None:
        return None
    return schema.coerce(out) if schema is not None else out


def apply_group(func, key, pdf, schema=None, pass_key=True, key_names=None):
    """Run ``func`` on one group and conform the output.

    Parameters
    ----------
    func : callable
        ``func(key, pdf)`` when ``pass_key`` else ``func(pdf)``.
    key : tuple
        Grouping values.
    pdf : pandas.DataFrame
        Rows of the group, grouping columns included.
    schema : Schema, optional
        Declared output schema.
    pass_key : bool, default True
        Whether the closure takes the key as its first argument.
    key_names : list of str, optional
        When given, grouping columns missing from the output are prepended.

    Returns
    -------
    pandas.DataFrame or None
    """
    key = tuple(key)
    out = as_pandas_frame(func(key, pdf) if pass_key else func(pdf))
    if out is None:
        return None
    if key_names:
        out = attach_keys(out, key_names, key)
    return schema.coerce(out) if schema is not None else out


def partition_udf(func, schema):
    """Build a ``mapInPandas`` iterator function with a declared schema."""

    def _udf(iterator):
        out = apply_partition(func, concat_batches(iterator), schema)
        if out is not None and len(out) > 0:
            yield out

    return _udf


def partition_collect_udf(func):
    """Build a ``mapInPandas`` iterator function that ships pickled results."""

    def _udf(iterator):
        out = apply_partition(func, concat_batches(iterator))
        if out is not None:
            yield encode_payload(out)

    return _udf


def group_udf(func, schema, pass_key=True, key_names=None):
    """Build an ``applyInPandas`` function with a declared schema."""

    def _udf(key, pdf):
        out = apply_group(func, key, pdf, schema, pass_key=pass_key, key_names=key_names)
        if out is None:
            return schema.to_pandas_meta()
        return out

    return _udf


def group_collect_udf(func):
    """Build an ``applyInPandas`` function that ships pickled results."""

    def _udf(key, pdf):
        out = apply_group(func, key, pdf)
        if out is None:
            return empty_payload()
        return encode_payload(out)

    return _udf


def apply_groups(pdf, by, func, schema=None, pass_key=True, key_names=None):
    """Apply ``func`` to every group of a local frame.

    Used by engines that hand a whole shuffled partition to the worker and
    leave the grouping to it.

    Parameters
    ----------
    pdf : pandas.DataFrame
        Partition contents, already co-located by ``by``.
    by : list of str
        Grouping columns.
    func, schema, pass_key, key_names
        See :func:`apply_group`.

    Returns
    -------
    pandas.DataFrame
        Stacked group outputs; the schema's empty frame when nothing was
        produced and a schema is declared.
    """
    frames = []
    if len(pdf) > 0:
        for key, group in pdf.groupby(by, sort=True, dropna=False):
            key = key if isinstance(key, tuple) else (key,)
            frames.append(apply_group(func, key, group.reset_index(drop=True), schema, pass_key, key_names))
    out = concat_frames(frames)
    if schema is not None and out.empty:
        return schema.to_pandas_meta()
    return out
