"""Shared pure-pandas functions for distributed backends (Dask, Spark).

This package contains the engine-agnostic wrappers used by both the
``dask`` and ``spark`` backends. Every function here operates on pandas
DataFrames and has **zero** Dask / Spark dependencies.
"""

from ._payload import concat_frames, decode_payloads, empty_payload, encode_payload
from ._udf import (
    apply_group,
    apply_groups,
    apply_partition,
    as_pandas_frame,
    attach_keys,
    check_callable,
    concat_batches,
    group_collect_udf,
    group_udf,
    partition_collect_udf,
    partition_udf,
)

__all__ = [
    "apply_group",
    "apply_groups",
    "apply_partition",
    "as_pandas_frame",
    "attach_keys",
    "check_callable",
    "concat_batches",
    "concat_frames",
    "decode_payloads",
    "empty_payload",
    "encode_payload",
    "group_collect_udf",
    "group_udf",
    "partition_collect_udf",
    "partition_udf",
]
