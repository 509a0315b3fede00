"""Dask backend for the distributed apply family."""

from ._apply import dask_dapply, dask_dapply_collect, dask_gapply, dask_gapply_collect, dask_lapply
from ._utils import get_or_create_client, is_dask_collection, validate_dask_input

__all__ = [
    "dask_dapply",
    "dask_dapply_collect",
    "dask_gapply",
    "dask_gapply_collect",
    "dask_lapply",
    "get_or_create_client",
    "is_dask_collection",
    "validate_dask_input",
]
