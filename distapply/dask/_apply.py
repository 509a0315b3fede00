"""The distributed apply family on Dask."""

from __future__ import annotations

import logging
from functools import partial

import dask

from distapply.core.dataframe import convert_output
from distapply.core.schema import as_schema
from distapply.distributed import apply_groups, apply_partition, check_callable, concat_frames

from ._utils import get_or_create_client, require_dask_dataframe, validate_dask_input

log = logging.getLogger(__name__)


def _grouping_columns(cols):
    if isinstance(cols, str):
        cols = [cols]
    cols = list(cols)
    if not cols:
        raise ValueError("At least one grouping column is required.")
    return cols


def _run_partition(pdf, func, schema=None):
    out = apply_partition(func, pdf, schema)
    if out is None:
        return schema.to_pandas_meta() if schema is not None else None
    return out


def dask_dapply(ddf, func, schema):
    """Apply a closure to each partition of a Dask DataFrame, lazily.

    Parameters
    ----------
    ddf : dask.dataframe.DataFrame
        Input data.
    func : callable
        ``func(pdf) -> table``.
    schema : schema descriptor
        Output schema, used as the collection's ``meta``.

    Returns
    -------
    dask.dataframe.DataFrame
    """
    check_callable(func)
    require_dask_dataframe(ddf)
    schema = as_schema(schema)
    log.info("dask_dapply over %d partitions -> %s", ddf.npartitions, schema.to_ddl())
    return ddf.map_partitions(partial(_run_partition, func=func, schema=schema), meta=schema.to_pandas_meta())


def dask_dapply_collect(ddf, func, output="pandas"):
    """Apply a closure to each partition and gather the results locally.

    Parameters
    ----------
    ddf : dask.dataframe.DataFrame
        Input data.
    func : callable
        ``func(pdf) -> table``.
    output : {"pandas", "polars"}, default "pandas"
        Local table type.

    Returns
    -------
    pandas.DataFrame or polars.DataFrame
    """
    check_callable(func)
    require_dask_dataframe(ddf)
    run = dask.delayed(partial(_run_partition, func=func))
    tasks = [run(part) for part in ddf.to_delayed()]
    pdf = concat_frames(dask.compute(*tasks))
    log.info("dask_dapply_collect gathered %d rows from %d partitions", len(pdf), len(tasks))
    return convert_output(pdf, output)


def dask_gapply(ddf, cols, func, schema):
    """Apply a closure to each group of a Dask DataFrame, lazily.

    Rows are first shuffled so each group lives in exactly one partition.

    Parameters
    ----------
    ddf : dask.dataframe.DataFrame
        Input data.
    cols : str or list of str
        Grouping columns.
    func : callable
        ``func(key, pdf) -> table`` with ``key`` a tuple of group values.
    schema : schema descriptor
        Output schema, used as the collection's ``meta``.

    Returns
    -------
    dask.dataframe.DataFrame
    """
    check_callable(func)
    require_dask_dataframe(ddf)
    keys = _grouping_columns(cols)
    validate_dask_input(ddf, keys)
    schema = as_schema(schema)

    log.info("dask_gapply over groups of %s -> %s", keys, schema.to_ddl())
    shuffled = ddf.shuffle(on=keys)
    run = partial(apply_groups, by=keys, func=func, schema=schema)
    return shuffled.map_partitions(run, meta=schema.to_pandas_meta())


def dask_gapply_collect(ddf, cols, func, output="pandas"):
    """Apply a closure to each group and gather the results locally.

    Parameters
    ----------
    ddf : dask.dataframe.DataFrame
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
    require_dask_dataframe(ddf)
    keys = _grouping_columns(cols)
    validate_dask_input(ddf, keys)

    shuffled = ddf.shuffle(on=keys)
    run = dask.delayed(partial(apply_groups, by=keys, func=func))
    tasks = [run(part) for part in shuffled.to_delayed()]
    pdf = concat_frames(dask.compute(*tasks))
    log.info("dask_gapply_collect gathered %d rows", len(pdf))
    return convert_output(pdf, output)


def dask_lapply(items, func, client=None):
    """Apply a closure to each element of a list on a Dask cluster.

    Parameters
    ----------
    items : iterable
        Elements to distribute.
    func : callable
        ``func(element) -> value``.
    client : distributed.Client, optional
        Dask client. If None, the current client is used or a local one
        is created.

    Returns
    -------
    list
        Results in input order.
    """
    check_callable(func)
    items = list(items)
    if not items:
        return []
    client = get_or_create_client(client)
    log.info("dask_lapply over %d elements", len(items))
    futures = client.map(func, items, pure=False)
    return client.gather(futures)
