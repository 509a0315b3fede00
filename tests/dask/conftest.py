"""Shared fixtures for Dask backend tests."""

import pytest

from distapply.datasets import load_mtcars


@pytest.fixture(scope="module")
def dask_client():
    distributed = pytest.importorskip("distributed")

    cluster = distributed.LocalCluster(n_workers=2, threads_per_worker=1, memory_limit="512MB")
    client = distributed.Client(cluster)
    yield client
    client.close()
    cluster.close()


@pytest.fixture
def mtcars_ddf():
    dd = pytest.importorskip("dask.dataframe")
    return dd.from_pandas(load_mtcars().reset_index(drop=True), npartitions=3)
