"""Input checks and client handling for the Dask backend."""

from __future__ import annotations

import logging

log = logging.getLogger(__name__)


def is_dask_collection(data) -> bool:
    """Check if data is a Dask DataFrame.

    Parameters
    ----------
    data : object
        Input data to check.

    Returns
    -------
    bool
        True if data is a ``dask.dataframe.DataFrame``.

    Raises
    ------
    ImportError
        If ``data`` looks like a Dask object but the dask extra is missing.
    """
    try:
        import dask.dataframe as dd
    except ImportError:
        module = type(data).__module__
        if module.split(".")[0] in ("dask", "dask_expr"):
            raise ImportError(
                f"Input data appears to be a Dask object ({module}.{type(data).__qualname__}) but "
                "the dask extra is not installed. Install with: pip install 'distapply[dask]'"
            ) from None
        return False
    return isinstance(data, dd.DataFrame)


def require_dask_dataframe(ddf, name="ddf"):
    """Raise ``TypeError`` unless ``ddf`` is a Dask DataFrame."""
    if not is_dask_collection(ddf):
        raise TypeError(f"{name} must be a dask.dataframe.DataFrame, got {type(ddf).__name__}")


def validate_dask_input(ddf, required_cols):
    """Raise ``ValueError`` naming any of ``required_cols`` missing from ``ddf``."""
    missing = [c for c in required_cols if c not in ddf.columns]
    if missing:
        raise ValueError(f"Columns not found in Dask DataFrame: {missing}")


def get_or_create_client(client=None):
    """Return ``client``, the current Dask client, or a new local one.

    Parameters
    ----------
    client : distributed.Client, optional
        Client to use as is.

    Returns
    -------
    distributed.Client
    """
    if client is not None:
        return client

    from distributed import Client

    try:
        return Client.current()
    except ValueError:
        client = Client()
        log.info("Started local Dask client at %s", client.dashboard_link)
        return client
