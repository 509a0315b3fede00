"""Pickled transport of closure results from workers to the driver."""

from __future__ import annotations

import pickle

import pandas as pd

from distapply.core.config import PAYLOAD_COLUMN


def encode_payload(pdf):
    """Wrap one result frame as a single-row frame holding its pickle.

    Parameters
    ----------
    pdf : pandas.DataFrame
        Closure output for one partition or group.

    Returns
    -------
    pandas.DataFrame
        One row, one binary column named ``PAYLOAD_COLUMN``.
    """
    return pd.DataFrame({PAYLOAD_COLUMN: [pickle.dumps(pdf, protocol=pickle.HIGHEST_PROTOCOL)]})


def empty_payload():
    """Return a payload frame with no rows."""
    return pd.DataFrame({PAYLOAD_COLUMN: pd.Series([], dtype=object)})


def decode_payloads(payloads):
    """Driver-side concatenation of pickled result frames.

    Parameters
    ----------
    payloads : iterable of bytes
        Pickled pandas DataFrames, in the order the engine returned them.

    Returns
    -------
    pandas.DataFrame
        All results stacked with a fresh index. Empty when there were no
        payloads.
    """
    frames = [pickle.loads(p) for p in payloads if p is not None]
    return concat_frames(frames)


def concat_frames(frames):
    """Stack result frames, skipping ``None`` and returning an empty frame when nothing is left."""
    frames = [f for f in frames if f is not None]
    if not frames:
        return pd.DataFrame()
    if len(frames) == 1:
        return frames[0].reset_index(drop=True)
    return pd.concat(frames, ignore_index=True)
