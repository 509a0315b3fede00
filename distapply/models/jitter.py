"""Uniform jitter for numeric vectors."""

from __future__ import annotations

import numpy as np
import pandas as pd


def _spread(finite):
    """Range of the finite values, falling back to ``|min|`` and then 1."""
    if finite.size == 0:
        return 1.0
    z = float(np.ptp(finite))
    if z == 0:
        z = abs(float(np.min(finite)))
    if z == 0:
        z = 1.0
    return z


def jitter_amount(x, factor=1.0):
    r"""Default half-width of the jitter noise.

    The amount is :math:`\text{factor} / 5 \cdot d`, where :math:`d` is the
    smallest gap between distinct values of ``x`` after rounding them to
    :math:`3 - \lfloor \log_{10}(z) \rfloor` decimal places and :math:`z` is
    the range of ``x``.

    Parameters
    ----------
    x : ndarray
        Values to be jittered. Non-finite values are ignored.
    factor : float, default 1.0
        Scale applied to the smallest gap.

    Returns
    -------
    float
    """
    x = np.asarray(x, dtype=np.float64)
    finite = x[np.isfinite(x)]
    if finite.size == 0:
        return 0.0

    z = _spread(finite)
    digits = int(3 - np.floor(np.log10(z)))
    xx = np.unique(np.round(finite, digits))
    if xx.size > 1:
        d = float(np.min(np.diff(xx)))
    elif xx[0] != 0:
        d = float(xx[0]) / 10
    else:
        d = z / 10
    return factor / 5 * abs(d)


def jitter(x, factor=1.0, amount=None, random_state=None):
    """Add a small amount of uniform noise to a numeric vector.

    Parameters
    ----------
    x : array_like or pandas.Series
        Numeric values. NaN values stay NaN.
    factor : float, default 1.0
        Multiplier for the default amount.
    amount : float, optional
        Half-width of the noise. When ``None`` it is derived from the
        smallest gap between values (see :func:`jitter_amount`). ``0``
        means ``factor * range / 50``.
    random_state : int or numpy.random.Generator, optional
        Seed or generator for reproducible noise.

    Returns
    -------
    ndarray or pandas.Series
        Jittered values, same type and shape as ``x`` (a Series keeps its
        index and name).
    """
    values = np.asarray(x, dtype=np.float64)
    rng = random_state if isinstance(random_state, np.random.Generator) else np.random.default_rng(random_state)

    if amount is None:
        amount = jitter_amount(values, factor)
    elif amount == 0:
        amount = factor * (_spread(values[np.isfinite(values)]) / 50)
    if amount < 0:
        raise ValueError(f"amount must be non-negative, got {amount}")

    out = values + rng.uniform(-amount, amount, size=values.shape)
    if isinstance(x, pd.Series):
        return pd.Series(out, index=x.index, name=x.name)
    return out


def jitter_column(pdf, column="mpg", name=None, random_state=None):
    """Closure returning ``pdf`` with a jittered copy of ``column`` appended.

    Parameters
    ----------
    pdf : pandas.DataFrame
        Rows of one partition.
    column : str, default "mpg"
        Numeric column to jitter.
    name : str, optional
        Name of the new column. Defaults to ``"jittered_<column>"``.
    random_state : int or numpy.random.Generator, optional
        Seed or generator for the noise.

    Returns
    -------
    pandas.DataFrame
    """
    if column not in pdf.columns:
        raise ValueError(f"Column {column!r} not found in data: {list(pdf.columns)}")
    out = pdf.copy()
    out[name or f"jittered_{column}"] = jitter(pdf[column], random_state=random_state).to_numpy()
    return out
