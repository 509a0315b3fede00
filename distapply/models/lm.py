"""Ordinary least squares with tidy, one-row-per-term output."""

from __future__ import annotations

import warnings

import formulaic as fml
import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy import stats

TIDY_COLUMNS = ["term", "estimate", "std_error", "statistic", "p_value"]
INTERCEPT = "(Intercept)"


def build_formula(data, response, predictors=None, exclude=()):
    """Build a Wilkinson formula regressing ``response`` on ``predictors``.

    Parameters
    ----------
    data : pandas.DataFrame
        Data the formula will be evaluated against.
    response : str
        Response column.
    predictors : list of str, optional
        Predictor columns. Defaults to every column other than ``response``
        and those in ``exclude`` (the ``y ~ .`` shorthand).
    exclude : iterable of str, default ()
        Columns left out of the default predictor set.

    Returns
    -------
    str
        Formula such as ``"mpg ~ disp + hp"``, or ``"mpg ~ 1"`` when there
        are no predictors.

    Raises
    ------
    ValueError
        If ``response`` or any predictor is not a column of ``data``.
    """
    columns = [str(c) for c in data.columns]
    if response not in columns:
        raise ValueError(f"Response column {response!r} not found in data: {columns}")

    exclude = set(exclude)
    if predictors is None:
        predictors = [c for c in columns if c != response and c not in exclude]
    else:
        missing = [c for c in predictors if c not in columns]
        if missing:
            raise ValueError(f"Predictor columns not found in data: {missing}")

    if not predictors:
        return f"{_quote(response)} ~ 1"
    return f"{_quote(response)} ~ " + " + ".join(_quote(c) for c in predictors)


def _quote(name):
    return name if name.isidentifier() else f"`{name}`"


def aliased_columns(X, tol=1e-7):
    """Flag columns that are linear combinations of the columns before them.

    Columns are visited left to right and kept while they increase the rank
    of the kept set, so earlier terms win over later ones.

    Parameters
    ----------
    X : ndarray of shape (n, k)
        Design matrix.
    tol : float, default 1e-7
        Singular value threshold on the column-normalized matrix.

    Returns
    -------
    ndarray of bool, shape (k,)
        True for aliased columns.
    """
    norms = np.linalg.norm(X, axis=0)
    aliased = np.zeros(X.shape[1], dtype=bool)
    kept = []
    for j in range(X.shape[1]):
        if norms[j] == 0:
            aliased[j] = True
            continue
        cand = kept + [j]
        Xs = X[:, cand] / norms[cand]
        if np.linalg.matrix_rank(Xs, tol=tol) == len(cand):
            kept.append(j)
        else:
            aliased[j] = True
    return aliased


def tidy_lm(data, response, predictors=None, exclude=(), conf_int=False, conf_level=0.95, keep_aliased=False):
    r"""Fit a linear model and return one row per term.

    Fits :math:`y = X\beta + \varepsilon` by ordinary least squares and
    summarizes each coefficient with its standard error, :math:`t`
    statistic and two-sided p-value.

    Parameters
    ----------
    data : pandas.DataFrame
        Data for the fit. Rows with missing values in any model column are
        dropped.
    response : str
        Response column.
    predictors : list of str, optional
        Predictor columns. Defaults to all other columns not in ``exclude``.
    exclude : iterable of str, default ()
        Columns left out of the default predictor set.
    conf_int : bool, default False
        Whether to add ``conf_low`` and ``conf_high`` columns.
    conf_level : float, default 0.95
        Confidence level for the intervals.
    keep_aliased : bool, default False
        Whether to keep a row of NaN values for each aliased term.

    Returns
    -------
    pandas.DataFrame
        Columns ``term, estimate, std_error, statistic, p_value`` (plus the
        interval bounds). The intercept is named ``(Intercept)``.

    Notes
    -----
    Terms that are linear combinations of earlier terms are aliased and
    left out of the output, as R does for ``summary.lm``. With
    ``keep_aliased=True`` their rows are kept with NaN in every numeric
    column. When the fit has no
    residual degrees of freedom (as many estimable terms as observations),
    the estimates are exact and every inferential column is NaN.
    """
    if not 0 < conf_level < 1:
        raise ValueError(f"conf_level must be in (0, 1), got {conf_level}")

    formula = build_formula(data, response, predictors, exclude)
    try:
        matrices = fml.model_matrix(formula, data, output="pandas")
    except Exception as e:
        raise ValueError(f"Error processing formula '{formula}' with formulaic: {e}") from e

    y = np.asarray(matrices.lhs, dtype=np.float64).ravel()
    X_df = matrices.rhs
    terms = [INTERCEPT if c == "Intercept" else str(c) for c in X_df.columns]
    X = np.asarray(X_df, dtype=np.float64)
    if len(y) == 0:
        raise ValueError(f"No complete observations to fit '{formula}'.")

    aliased = aliased_columns(X)
    k_est = int((~aliased).sum())
    df_resid = len(y) - k_est

    estimate = np.full(len(terms), np.nan)
    std_error = np.full(len(terms), np.nan)
    statistic = np.full(len(terms), np.nan)
    p_value = np.full(len(terms), np.nan)

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", RuntimeWarning)
        results = sm.OLS(y, X[:, ~aliased]).fit()
        estimate[~aliased] = results.params
        if df_resid > 0:
            std_error[~aliased] = results.bse
            statistic[~aliased] = results.tvalues
            p_value[~aliased] = results.pvalues

    out = pd.DataFrame(
        {
            "term": terms,
            "estimate": estimate,
            "std_error": std_error,
            "statistic": statistic,
            "p_value": p_value,
        }
    )

    if conf_int:
        if df_resid > 0:
            crit = stats.t.ppf(1 - (1 - conf_level) / 2, df_resid)
            out["conf_low"] = estimate - crit * std_error
            out["conf_high"] = estimate + crit * std_error
        else:
            out["conf_low"] = np.nan
            out["conf_high"] = np.nan

    if not keep_aliased:
        out = out[~aliased].reset_index(drop=True)
    return out


def fit_group_model(pdf, response="mpg", exclude=("cyl",)):
    """Closure fitting ``response ~ .`` on one group, dropping the grouping column.

    Parameters
    ----------
    pdf : pandas.DataFrame
        Rows of one group.
    response : str, default "mpg"
        Response column.
    exclude : tuple of str, default ("cyl",)
        Columns left out of the predictors, typically the grouping column.

    Returns
    -------
    pandas.DataFrame
        Tidy coefficient table.
    """
    return tidy_lm(pdf, response=response, exclude=exclude)
