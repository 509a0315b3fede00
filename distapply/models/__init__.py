"""Example closures for distributed apply: grouped linear models and jitter."""

from .jitter import jitter, jitter_amount, jitter_column
from .lm import INTERCEPT, TIDY_COLUMNS, aliased_columns, build_formula, fit_group_model, tidy_lm

__all__ = [
    "INTERCEPT",
    "TIDY_COLUMNS",
    "aliased_columns",
    "build_formula",
    "fit_group_model",
    "jitter",
    "jitter_amount",
    "jitter_column",
    "tidy_lm",
]
