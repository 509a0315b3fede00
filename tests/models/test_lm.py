"""Tests for the tidy linear model."""

import numpy as np
import pandas as pd
import pytest
import statsmodels.api as sm

from distapply.models import aliased_columns, build_formula, fit_group_model, tidy_lm
from distapply.models.lm import INTERCEPT, TIDY_COLUMNS


def test_full_mtcars_matches_lstsq(mtcars):
    tidy = tidy_lm(mtcars, "mpg")
    predictors = [c for c in mtcars.columns if c != "mpg"]
    assert tidy["term"].tolist() == [INTERCEPT] + predictors
    assert list(tidy.columns) == TIDY_COLUMNS

    X = np.column_stack([np.ones(len(mtcars)), mtcars[predictors].to_numpy()])
    beta, *_ = np.linalg.lstsq(X, mtcars["mpg"].to_numpy(), rcond=None)
    np.testing.assert_allclose(tidy["estimate"], beta, rtol=1e-6)
    assert np.isfinite(tidy["std_error"]).all()
    assert ((tidy["p_value"] >= 0) & (tidy["p_value"] <= 1)).all()


def test_inference_matches_statsmodels(rng):
    n = 50
    data = pd.DataFrame({"x1": rng.normal(size=n), "x2": rng.normal(size=n)})
    data["y"] = 1.0 + 2.0 * data["x1"] - data["x2"] + rng.normal(size=n)
    tidy = tidy_lm(data, "y", predictors=["x1", "x2"])

    ref = sm.OLS(data["y"], sm.add_constant(data[["x1", "x2"]])).fit()
    np.testing.assert_allclose(tidy["estimate"], ref.params, rtol=1e-8)
    np.testing.assert_allclose(tidy["std_error"], ref.bse, rtol=1e-8)
    np.testing.assert_allclose(tidy["statistic"], ref.tvalues, rtol=1e-8)
    np.testing.assert_allclose(tidy["p_value"], ref.pvalues, rtol=1e-6)


def test_conf_int_matches_statsmodels(rng):
    n = 40
    data = pd.DataFrame({"x": rng.normal(size=n)})
    data["y"] = 0.5 * data["x"] + rng.normal(size=n)
    tidy = tidy_lm(data, "y", conf_int=True, conf_level=0.9)

    ref = sm.OLS(data["y"], sm.add_constant(data[["x"]])).fit().conf_int(alpha=0.1)
    np.testing.assert_allclose(tidy["conf_low"], ref[0], rtol=1e-8)
    np.testing.assert_allclose(tidy["conf_high"], ref[1], rtol=1e-8)


def test_saturated_group_has_no_inference(mtcars):
    six = mtcars[mtcars["cyl"] == 6]
    tidy = fit_group_model(six)
    assert len(tidy) == len(six)
    assert tidy["term"].iloc[0] == INTERCEPT
    assert "cyl" not in tidy["term"].tolist()
    assert tidy["estimate"].notna().all()
    assert tidy["std_error"].isna().all()
    assert tidy["p_value"].isna().all()


def test_aliased_terms_are_dropped(mtcars):
    eight = mtcars[mtcars["cyl"] == 8]
    tidy = fit_group_model(eight)
    # vs is constant zero and gear is 3 + 2 * am in this group
    assert tidy["term"].tolist() == [INTERCEPT, "disp", "hp", "drat", "wt", "qsec", "am", "carb"]
    assert np.isfinite(tidy["estimate"]).all()


def test_keep_aliased_rows(mtcars):
    eight = mtcars[mtcars["cyl"] == 8]
    tidy = tidy_lm(eight, "mpg", exclude=("cyl",), keep_aliased=True).set_index("term")
    assert len(tidy) == 10
    assert tidy.loc[["vs", "gear"], "estimate"].isna().all()
    assert np.isfinite(tidy.loc[INTERCEPT, "estimate"])


def test_rows_per_cylinder_group(mtcars):
    rows = {cyl: len(fit_group_model(g)) for cyl, g in mtcars.groupby("cyl")}
    assert rows == {4.0: 10, 6.0: 7, 8.0: 8}


def test_collinear_term_is_aliased(rng):
    data = pd.DataFrame({"x1": rng.normal(size=20)})
    data["x2"] = 2 * data["x1"]
    data["y"] = data["x1"] + rng.normal(size=20)
    assert tidy_lm(data, "y")["term"].tolist() == [INTERCEPT, "x1"]

    kept = tidy_lm(data, "y", keep_aliased=True).set_index("term")
    assert np.isnan(kept.loc["x2", "estimate"])
    assert np.isfinite(kept.loc["x1", "std_error"])


def test_intercept_only_estimates_mean(small_frame):
    tidy = tidy_lm(small_frame, "x", predictors=[])
    assert tidy["term"].tolist() == [INTERCEPT]
    assert tidy["estimate"].iloc[0] == pytest.approx(small_frame["x"].mean())


def test_conf_int_nan_without_residual_df(mtcars):
    tidy = tidy_lm(mtcars[mtcars["cyl"] == 6], "mpg", exclude=("cyl",), conf_int=True)
    assert tidy["conf_low"].isna().all()
    assert tidy["conf_high"].isna().all()


def test_aliased_columns_flags_zero_and_duplicate():
    X = np.column_stack([np.ones(5), np.arange(5.0), np.zeros(5), np.arange(5.0) * 3])
    assert aliased_columns(X).tolist() == [False, False, True, True]


def test_build_formula_defaults_to_all_columns(small_frame):
    assert build_formula(small_frame, "x") == "x ~ g + n"
    assert build_formula(small_frame, "x", exclude=("g",)) == "x ~ n"


def test_build_formula_quotes_non_identifiers():
    data = pd.DataFrame({"y": [1.0], "jitter(mpg)": [1.0]})
    assert build_formula(data, "y") == "y ~ `jitter(mpg)`"


def test_build_formula_errors(small_frame):
    with pytest.raises(ValueError, match="Response column"):
        build_formula(small_frame, "nope")
    with pytest.raises(ValueError, match="Predictor columns not found"):
        build_formula(small_frame, "x", predictors=["nope"])


@pytest.mark.parametrize("level", [0, 1, 1.5])
def test_invalid_conf_level_raises(small_frame, level):
    with pytest.raises(ValueError, match="conf_level"):
        tidy_lm(small_frame, "x", conf_level=level)
