import joblib
import numpy as np
import pandas as pd
import pytest
from scipy.special import expit

from admitrms.data_loader import coerce_types
from admitrms.lrm import fit_glm, fit_lrm, format_lrm


def test_complete_case_fit(admissions, fit):
    complete = admissions.dropna()
    assert fit.stats['Obs'] == len(complete)
    assert fit.stats['Events'] == int(complete['admit'].sum())
    assert fit.n_input == len(admissions)
    assert fit.missing_counts == {'admit': 0, 'gre': 20, 'gpa': 15, 'rank': 10}


def test_design_columns(fit):
    assert len(fit.columns) == 8
    assert set(fit.columns) == {
        'Intercept', 'rcs(gre, 3)[0]', 'rcs(gre, 3)[1]', 'rcs(gpa, 3)[0]', 'rcs(gpa, 3)[1]',
        'rank[T.2]', 'rank[T.3]', 'rank[T.4]',
    }
    assert fit.stats['d.f.'] == 7


def test_model_statistics_are_consistent(fit):
    s = fit.stats
    assert s['LR chi2'] == pytest.approx(2 * (s['logLik'] - s['logLik null']))
    assert 0 < s['R2'] < 1
    assert 0.5 < s['C'] < 1
    assert s['Dxy'] == pytest.approx(2 * s['C'] - 1)
    assert s['max |deriv|'] < 1e-3
    p = expit(fit.X @ fit.coef.values)
    assert s['Brier'] == pytest.approx(np.mean((p - fit.y) ** 2))


def test_term_columns_split_linear_and_nonlinear(fit):
    terms = fit.term_columns()
    assert set(terms) == {'gre', 'gpa', 'rank'}
    assert len(terms['gre']['columns']) == 2
    assert len(terms['gre']['nonlinear']) == 1
    assert terms['rank']['nonlinear'] == []
    assert len(terms['rank']['columns']) == 3


def test_prediction_on_new_rows(fit):
    new = fit.newdata([
        {'gre': 600.0, 'gpa': 3.5, 'rank': 1},
        {'gre': 600.0, 'gpa': 3.5, 'rank': 4},
    ])
    p = fit.predict_proba(new)
    assert p.shape == (2,)
    assert np.all((p > 0) & (p < 1))
    assert p[0] > p[1]
    np.testing.assert_allclose(fit.linear_predictor(), fit.X @ fit.coef.values)


def test_coef_table(fit):
    tab = fit.coef_table()
    assert list(tab.columns) == ['Term', 'Coef', 'S.E.', 'Wald Z', 'Pr(>|Z|)', 'Lower', 'Upper']
    assert "gre'" in tab['Term'].tolist()
    assert (tab['Lower'] < tab['Coef']).all() and (tab['Coef'] < tab['Upper']).all()


def test_with_covariance_leaves_original_untouched(fit):
    other = fit.with_covariance(fit.cov.values * 2, source='test')
    np.testing.assert_allclose(other.cov.values, fit.cov.values * 2)
    assert fit.cov_source == 'MLE'
    assert other.cov_source == 'test'
    np.testing.assert_allclose(other.coef.values, fit.coef.values)


def test_fit_survives_pickling(tmp_path, fit):
    path = tmp_path / "fit.joblib"
    joblib.dump(fit, path)
    back = joblib.load(path)
    new = fit.newdata([{'gre': 500.0, 'gpa': 3.0, 'rank': 3}])
    np.testing.assert_allclose(back.predict_proba(new), fit.predict_proba(new))


def test_single_class_outcome_raises(admissions):
    df = admissions.copy()
    df['admit'] = pd.array([0] * len(df), dtype='Int64')
    with pytest.raises(ValueError):
        fit_lrm(df)


def test_fit_glm_rejects_rank_deficient_design():
    X = np.column_stack([np.ones(20), np.arange(20.0), np.arange(20.0) * 2])
    y = np.array([0, 1] * 10)
    with pytest.raises(ValueError):
        fit_glm(y, X)


def test_format_lrm(fit):
    text = format_lrm(fit)
    assert text.startswith("Logistic Regression Model")
    assert "Frequencies of Missing Values" in text
    assert "Dxy" in text


def test_perfect_separation_raises(raw_admissions):
    df = raw_admissions.copy()
    df['admit'] = (df['gpa'] > df['gpa'].median()).astype(int)
    with pytest.raises(ValueError, match="完全分离|未收敛"):
        fit_lrm(coerce_types(df))
