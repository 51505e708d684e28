import numpy as np
import pytest
from scipy.special import expit

from admitrms.predict import predict_grid, predict_one


def test_grid_by_rank(fit, dd):
    grid = predict_grid(fit, dd, 'gre', by='rank', n=50)
    assert len(grid) == 50 * 4
    assert list(grid.columns) == ['gre', 'rank', 'lp', 'lower_lp', 'upper_lp', 'prob', 'lower', 'upper']
    lo, hi = dd.prediction_range('gre')
    assert grid['gre'].min() == pytest.approx(lo)
    assert grid['gre'].max() == pytest.approx(hi)
    np.testing.assert_allclose(grid['prob'], expit(grid['lp']))
    assert (grid['lower'] <= grid['prob']).all()
    assert (grid['prob'] <= grid['upper']).all()


def test_grid_matches_single_prediction(fit, dd):
    grid = predict_grid(fit, dd, 'gpa', n=20)
    row = grid.iloc[7]
    values = {**dd.adjust_row(fit.predictors), 'gpa': row['gpa']}
    one = predict_one(fit, values)
    assert one['prob'] == pytest.approx(row['prob'])
    assert one['lower'] == pytest.approx(row['lower'])
    assert one['upper'] == pytest.approx(row['upper'])


def test_categorical_grid(fit, dd):
    grid = predict_grid(fit, dd, 'rank')
    assert len(grid) == 4
    assert grid['prob'].iloc[0] > grid['prob'].iloc[-1]


def test_bootstrap_bands_use_coefficient_samples(fit, dd):
    samples = np.tile(fit.coef.values, (10, 1))
    boot_fit = fit.with_covariance(fit.cov.values, boot_coef=samples)
    grid = predict_grid(boot_fit, dd, 'gre', n=10)
    np.testing.assert_allclose(grid['lower_lp'], grid['lp'])
    np.testing.assert_allclose(grid['upper_lp'], grid['lp'])


def test_invalid_arguments(fit, dd):
    with pytest.raises(ValueError):
        predict_grid(fit, dd, 'toefl')
    with pytest.raises(ValueError):
        predict_grid(fit, dd, 'gre', by='gre')
