import numpy as np
import pytest

from admitrms.validation import INDEX_NAMES, calibrate, performance_indexes, validate


def test_training_indexes_fix_calibration_terms(fit):
    lp = fit.X @ fit.coef.values
    idx = performance_indexes(fit.y, lp, training=True)
    n = len(fit.y)
    assert idx['Intercept'] == 0.0
    assert idx['Slope'] == 1.0
    assert idx['Emax'] == 0.0
    assert idx['U'] == pytest.approx(-2 / n)
    assert idx['Q'] == pytest.approx(idx['D'] - idx['U'])
    assert idx['Dxy'] == pytest.approx(fit.stats['Dxy'])
    assert idx['R2'] == pytest.approx(fit.stats['R2'], rel=1e-6)
    assert idx['B'] == pytest.approx(fit.stats['Brier'])
    assert idx['D'] == pytest.approx((fit.stats['LR chi2'] - 1) / n, rel=1e-6)


def test_recalibrating_fitted_lp_is_identity(fit):
    lp = fit.X @ fit.coef.values
    idx = performance_indexes(fit.y, lp, training=False)
    assert idx['Intercept'] == pytest.approx(0.0, abs=1e-4)
    assert idx['Slope'] == pytest.approx(1.0, abs=1e-4)
    assert idx['Emax'] == pytest.approx(0.0, abs=1e-4)


def test_validate_table(fit):
    val = validate(fit, B=15, seed=3, verbose=False)
    assert list(val.index) == INDEX_NAMES
    assert list(val.columns) == ['index.orig', 'training', 'test', 'optimism', 'index.corrected', 'n']
    np.testing.assert_allclose(val['index.corrected'], val['index.orig'] - val['optimism'])
    np.testing.assert_allclose(val['optimism'], val['training'] - val['test'])
    assert val.loc['Slope', 'training'] == 1.0
    assert val['n'].iloc[0] <= 15
    assert val.loc['Dxy', 'index.orig'] == pytest.approx(fit.stats['Dxy'])


def test_calibrate_curve(fit):
    cal = calibrate(fit, B=8, seed=3, verbose=False)
    t = cal.table
    assert len(t) == 50
    assert list(t.columns) == ['predicted', 'apparent', 'bias_corrected']
    assert t['predicted'].is_monotonic_increasing
    assert t['bias_corrected'].between(0, 1).all()
    assert cal.n_success <= 8
    assert cal.mean_abs_error >= 0
    assert cal.q90_error >= 0
    assert "Mean absolute error" in cal.summary()
