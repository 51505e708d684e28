import numpy as np
import pandas as pd
import pytest
from patsy import build_design_matrices, dmatrix

from admitrms.splines import KNOT_QUANTILES, default_knots, rcspline_basis, rcs


def test_default_knots_use_harrell_quantiles():
    x = np.arange(1, 201, dtype=float)
    np.testing.assert_allclose(default_knots(x, 3), np.quantile(x, KNOT_QUANTILES[3]))
    np.testing.assert_allclose(default_knots(x, 5), np.quantile(x, KNOT_QUANTILES[5]))


def test_default_knots_small_sample_uses_fifth_extremes():
    x = np.arange(1, 51, dtype=float)
    knots = default_knots(x, 3)
    assert knots[0] == 5
    assert knots[-1] == 46
    assert knots[1] == pytest.approx(25.5)


def test_default_knots_ignores_nan():
    x = np.concatenate([np.arange(1, 201, dtype=float), [np.nan] * 10])
    np.testing.assert_allclose(default_knots(x, 3), default_knots(np.arange(1, 201), 3))


def test_default_knots_rejects_concentrated_values():
    x = np.array([1.0] * 95 + [2.0] * 5)
    with pytest.raises(ValueError):
        default_knots(x, 3)


def test_default_knots_rejects_bad_knot_count():
    with pytest.raises(ValueError):
        default_knots(np.arange(100), 8)


def test_basis_is_zero_below_first_knot_and_linear_beyond_last():
    knots = np.array([10.0, 20.0, 30.0, 40.0])
    below = rcspline_basis(np.array([0.0, 5.0, 9.9]), knots)
    np.testing.assert_allclose(below[:, 1:], 0.0)

    beyond = rcspline_basis(np.array([45.0, 50.0, 55.0, 60.0]), knots)
    second_diff = np.diff(beyond[:, 1:], n=2, axis=0)
    np.testing.assert_allclose(second_diff, 0.0, atol=1e-9)


def test_basis_shape_and_linear_column():
    x = np.linspace(0, 1, 25)
    basis = rcspline_basis(x, [0.1, 0.3, 0.6, 0.9])
    assert basis.shape == (25, 3)
    np.testing.assert_allclose(basis[:, 0], x)


def test_rcs_reuses_training_knots_for_new_data():
    rng = np.random.default_rng(0)
    train = pd.DataFrame({'x': rng.normal(size=300)})
    design = dmatrix("rcs(x, 3)", train)
    assert design.shape == (300, 3)

    new = pd.DataFrame({'x': [-5.0, 0.0, 5.0]})
    (new_design,) = build_design_matrices([design.design_info], new)
    expected = rcspline_basis(new['x'].values, default_knots(train['x'].values, 3))
    np.testing.assert_allclose(np.asarray(new_design)[:, 1:], expected)


def test_rcs_accepts_fixed_knots():
    x = pd.DataFrame({'x': np.linspace(0, 10, 50)})
    design = dmatrix("rcs(x, knots=[2, 5, 8])", x)
    np.testing.assert_allclose(np.asarray(design)[:, 1:], rcspline_basis(x['x'].values, [2, 5, 8]))
