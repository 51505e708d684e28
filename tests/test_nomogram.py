import numpy as np
import pytest

from admitrms.datadist import DataDist
from admitrms.nomogram import _tick_values, nomogram_axes
from admitrms.predict import predict_one


def test_points_scale(fit, dd):
    axes = nomogram_axes(fit, dd)
    assert set(axes.variables) == {'gre', 'gpa', 'rank'}
    widest = max(tab['points'].max() for tab in axes.variables.values())
    assert widest == pytest.approx(100, abs=1.0)
    for var, tab in axes.variables.items():
        assert tab['points'].min() >= -1e-9
        if not dd.is_categorical(var):
            lo, hi = dd.prediction_range(var)
            assert tab['value'].min() >= lo
            assert tab['value'].max() <= hi
    assert axes.total_max > 100
    assert list(axes.variables['rank']['value']) == [1, 2, 3, 4]


def test_total_points_reproduce_model_prediction(fit, dd):
    axes = nomogram_axes(fit, dd)
    values, total = {}, 0.0
    for var, tab in axes.variables.items():
        value = tab['value'].iloc[1]
        values[var] = value.item() if hasattr(value, 'item') else value
        total += tab['points'].iloc[1]
    expected = predict_one(fit, values)['prob']
    assert axes.total_points_to_prob(total) == pytest.approx(expected, rel=1e-8)


def test_probability_axis_within_total_range(fit, dd):
    axes = nomogram_axes(fit, dd)
    tp = axes.prob_ticks['total_points']
    assert ((tp >= 0) & (tp <= axes.total_max)).all()
    assert tp.is_monotonic_increasing
    np.testing.assert_allclose(axes.total_points_to_prob(tp), axes.prob_ticks['prob'])


def test_rounded_ticks_stay_in_prediction_range():
    dd = DataDist({'gpa': {'Low:prediction': 2.263, 'High:prediction': 3.987}}, {})
    ticks = _tick_values(dd, 'gpa', 7)
    assert ticks[0] == pytest.approx(2.263)
    assert ticks[-1] == pytest.approx(3.987)
    assert all(2.263 <= t <= 3.987 for t in ticks)
    assert len(ticks) == 7
