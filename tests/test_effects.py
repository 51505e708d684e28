import numpy as np
import pytest

from admitrms.effects import format_effects, odds_ratio_frame, summarize_effects
from admitrms.splines import default_knots, rcspline_basis


def _rank_coef(fit, level):
    return 0.0 if level == 1 else fit.coef[f'rank[T.{level}]']


def test_continuous_effect_is_iqr_spline_contrast(fit, dd):
    eff = summarize_effects(fit, dd).set_index('Factor')
    row = eff.loc['gre']
    q1, q3 = np.quantile(fit.data['gre'], [0.25, 0.75])
    assert row['Low'] == pytest.approx(q1)
    assert row['High'] == pytest.approx(q3)
    assert row['Diff.'] == pytest.approx(q3 - q1)

    knots = default_knots(fit.data['gre'].values, 3)
    basis = rcspline_basis(np.array([q1, q3]), knots)
    beta = fit.coef[['rcs(gre, 3)[0]', 'rcs(gre, 3)[1]']].values
    assert row['Effect'] == pytest.approx((basis[1] - basis[0]) @ beta)
    assert row['Odds Ratio'] == pytest.approx(np.exp(row['Effect']))
    assert row['OR Lower'] < row['Odds Ratio'] < row['OR Upper']


def test_factor_levels_compared_to_adjust_level(fit, dd):
    eff = summarize_effects(fit, dd)
    ref = dd.adjust_to('rank')
    rank_rows = eff[eff['Variable'] == 'rank']
    assert len(rank_rows) == 3
    assert (rank_rows['Low'] == ref).all()
    for _, row in rank_rows.iterrows():
        high = int(row['High'])
        assert row['Factor'] == f"rank - {high}:{ref}"
        expected = _rank_coef(fit, high) - _rank_coef(fit, ref)
        assert row['Effect'] == pytest.approx(expected)


def test_custom_reference_level(fit, dd):
    eff = summarize_effects(fit, dd, ref_levels={'rank': 1}).set_index('Factor')
    row = eff.loc['rank - 2:1']
    assert row['Effect'] == pytest.approx(fit.coef['rank[T.2]'])
    assert row['S.E.'] == pytest.approx(np.sqrt(fit.cov.loc['rank[T.2]', 'rank[T.2]']))


def test_odds_ratio_frame_and_text(fit, dd):
    eff = summarize_effects(fit, dd)
    or_df = odds_ratio_frame(eff)
    assert list(or_df.columns) == ['Feature', 'Variable', 'OR', 'OR_Lower', 'OR_Upper', 'Coef']
    assert len(or_df) == len(eff) == 5
    text = format_effects(eff)
    assert text.count('Odds Ratio') == 5
