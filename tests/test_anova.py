import numpy as np
import pytest

from admitrms.anova import format_anova, wald_anova, wald_test


def test_anova_rows_and_df(fit):
    table = wald_anova(fit)
    factors = table['Factor'].tolist()
    assert factors.count(' Nonlinear') == 2
    for name in ('gre', 'gpa', 'rank', 'TOTAL NONLINEAR', 'TOTAL'):
        assert name in factors
    df = dict(zip(factors, table['d.f.']))
    assert df['gre'] == 2
    assert df['rank'] == 3
    assert df['TOTAL NONLINEAR'] == 2
    assert df['TOTAL'] == 7


def test_total_matches_direct_wald(fit):
    idx = [i for i, c in enumerate(fit.columns) if c != 'Intercept']
    b = fit.coef.values[idx]
    V = fit.cov.values[np.ix_(idx, idx)]
    expected = b @ np.linalg.inv(V) @ b
    total = wald_anova(fit).iloc[-1]
    assert total['Factor'] == 'TOTAL'
    assert total['Chi-Square'] == pytest.approx(expected)


def test_anova_follows_covariance(fit):
    base = wald_anova(fit)
    scaled = wald_anova(fit.with_covariance(fit.cov.values * 4))
    np.testing.assert_allclose(scaled['Chi-Square'], base['Chi-Square'] / 4)


def test_wald_test_single_coefficient():
    chi2, df, p = wald_test([0.0, 2.0], np.diag([1.0, 4.0]), [1])
    assert chi2 == pytest.approx(1.0)
    assert df == 1
    assert p == pytest.approx(0.3173, abs=1e-4)


def test_format_anova(fit):
    text = format_anova(wald_anova(fit))
    assert "TOTAL NONLINEAR" in text
    assert "Chi-Square" in text
