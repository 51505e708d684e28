import numpy as np
import pytest
from sklearn.metrics import roc_auc_score

from admitrms.concordance import concordance_stats


def test_perfect_discrimination():
    s = concordance_stats([0, 0, 1, 1], [0.1, 0.2, 0.8, 0.9])
    assert s['C'] == 1.0
    assert s['Dxy'] == 1.0
    assert s['gamma'] == 1.0
    assert s['tau-a'] == pytest.approx(4 / 6)


def test_mixed_pairs():
    s = concordance_stats([0, 0, 1, 1], [0.1, 0.8, 0.2, 0.9])
    assert s['n_concordant'] == 3
    assert s['n_discordant'] == 1
    assert s['C'] == pytest.approx(0.75)
    assert s['Dxy'] == pytest.approx(0.5)
    assert s['gamma'] == pytest.approx(0.5)
    assert s['tau-a'] == pytest.approx(2 / 6)


def test_ties_count_half():
    s = concordance_stats([0, 1], [0.5, 0.5])
    assert s['n_tied'] == 1
    assert s['C'] == 0.5
    assert s['gamma'] == 0.0


def test_matches_roc_auc():
    rng = np.random.default_rng(1)
    y = rng.integers(0, 2, 300)
    p = np.round(rng.random(300) + 0.3 * y, 2)
    s = concordance_stats(y, p)
    assert s['C'] == pytest.approx(roc_auc_score(y, p))
    # 一致对 + 0.5 × 打结对 与 ROC 面积一致
    n_pairs = (y == 1).sum() * (y == 0).sum()
    assert (s['n_concordant'] + 0.5 * s['n_tied']) / n_pairs == pytest.approx(s['C'])
    assert s['n_concordant'] + s['n_discordant'] + s['n_tied'] == pytest.approx(n_pairs)


def test_single_class_raises():
    with pytest.raises(ValueError):
        concordance_stats([1, 1, 1], [0.2, 0.4, 0.6])


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        concordance_stats([0, 1], [0.2, 0.4, 0.6])
