"""秩相关区分度指标：C 指数、Somers' Dxy、Goodman-Kruskal gamma、Kendall tau-a"""
import numpy as np
from scipy.stats import rankdata
from sklearn.metrics import roc_auc_score


def concordance_stats(y, p) -> dict:
    """
    C = (一致对 + 0.5 × 打结对) / (阳性数 × 阴性数)
    Dxy = 2(C - 0.5)；gamma = (Nc - Nd)/(Nc + Nd)；tau-a = (Nc - Nd) / (n(n-1)/2)
    """
    y = np.asarray(y, dtype=float)
    p = np.asarray(p, dtype=float)
    if y.shape != p.shape:
        raise ValueError("y 与 p 长度不一致")
    n1 = int((y == 1).sum())
    n0 = int((y == 0).sum())
    if n1 == 0 or n0 == 0:
        raise ValueError("结局只有一个类别，无法计算区分度")

    # C 即 ROC 曲线下面积；一致对数由秩和（Mann-Whitney U）得到，O(n log n)
    ranks = rankdata(p)
    rank_sum_pos = ranks[y == 1].sum()
    u = rank_sum_pos - n1 * (n1 + 1) / 2.0
    n_pairs = n1 * n0

    # 阳性-阴性之间的打结对数
    _, inv = np.unique(p, return_inverse=True)
    pos_counts = np.bincount(inv[y == 1], minlength=inv.max() + 1)
    neg_counts = np.bincount(inv[y == 0], minlength=inv.max() + 1)
    n_tied = float((pos_counts * neg_counts).sum())

    n_conc = u - 0.5 * n_tied
    n_disc = n_pairs - n_conc - n_tied
    c_index = roc_auc_score(y, p)
    n = len(y)
    gamma = (n_conc - n_disc) / (n_conc + n_disc) if (n_conc + n_disc) > 0 else 0.0
    return {
        'C': float(c_index),
        'Dxy': float(2 * (c_index - 0.5)),
        'gamma': float(gamma),
        'tau-a': float((n_conc - n_disc) / (n * (n - 1) / 2.0)),
        'n_concordant': float(n_conc),
        'n_discordant': float(n_disc),
        'n_tied': n_tied,
    }
