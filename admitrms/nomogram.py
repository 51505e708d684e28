"""
列线图坐标计算（rms::nomogram）

可加模型中 lp(x) = lp(调整值) + Σ c_v(x_v)，c_v 为变量 v 偏离调整值带来的线性预测变化。
Points 尺度：线性预测值跨度最大的变量记 0–100 分，其余变量按相同比例换算；
样条项的分值可以是非单调的，刻度按实际分值放置。
"""
import numpy as np
import pandas as pd
from scipy.special import logit

from .datadist import DataDist
from .lrm import LrmFit

DEFAULT_PROBS = [0.05, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 0.95]


class NomogramAxes:
    def __init__(self, variables, scale, lp_origin, total_max, prob_ticks):
        self.variables = variables      # {var: DataFrame(value, points)}
        self.scale = scale              # 每 1 分对应的线性预测值
        self.lp_origin = lp_origin      # 总分为 0 时的线性预测值
        self.total_max = total_max
        self.prob_ticks = prob_ticks    # DataFrame(prob, total_points)

    def total_points_to_prob(self, total_points):
        return 1.0 / (1.0 + np.exp(-(self.lp_origin + np.asarray(total_points) * self.scale)))


def _partial_effects(fit: LrmFit, dd: DataDist, var, values):
    base = dd.adjust_row(fit.predictors)
    rows = [base] + [{**base, var: v} for v in values]
    lp = fit.linear_predictor(fit.newdata(rows))
    return lp[1:] - lp[0], lp[0]


def _tick_values(dd: DataDist, var, n_ticks):
    if dd.is_categorical(var):
        return list(dd.levels[var])
    lo, hi = dd.prediction_range(var)
    ticks = np.linspace(lo, hi, n_ticks)
    # 刻度取整到 0–2 位小数，避免 3.3366 之类的标签；取整后仍限制在预测范围内
    span = hi - lo
    decimals = 0 if span >= 50 else 1 if span >= 5 else 2
    return list(np.unique(np.clip(np.round(ticks, decimals), lo, hi)))


def nomogram_axes(fit: LrmFit, dd: DataDist, n_ticks=7, n_fine=200, probs=None) -> NomogramAxes:
    if any(':' in t for t in fit.design_info.term_names):
        raise ValueError("列线图暂不支持交互项")
    probs = DEFAULT_PROBS if probs is None else probs

    fine = {}
    lp_adjust = None
    for var in fit.predictors:
        if dd.is_categorical(var):
            vals = list(dd.levels[var])
        else:
            lo, hi = dd.prediction_range(var)
            # 细网格并入刻度值，保证刻度分值不低于 0
            vals = list(np.linspace(lo, hi, n_fine)) + _tick_values(dd, var, n_ticks)
        eff, lp_adjust = _partial_effects(fit, dd, var, vals)
        fine[var] = (eff.min(), eff.max())

    max_range = max(hi - lo for lo, hi in fine.values())
    if max_range <= 0:
        raise ValueError("所有变量对线性预测值均无影响，无法构建列线图")
    scale = max_range / 100.0

    variables = {}
    for var in fit.predictors:
        ticks = _tick_values(dd, var, n_ticks)
        eff, _ = _partial_effects(fit, dd, var, ticks)
        variables[var] = pd.DataFrame({'value': ticks, 'points': (eff - fine[var][0]) / scale})

    lp_origin = lp_adjust + sum(lo for lo, _ in fine.values())
    total_max = sum((hi - lo) / scale for lo, hi in fine.values())
    tp = (logit(np.asarray(probs, dtype=float)) - lp_origin) / scale
    keep = (tp >= 0) & (tp <= total_max)
    prob_ticks = pd.DataFrame({'prob': np.asarray(probs)[keep], 'total_points': tp[keep]})
    return NomogramAxes(variables, scale, lp_origin, total_max, prob_ticks)
