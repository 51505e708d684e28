"""
预测概率曲线（rms::Predict）

var 在 Low:prediction ~ High:prediction 网格取值（分类变量取全部水平），
按 by 的各水平分层，其余变量固定于调整值。
置信区间：默认 Wald（x'Vx）；fit 携带 Bootstrap 系数时改用百分位区间。
"""
import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import expit

from .datadist import DataDist
from .lrm import LrmFit
from .study_config import CONF_LEVEL


def _values(dd: DataDist, var, n):
    if dd.is_categorical(var):
        return list(dd.levels[var])
    lo, hi = dd.prediction_range(var)
    return list(np.linspace(lo, hi, n))


def predict_grid(fit: LrmFit, dd: DataDist, var, by=None, n=200, conf_level=CONF_LEVEL) -> pd.DataFrame:
    """
    Returns
    -------
    DataFrame: var, [by], lp, lower_lp, upper_lp, prob, lower, upper
    """
    if var not in fit.predictors:
        raise ValueError(f"{var} 不是模型中的预测变量")
    if by is not None and (by not in fit.predictors or by == var):
        raise ValueError(f"分层变量无效: {by}")

    base = dd.adjust_row(fit.predictors)
    by_values = _values(dd, by, n) if by is not None else [None]
    rows = []
    for b in by_values:
        for x in _values(dd, var, n):
            row = {**base, var: x}
            if by is not None:
                row[by] = b
            rows.append(row)
    grid = fit.newdata(rows)
    X = fit.design(grid).values
    lp = X @ fit.coef.values

    alpha = 1 - conf_level
    if fit.boot_coef is not None and len(fit.boot_coef) > 1:
        boot_lp = X @ fit.boot_coef.T
        lower_lp = np.quantile(boot_lp, alpha / 2, axis=1)
        upper_lp = np.quantile(boot_lp, 1 - alpha / 2, axis=1)
    else:
        se = fit.lp_se(X)
        zcrit = stats.norm.ppf(1 - alpha / 2)
        lower_lp, upper_lp = lp - zcrit * se, lp + zcrit * se

    out = pd.DataFrame({var: grid[var].values})
    if by is not None:
        out[by] = grid[by].values
    out['lp'] = lp
    out['lower_lp'] = lower_lp
    out['upper_lp'] = upper_lp
    out['prob'] = expit(lp)
    out['lower'] = expit(lower_lp)
    out['upper'] = expit(upper_lp)
    return out


def predict_one(fit: LrmFit, values: dict, conf_level=CONF_LEVEL) -> dict:
    """单个观测的预测概率及 Wald 置信区间（计算器页面使用）"""
    X = fit.design(fit.newdata([values])).values
    lp = float(X[0] @ fit.coef.values)
    se = float(fit.lp_se(X)[0])
    zcrit = stats.norm.ppf(0.5 + conf_level / 2)
    return {
        'lp': lp,
        'prob': float(expit(lp)),
        'lower': float(expit(lp - zcrit * se)),
        'upper': float(expit(lp + zcrit * se)),
    }
