"""
效应汇总（rms::summary）：OR 及置信区间

- 连续变量：由 Low:effect (Q1) 变到 High:effect (Q3)，其余变量固定于调整值
- 分类变量：各水平对比参照水平（默认为调整值，即频数最多的水平）
- 标准误来自 fit 当前协方差，Bootstrap 协方差同样适用
"""
import numpy as np
import pandas as pd
from scipy import stats

from .datadist import DataDist
from .lrm import LrmFit
from .study_config import CONF_LEVEL


def _contrast(fit: LrmFit, low_row, high_row):
    X = fit.design(fit.newdata([low_row, high_row])).values
    d = X[1] - X[0]
    effect = float(d @ fit.coef.values)
    se = float(np.sqrt(d @ fit.cov.values @ d))
    return effect, se


def summarize_effects(fit: LrmFit, dd: DataDist, conf_level=CONF_LEVEL, ref_levels=None) -> pd.DataFrame:
    """
    Returns
    -------
    DataFrame: Factor, Variable, Low, High, Diff., Effect, S.E., Lower, Upper,
               Odds Ratio, OR Lower, OR Upper
    """
    ref_levels = ref_levels or {}
    zcrit = stats.norm.ppf(0.5 + conf_level / 2)
    base = dd.adjust_row(fit.predictors)
    rows = []
    for var in fit.predictors:
        if dd.is_categorical(var):
            ref = ref_levels.get(var, dd.adjust_to(var))
            comparisons = [(ref, lvl) for lvl in dd.levels[var] if lvl != ref]
            factor_fmt = "{var} - {high}:{low}"
        else:
            low, high = dd.effect_range(var)
            comparisons = [(low, high)]
            factor_fmt = "{var}"
        for low, high in comparisons:
            effect, se = _contrast(fit, {**base, var: low}, {**base, var: high})
            lower, upper = effect - zcrit * se, effect + zcrit * se
            rows.append({
                'Factor': factor_fmt.format(var=var, low=low, high=high),
                'Variable': var,
                'Low': low,
                'High': high,
                'Diff.': np.nan if dd.is_categorical(var) else high - low,
                'Effect': effect,
                'S.E.': se,
                'Lower': lower,
                'Upper': upper,
                'Odds Ratio': np.exp(effect),
                'OR Lower': np.exp(lower),
                'OR Upper': np.exp(upper),
            })
    return pd.DataFrame(rows)


def odds_ratio_frame(effects: pd.DataFrame) -> pd.DataFrame:
    """转为森林图输入格式（Feature, OR, OR_Lower, OR_Upper, Coef）"""
    return pd.DataFrame({
        'Feature': effects['Factor'].values,
        'Variable': effects['Variable'].values,
        'OR': effects['Odds Ratio'].values,
        'OR_Lower': effects['OR Lower'].values,
        'OR_Upper': effects['OR Upper'].values,
        'Coef': effects['Effect'].values,
    })


def format_effects(effects: pd.DataFrame, conf_level=CONF_LEVEL) -> str:
    """rms 风格：每个因素一行 Effect，下方一行 Odds Ratio"""
    pct = f"{conf_level:.2f}"
    lines = [f"{'Factor':<14}{'Low':>8}{'High':>8}{'Diff.':>8}{'Effect':>9}{'S.E.':>8}"
             f"{'Lower ' + pct:>12}{'Upper ' + pct:>12}"]

    def _num(v, fmt):
        return "" if pd.isna(v) else format(v, fmt)

    for _, r in effects.iterrows():
        low = _num(r['Low'], '.2f') if not pd.isna(r['Diff.']) else ""
        high = _num(r['High'], '.2f') if not pd.isna(r['Diff.']) else ""
        lines.append(f"{r['Factor']:<14}{low:>8}{high:>8}{_num(r['Diff.'], '.2f'):>8}"
                     f"{r['Effect']:>9.4f}{r['S.E.']:>8.4f}{r['Lower']:>12.4f}{r['Upper']:>12.4f}")
        lines.append(f"{' Odds Ratio':<14}{low:>8}{high:>8}{_num(r['Diff.'], '.2f'):>8}"
                     f"{r['Odds Ratio']:>9.4f}{'':>8}{r['OR Lower']:>12.4f}{r['OR Upper']:>12.4f}")
    return "\n".join(lines)
