"""Wald 卡方检验表（rms::anova）：各变量总体检验、非线性检验、TOTAL NONLINEAR、TOTAL"""
import numpy as np
import pandas as pd
from scipy import stats

from .lrm import LrmFit


def wald_test(coef, cov, idx):
    """H0: coef[idx] = 0 的联合 Wald 检验，返回 (chi2, df, P)"""
    idx = list(idx)
    b = np.asarray(coef)[idx]
    V = np.asarray(cov)[np.ix_(idx, idx)]
    chi2 = float(b @ np.linalg.solve(V, b))
    df = len(idx)
    return chi2, df, float(stats.chi2.sf(chi2, df))


def wald_anova(fit: LrmFit) -> pd.DataFrame:
    """
    使用 fit 当前协方差（MLE 或 Bootstrap）。行顺序：
    变量 → (Nonlinear) → … → TOTAL NONLINEAR → TOTAL
    """
    coef = fit.coef.values
    cov = fit.cov.values
    rows = []
    all_nonlinear = []
    all_cols = []
    for var, info in fit.term_columns().items():
        chi2, df, p = wald_test(coef, cov, info['columns'])
        rows.append({'Factor': var, 'Chi-Square': chi2, 'd.f.': df, 'P': p})
        if info['nonlinear']:
            chi2, df, p = wald_test(coef, cov, info['nonlinear'])
            rows.append({'Factor': ' Nonlinear', 'Chi-Square': chi2, 'd.f.': df, 'P': p})
            all_nonlinear.extend(info['nonlinear'])
        all_cols.extend(info['columns'])
    if all_nonlinear:
        chi2, df, p = wald_test(coef, cov, all_nonlinear)
        rows.append({'Factor': 'TOTAL NONLINEAR', 'Chi-Square': chi2, 'd.f.': df, 'P': p})
    chi2, df, p = wald_test(coef, cov, sorted(set(all_cols)))
    rows.append({'Factor': 'TOTAL', 'Chi-Square': chi2, 'd.f.': df, 'P': p})
    return pd.DataFrame(rows)


def format_anova(table: pd.DataFrame, title="Wald Statistics          Response: admit") -> str:
    lines = [title, "", f"{'Factor':<18}{'Chi-Square':>11}{'d.f.':>6}{'P':>9}"]
    for _, r in table.iterrows():
        p = "<.0001" if r['P'] < 1e-4 else f"{r['P']:.4f}"
        lines.append(f"{r['Factor']:<18}{r['Chi-Square']:>11.2f}{int(r['d.f.']):>6}{p:>9}")
    return "\n".join(lines)
