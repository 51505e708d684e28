"""
描述统计（Hmisc::describe 风格）与 Table 1 基线表（tableone）
"""
import numpy as np
import pandas as pd
from tableone import TableOne

from .feature_formatter import FeatureFormatter
from .study_config import OUTCOME, PREDICTORS, CATEGORICAL

QUANTILES = [0.05, 0.10, 0.25, 0.50, 0.75, 0.90, 0.95]
MAX_TABULATE = 10


def info_index(series) -> float:
    """打结信息指数 1 - Σ(f³ - f)/(n³ - n)，连续无打结时为 1"""
    s = series.dropna()
    n = len(s)
    if n < 2:
        return 0.0
    f = s.value_counts().values.astype(float)
    return float(1 - np.sum(f ** 3 - f) / (n ** 3 - n))


def gini_mean_difference(values) -> float:
    x = np.sort(np.asarray(values, dtype=float))
    n = len(x)
    if n < 2:
        return np.nan
    i = np.arange(1, n + 1)
    return float(2.0 * np.sum((2 * i - n - 1) * x) / (n * (n - 1)))


def describe_variable(series: pd.Series) -> dict:
    """单变量描述"""
    s = series.dropna()
    out = {
        'n': int(len(s)),
        'missing': int(series.isna().sum()),
        'distinct': int(s.nunique()),
        'Info': info_index(s),
    }
    categorical = isinstance(series.dtype, pd.CategoricalDtype) or series.dtype == object
    if not categorical and len(s):
        vals = s.astype(float)
        out['Mean'] = float(vals.mean())
        out['Gmd'] = gini_mean_difference(vals)
        if set(vals.unique()) <= {0.0, 1.0}:
            out['Sum'] = int(vals.sum())
        else:
            out['quantiles'] = dict(zip(QUANTILES, np.quantile(vals, QUANTILES)))
            uniq = np.sort(vals.unique())
            out['lowest'] = uniq[:5].tolist()
            out['highest'] = uniq[-5:].tolist()
    if categorical or out['distinct'] <= MAX_TABULATE:
        counts = s.value_counts().sort_index()
        if isinstance(series.dtype, pd.CategoricalDtype):
            counts = counts.reindex(series.cat.categories, fill_value=0)
        out['frequency'] = {k: int(v) for k, v in counts.items()}
        out['proportion'] = {k: float(v) / len(s) if len(s) else np.nan for k, v in counts.items()}
    return out


def describe(df: pd.DataFrame, columns=None):
    """
    全部变量描述

    Returns
    -------
    (dict, DataFrame): 原始描述字典，以及每变量一行的汇总表
    """
    columns = columns or list(df.columns)
    desc = {c: describe_variable(df[c]) for c in columns}
    rows = []
    for c, d in desc.items():
        row = {'Variable': c, 'n': d['n'], 'missing': d['missing'], 'distinct': d['distinct'],
               'Info': round(d['Info'], 3), 'Mean': d.get('Mean', np.nan), 'Gmd': d.get('Gmd', np.nan)}
        for q, v in d.get('quantiles', {}).items():
            row[f"{q:.2f}"] = v
        rows.append(row)
    return desc, pd.DataFrame(rows)


def _fmt(v):
    if isinstance(v, float):
        return f"{v:.4g}"
    return str(v)


def format_describe(desc: dict, n_obs: int, title="df") -> str:
    """Hmisc 风格文本报告"""
    formatter = FeatureFormatter()
    lines = [f"{title}", "", f" {len(desc)}  Variables      {n_obs}  Observations"]
    for var, d in desc.items():
        lines.append("-" * 70)
        lines.append(f"{var} : {formatter.get_label(var, with_unit=True)}")
        head = ['n', 'missing', 'distinct', 'Info'] + [k for k in ('Sum', 'Mean', 'Gmd') if k in d]
        lines.append("  " + "".join(f"{h:>10}" for h in head))
        lines.append("  " + "".join(f"{_fmt(d[h]):>10}" for h in head))
        if 'quantiles' in d:
            qs = d['quantiles']
            lines.append("  " + "".join(f"{q:>10.2f}" for q in qs))
            lines.append("  " + "".join(f"{_fmt(float(v)):>10}" for v in qs.values()))
            lines.append(f"  lowest : {', '.join(_fmt(v) for v in d['lowest'])}")
            lines.append(f"  highest: {', '.join(_fmt(v) for v in d['highest'])}")
        if 'frequency' in d:
            keys = list(d['frequency'])
            lines.append("  Value      " + "".join(f"{_fmt(k):>8}" for k in keys))
            lines.append("  Frequency  " + "".join(f"{d['frequency'][k]:>8}" for k in keys))
            lines.append("  Proportion " + "".join(f"{d['proportion'][k]:>8.3f}" for k in keys))
    lines.append("-" * 70)
    return "\n".join(lines)


def build_table1(df: pd.DataFrame) -> TableOne:
    """按录取与否分组的基线表：rank 为分类变量，连续变量 mean (SD)，含缺失数与 P 值"""
    data = df[[OUTCOME] + PREDICTORS].dropna(subset=[OUTCOME]).copy()
    data[OUTCOME] = data[OUTCOME].astype(int).map({0: 'Not admitted', 1: 'Admitted'})
    for col in CATEGORICAL:
        data[col] = data[col].astype(object)
    formatter = FeatureFormatter()
    rename = {c: formatter.get_label(c, with_unit=True) for c in PREDICTORS}
    return TableOne(
        data,
        columns=PREDICTORS,
        categorical=CATEGORICAL,
        groupby=OUTCOME,
        pval=True,
        missing=True,
        include_null=False,
        overall=True,
        rename=rename,
    )
