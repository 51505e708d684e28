"""预测变量分布摘要（rms::datadist）：效应区间、调整值与预测范围"""
import numpy as np
import pandas as pd


def _is_categorical(series):
    return isinstance(series.dtype, pd.CategoricalDtype) or series.dtype == object


def _nth_value(sorted_vals, k, from_end=False):
    """第 k 小（或第 k 大）值；观测不足时退化为最小/最大值"""
    if len(sorted_vals) == 0:
        return np.nan
    idx = min(k - 1, len(sorted_vals) - 1)
    return sorted_vals[-1 - idx] if from_end else sorted_vals[idx]


class DataDist:
    """
    连续变量：Low:effect=Q1，Adjust to=中位数，High:effect=Q3，
             Low/High:prediction=第 10 小/大的值，Low/High=最小/最大值
    分类变量：水平列表，Adjust to=频数最多的水平
    """

    def __init__(self, limits, levels):
        self.limits = limits
        self.levels = levels

    def is_categorical(self, var):
        return var in self.levels

    def adjust_to(self, var):
        return self.limits[var]['Adjust to']

    def effect_range(self, var):
        lim = self.limits[var]
        return lim['Low:effect'], lim['High:effect']

    def prediction_range(self, var):
        lim = self.limits[var]
        return lim['Low:prediction'], lim['High:prediction']

    def adjust_row(self, predictors):
        """所有预测变量取调整值的一行数据"""
        return {v: self.adjust_to(v) for v in predictors}

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.limits)


def datadist(df: pd.DataFrame, predictors) -> DataDist:
    limits = {}
    levels = {}
    for var in predictors:
        series = df[var].dropna()
        if series.empty:
            raise ValueError(f"{var} 全部缺失，无法计算分布摘要")
        if _is_categorical(df[var]):
            cats = list(df[var].cat.categories) if isinstance(df[var].dtype, pd.CategoricalDtype) \
                else sorted(series.unique())
            present = [c for c in cats if (series == c).any()]
            mode = series.value_counts().reindex(present).idxmax()
            levels[var] = present
            limits[var] = {
                'Low:effect': np.nan, 'Adjust to': mode, 'High:effect': np.nan,
                'Low:prediction': present[0], 'High:prediction': present[-1],
                'Low': present[0], 'High': present[-1],
            }
        else:
            vals = np.sort(series.astype(float).values)
            q1, med, q3 = np.quantile(vals, [0.25, 0.5, 0.75])
            limits[var] = {
                'Low:effect': float(q1), 'Adjust to': float(med), 'High:effect': float(q3),
                'Low:prediction': float(_nth_value(vals, 10)),
                'High:prediction': float(_nth_value(vals, 10, from_end=True)),
                'Low': float(vals[0]), 'High': float(vals[-1]),
            }
    return DataDist(limits, levels)
