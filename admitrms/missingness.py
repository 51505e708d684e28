"""
缺失数据模式（Hmisc::naclus / naplot）

naclus 相似度：两变量同时缺失的观测比例；距离 = 1 - 相似度；complete linkage 层次聚类
"""
import numpy as np
import pandas as pd
from scipy.cluster.hierarchy import linkage
from scipy.spatial.distance import squareform


def missing_summary(df: pd.DataFrame) -> pd.Series:
    """各变量缺失比例（降序）"""
    return df.isna().mean().sort_values(ascending=False)


def na_per_observation(df: pd.DataFrame) -> pd.Series:
    """每个观测缺失变量数的频数分布（索引 0..p）"""
    counts = df.isna().sum(axis=1)
    return counts.value_counts().reindex(range(df.shape[1] + 1), fill_value=0)


def mean_other_missing(df: pd.DataFrame) -> pd.Series:
    """某变量缺失的观测中，其余变量平均缺失个数；该变量无缺失时为 NaN"""
    na = df.isna()
    total = na.sum(axis=1)
    out = {}
    for col in df.columns:
        mask = na[col]
        out[col] = float((total[mask] - 1).mean()) if mask.any() else np.nan
    return pd.Series(out)


def na_patterns(df: pd.DataFrame) -> pd.DataFrame:
    """缺失组合频数：每行一种模式（1=缺失），按频数降序"""
    na = df.isna().astype(int)
    patterns = na.value_counts().reset_index()
    patterns.columns = list(df.columns) + ['count']
    patterns['n_missing'] = patterns[list(df.columns)].sum(axis=1)
    return patterns.sort_values(['count', 'n_missing'], ascending=[False, True]).reset_index(drop=True)


class NaClus:
    """naclus 结果：相似度矩阵与 linkage，供树状图绘制"""

    def __init__(self, similarity: pd.DataFrame, linkage_matrix, fraction_missing: pd.Series):
        self.similarity = similarity
        self.linkage = linkage_matrix
        self.fraction_missing = fraction_missing

    @property
    def labels(self):
        return list(self.similarity.columns)


def naclus(df: pd.DataFrame, method='complete') -> NaClus:
    """缺失指示变量的层次聚类"""
    if df.shape[1] < 2:
        raise ValueError("至少需要 2 个变量才能聚类")
    na = df.isna().astype(float).values
    n = na.shape[0]
    sim = (na.T @ na) / n
    dist = 1.0 - sim
    np.fill_diagonal(dist, 0.0)
    Z = linkage(squareform(dist, checks=False), method=method)
    similarity = pd.DataFrame(sim, index=df.columns, columns=df.columns)
    return NaClus(similarity, Z, df.isna().mean())
