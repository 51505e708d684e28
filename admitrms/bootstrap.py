"""
Bootstrap 协方差（rms::bootcov）与系数百分位置信区间

对拟合时的设计矩阵行有放回重抽样（样条节点、分类水平保持不变），逐次重拟合收集系数。
秩亏 / 完全分离等失败的重抽样跳过并计数。
"""
import numpy as np
import pandas as pd
from sklearn.utils import resample

from .feature_formatter import FeatureFormatter
from .lrm import LrmFit, fit_glm
from .logger import log as _log
from .study_config import N_BOOT, BOOT_SEED, CONF_LEVEL


class BootstrapResult:
    """Bootstrap 系数矩阵、协方差、百分位 CI，以及使用 Bootstrap 协方差的 fit"""

    def __init__(self, fit, coefs, n_requested, n_failed, conf_level):
        self.coefs = coefs
        self.n_requested = n_requested
        self.n_failed = n_failed
        self.cov = np.cov(coefs, rowvar=False)
        self.fit = fit.with_covariance(self.cov, boot_coef=coefs, source=f"bootstrap (B={len(coefs)})")
        self.conf_level = conf_level
        self._orig = fit

    @property
    def n_success(self):
        return len(self.coefs)

    def coef_ci(self) -> pd.DataFrame:
        """系数百分位 CI 与 MLE / Bootstrap 标准误对照"""
        alpha = 1 - self.conf_level
        lower = np.quantile(self.coefs, alpha / 2, axis=0)
        upper = np.quantile(self.coefs, 1 - alpha / 2, axis=0)
        return pd.DataFrame({
            'Term': [FeatureFormatter.term_label(c) for c in self._orig.columns],
            'Coef': self._orig.coef.values,
            'S.E. (MLE)': np.sqrt(np.diag(self._orig.cov.values)),
            'S.E. (boot)': np.sqrt(np.diag(self.cov)),
            'Boot Lower': lower,
            'Boot Upper': upper,
        })


def bootcov(fit: LrmFit, B=N_BOOT, seed=BOOT_SEED, conf_level=CONF_LEVEL, verbose=True) -> BootstrapResult:
    """
    真实的 Bootstrap：对原始样本有放回抽样、重拟合，汇总系数分布
    """
    if B < 2:
        raise ValueError("Bootstrap 次数至少为 2")
    if verbose:
        _log(f"Starting Bootstrap covariance estimation (B={B})...", "INFO")

    indices = np.arange(len(fit.y))
    boot_coefs = []
    n_failed = 0
    for i in range(B):
        idx = resample(indices, random_state=seed + i)
        try:
            res = fit_glm(fit.y[idx], fit.X[idx])
        except ValueError:
            n_failed += 1
        else:
            boot_coefs.append(np.asarray(res.params))

        if verbose and (i + 1) % 100 == 0:
            _log(f"Progress: {i + 1}/{B} iterations completed", "INFO")

    if len(boot_coefs) < 2:
        raise ValueError(f"Bootstrap 重拟合几乎全部失败（{n_failed}/{B}）")
    if n_failed > B * 0.2:
        _log(f"Warning: {n_failed}/{B} bootstrap refits failed, CI may be unstable.", "WARN")
    elif verbose and n_failed:
        _log(f"{n_failed}/{B} bootstrap refits failed and were skipped.", "INFO")

    return BootstrapResult(fit, np.vstack(boot_coefs), B, n_failed, conf_level)
