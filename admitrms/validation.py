"""
Bootstrap 内部验证（rms::validate / rms::calibrate）

validate：Dxy、R2、Intercept、Slope、Emax、D、U、Q、B、g、gp 的乐观度校正
  optimism = 指标(Bootstrap 训练样本) - 指标(原始样本，用 Bootstrap 模型预测)
  index.corrected = index.orig - mean(optimism)
calibrate：lowess 平滑校准曲线的表观值与偏倚校正值
"""
import warnings

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy.special import expit
from sklearn.metrics import brier_score_loss
from sklearn.utils import resample
from statsmodels.nonparametric.smoothers_lowess import lowess

from .concordance import concordance_stats
from .describe import gini_mean_difference
from .lrm import LrmFit, fit_glm
from .logger import log as _log
from .study_config import N_VALIDATE, BOOT_SEED

INDEX_NAMES = ['Dxy', 'R2', 'Intercept', 'Slope', 'Emax', 'D', 'U', 'Q', 'B', 'g', 'gp']
_EPS = 1e-12


def _loglik(y, p):
    p = np.clip(p, _EPS, 1 - _EPS)
    return float(np.sum(y * np.log(p) + (1 - y) * np.log(1 - p)))


def _recalibrate(y, lp):
    """y ~ a + b·lp 的 Logistic 再校准，返回 (a, b)"""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        res = sm.GLM(y, sm.add_constant(lp, has_constant='add'), family=sm.families.Binomial()).fit()
    return float(res.params[0]), float(res.params[1])


def performance_indexes(y, lp, training=True) -> dict:
    """
    单个样本上的验证指标。training=True 时 Intercept/Slope 按定义取 0/1，Emax 为 0
    """
    y = np.asarray(y, dtype=float)
    lp = np.asarray(lp, dtype=float)
    n = len(y)
    p = expit(lp)

    prev = np.clip(y.mean(), _EPS, 1 - _EPS)
    ll0 = n * (prev * np.log(prev) + (1 - prev) * np.log(1 - prev))
    ll = _loglik(y, p)
    lr = -2 * (ll0 - ll)
    r2 = (1 - np.exp(-lr / n)) / (1 - np.exp(2 * ll0 / n))

    if training:
        a, b = 0.0, 1.0
        emax = 0.0
        u_chi2 = 0.0
    else:
        a, b = _recalibrate(y, lp)
        grid = np.linspace(lp.min(), lp.max(), 200)
        emax = float(np.max(np.abs(expit(a + b * grid) - expit(grid))))
        u_chi2 = -2 * (ll - _loglik(y, expit(a + b * lp)))

    d = (lr - 1) / n
    u = (u_chi2 - 2) / n
    return {
        'Dxy': concordance_stats(y, p)['Dxy'],
        'R2': float(r2),
        'Intercept': a,
        'Slope': b,
        'Emax': emax,
        'D': float(d),
        'U': float(u),
        'Q': float(d - u),
        'B': float(brier_score_loss(y, p)),
        'g': gini_mean_difference(lp),
        'gp': gini_mean_difference(p),
    }


def validate(fit: LrmFit, B=N_VALIDATE, seed=BOOT_SEED, verbose=True) -> pd.DataFrame:
    """
    Returns
    -------
    DataFrame（行为指标）：index.orig, training, test, optimism, index.corrected, n
    """
    if verbose:
        _log(f"Starting optimism bootstrap validation (B={B})...", "INFO")
    apparent = performance_indexes(fit.y, fit.X @ fit.coef.values, training=True)
    indices = np.arange(len(fit.y))
    train_rows, test_rows = [], []
    n_failed = 0
    for i in range(B):
        idx = resample(indices, random_state=seed + i)
        try:
            beta = np.asarray(fit_glm(fit.y[idx], fit.X[idx]).params)
            train = performance_indexes(fit.y[idx], fit.X[idx] @ beta, training=True)
            test = performance_indexes(fit.y, fit.X @ beta, training=False)
        except ValueError:
            n_failed += 1
        else:
            train_rows.append(train)
            test_rows.append(test)
        if verbose and (i + 1) % 100 == 0:
            _log(f"Progress: {i + 1}/{B} iterations completed", "INFO")

    if not train_rows:
        raise ValueError("验证 Bootstrap 全部失败")
    if n_failed > B * 0.2:
        _log(f"Warning: {n_failed}/{B} validation refits failed.", "WARN")

    train_df = pd.DataFrame(train_rows)[INDEX_NAMES]
    test_df = pd.DataFrame(test_rows)[INDEX_NAMES]
    optimism = (train_df - test_df).mean()
    orig = pd.Series(apparent)[INDEX_NAMES]
    return pd.DataFrame({
        'index.orig': orig,
        'training': train_df.mean(),
        'test': test_df.mean(),
        'optimism': optimism,
        'index.corrected': orig - optimism,
        'n': len(train_rows),
    })


def _smooth_calibration(y, p, grid):
    """lowess(y ~ p)（不做稳健迭代），插值到 grid"""
    fitted = lowess(y, p, frac=2 / 3, it=0, return_sorted=True)
    xs, idx = np.unique(fitted[:, 0], return_index=True)
    return np.interp(grid, xs, fitted[idx, 1])


class CalibrationResult:
    def __init__(self, table, B, n_success, n):
        self.table = table
        self.B = B
        self.n_success = n_success
        self.n = n
        err = np.abs(table['bias_corrected'] - table['predicted'])
        self.mean_abs_error = float(err.mean())
        self.q90_error = float(err.quantile(0.9))

    def summary(self) -> str:
        return (f"n={self.n}   Mean absolute error={self.mean_abs_error:.3f}   "
                f"0.9 Quantile of absolute error={self.q90_error:.3f}   B={self.n_success}")


def calibrate(fit: LrmFit, B=N_VALIDATE, seed=BOOT_SEED, n_grid=50, verbose=True) -> CalibrationResult:
    """Bootstrap 过拟合校正的校准曲线"""
    if verbose:
        _log(f"Starting bootstrap calibration (B={B})...", "INFO")
    p_app = expit(fit.X @ fit.coef.values)
    grid = np.linspace(p_app.min(), p_app.max(), n_grid)
    apparent = _smooth_calibration(fit.y, p_app, grid)

    indices = np.arange(len(fit.y))
    optimism = []
    for i in range(B):
        idx = resample(indices, random_state=seed + i)
        try:
            beta = np.asarray(fit_glm(fit.y[idx], fit.X[idx]).params)
        except ValueError:
            continue
        cal_train = _smooth_calibration(fit.y[idx], expit(fit.X[idx] @ beta), grid)
        cal_test = _smooth_calibration(fit.y, expit(fit.X @ beta), grid)
        optimism.append(cal_train - cal_test)

    if not optimism:
        raise ValueError("校准 Bootstrap 全部失败")
    corrected = np.clip(apparent - np.mean(optimism, axis=0), 0, 1)
    table = pd.DataFrame({'predicted': grid, 'apparent': apparent, 'bias_corrected': corrected})
    return CalibrationResult(table, B, len(optimism), len(fit.y))
