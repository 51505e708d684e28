"""测试公共夹具：合成录取数据（无需联网）、输出目录与日志重定向到 tmp_path"""
import os
import sys

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from scipy.special import expit

ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from admitrms.data_loader import inject_missing, coerce_types
from admitrms.datadist import datadist
from admitrms.lrm import fit_lrm

RANK_EFFECT = np.array([0.0, -0.68, -1.34, -1.55])


def make_admissions(n=400, seed=2024):
    """与 UCLA binary.csv 结构一致的模拟数据：gre 为 20 的倍数，gpa 两位小数，rank 1–4"""
    rng = np.random.default_rng(seed)
    gre = np.clip(np.round(rng.normal(590, 115, n) / 20) * 20, 220, 800)
    gpa = np.clip(np.round(rng.normal(3.39, 0.38, n), 2), 2.26, 4.0)
    rank = rng.choice([1, 2, 3, 4], size=n, p=[0.15, 0.38, 0.30, 0.17])
    lp = -3.4 + 0.0023 * gre + 0.8 * gpa + RANK_EFFECT[rank - 1]
    admit = rng.binomial(1, expit(lp))
    return pd.DataFrame({'admit': admit, 'gre': gre, 'gpa': gpa, 'rank': rank})


@pytest.fixture(autouse=True)
def isolated_outputs(tmp_path, monkeypatch):
    monkeypatch.setenv("ADMIT_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("ADMIT_LOG_FILE", str(tmp_path / "logs" / "test.log"))
    return tmp_path


@pytest.fixture
def raw_admissions():
    return make_admissions()


@pytest.fixture
def admissions(raw_admissions):
    return coerce_types(inject_missing(raw_admissions, counts={'gre': 20, 'gpa': 15, 'rank': 10}, seed=1234))


@pytest.fixture
def fit(admissions):
    return fit_lrm(admissions)


@pytest.fixture
def dd(fit):
    return datadist(fit.data, fit.predictors)
