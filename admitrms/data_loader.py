"""数据加载、人为注入缺失值与类型转换"""
import os

import numpy as np
import pandas as pd

from .study_config import DATA_URL, OUTCOME, PREDICTORS, RANK_LEVELS, MISSING_COUNTS, MISSING_SEED
from .paths import get_raw_path, get_cleaned_path, ensure_dirs
from .logger import log as _log

REQUIRED_COLUMNS = [OUTCOME] + PREDICTORS


def load_admissions(path=None, url=DATA_URL, cache=True) -> pd.DataFrame:
    """
    读取录取数据：本地文件存在则直接读取，否则从 url 下载（cache=True 时写入 data/raw/）
    """
    path = path or get_raw_path("binary")
    if os.path.exists(path):
        df = pd.read_csv(path)
        _log(f"读取本地数据: {os.path.abspath(path)}", "INFO")
    else:
        _log(f"本地数据不存在，下载: {url}", "INFO")
        df = pd.read_csv(url)
        if cache:
            ensure_dirs(os.path.dirname(path))
            df.to_csv(path, index=False)
            _log(f"已缓存: {os.path.abspath(path)}", "OK")

    missing_cols = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing_cols:
        raise ValueError(f"数据缺少必需列: {', '.join(missing_cols)}")
    return df[REQUIRED_COLUMNS].copy()


def inject_missing(df: pd.DataFrame, counts=None, seed=MISSING_SEED) -> pd.DataFrame:
    """
    对每列随机置空 counts[col] 个互不相同的观测（仅用于演示）。
    同一 seed 得到完全相同的缺失模式；结局列不允许注入。
    """
    counts = MISSING_COUNTS if counts is None else counts
    rng = np.random.default_rng(seed)
    out = df.copy()
    for col, n_missing in counts.items():
        if col == OUTCOME:
            raise ValueError(f"结局变量 {OUTCOME} 不能注入缺失")
        if col not in out.columns:
            raise ValueError(f"列不存在: {col}")
        if n_missing < 0 or n_missing > len(out):
            raise ValueError(f"{col}: 缺失数 {n_missing} 超出范围 [0, {len(out)}]")
        rows = rng.choice(len(out), size=n_missing, replace=False)
        if pd.api.types.is_integer_dtype(out[col]):
            out[col] = out[col].astype(float)
        out.iloc[rows, out.columns.get_loc(col)] = np.nan
    return out


def coerce_types(df: pd.DataFrame) -> pd.DataFrame:
    """
    类型转换：admit → 可空整数 0/1；gre/gpa → float；rank → 有序分类（1 < 2 < 3 < 4）
    """
    out = df.copy()

    admit = pd.to_numeric(out[OUTCOME], errors='coerce')
    bad = admit.notna() & ~admit.isin([0, 1])
    if bad.any() or (admit.isna() & out[OUTCOME].notna()).any():
        raise ValueError(f"{OUTCOME} 只能取 0/1")
    out[OUTCOME] = admit.astype('Int64')

    for col in ('gre', 'gpa'):
        if col in out.columns:
            out[col] = pd.to_numeric(out[col], errors='raise').astype(float)

    if 'rank' in out.columns:
        rank = pd.to_numeric(out['rank'], errors='coerce')
        bad = rank.notna() & ~rank.isin(RANK_LEVELS)
        if bad.any():
            raise ValueError(f"rank 取值超出 {RANK_LEVELS}: {sorted(rank[bad].unique().tolist())}")
        out['rank'] = pd.Categorical(rank.astype('Int64'), categories=RANK_LEVELS, ordered=True)

    return out


def prepare_dataset(path=None, counts=None, seed=MISSING_SEED) -> pd.DataFrame:
    """完整数据准备：加载 → 注入缺失 → 类型转换"""
    df = load_admissions(path)
    df = inject_missing(df, counts=counts, seed=seed)
    return coerce_types(df)


CLEANED_FILE = "admissions_with_missing.csv"


def save_cleaned(df: pd.DataFrame, path=None) -> str:
    path = path or get_cleaned_path(CLEANED_FILE)
    ensure_dirs(os.path.dirname(path))
    df.to_csv(path, index=False)
    return path


def load_cleaned(path=None) -> pd.DataFrame:
    """读取 Step 01 产出的分析数据并恢复类型（CSV 不保存分类信息）"""
    path = path or get_cleaned_path(CLEANED_FILE)
    if not os.path.exists(path):
        raise FileNotFoundError(f"分析数据不存在: {path}，请先运行 Step 01")
    return coerce_types(pd.read_csv(path))
