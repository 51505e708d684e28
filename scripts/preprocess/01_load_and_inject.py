"""
01_load_and_inject: 读取录取数据并人为注入缺失值

输入：data/raw/binary.csv（不存在时从 DATA_URL 下载并缓存）
输出：data/cleaned/admissions_with_missing.csv
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.data_loader import load_admissions, inject_missing, coerce_types, save_cleaned
from admitrms.logger import log as _log, log_header
from admitrms.study_config import MISSING_COUNTS, MISSING_SEED, OUTCOME


def main():
    log_header("🚀 01_load_and_inject: 数据读取与缺失注入")
    raw = load_admissions()
    _log(f"原始数据: {raw.shape[0]} 行 × {raw.shape[1]} 列", "INFO")
    if raw.isna().any().any():
        _log(f"原始数据已含缺失: {raw.isna().sum().to_dict()}", "WARN")

    df = coerce_types(inject_missing(raw, counts=MISSING_COUNTS, seed=MISSING_SEED))
    _log(f"注入缺失 (seed={MISSING_SEED}): {MISSING_COUNTS}", "INFO")
    _log(f"各列缺失数: {df.isna().sum().to_dict()}", "INFO")
    _log(f"完整病例: {len(df.dropna())} / {len(df)}", "INFO")
    _log(f"{OUTCOME}=1 比例: {df[OUTCOME].mean():.3f}", "INFO")

    path = save_cleaned(df)
    _log(f"分析数据已保存: {os.path.abspath(path)}", "OK")
    _log("01 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, OSError) as e:
        _log(f"Step 01 失败: {e}", "ERR")
        sys.exit(1)
