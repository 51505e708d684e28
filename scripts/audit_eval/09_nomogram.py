"""
09_nomogram: 列线图（Points / 各变量 / Total Points / 录取概率）
"""
import os
import sys

import pandas as pd

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.deploy_utils import load_preferred_bundle
from admitrms.feature_formatter import FeatureFormatter
from admitrms.logger import log as _log, log_header
from admitrms.nomogram import nomogram_axes
from admitrms.paths import get_supplementary_figure_dir, get_supplementary_table_dir, ensure_dirs
from admitrms.plots import plot_nomogram


def main():
    log_header("🚀 09_nomogram: 列线图")
    bundle, _ = load_preferred_bundle()
    fit, dd = bundle['fit'], bundle['datadist']
    fig_dir = get_supplementary_figure_dir("nomogram")
    table_dir = get_supplementary_table_dir()
    ensure_dirs(fig_dir, table_dir)

    axes = nomogram_axes(fit, dd)
    points = pd.concat(
        [tab.assign(variable=var) for var, tab in axes.variables.items()], ignore_index=True
    )[['variable', 'value', 'points']]
    points.to_csv(os.path.join(table_dir, "nomogram_points.csv"), index=False)
    _log(f"总分范围 0–{axes.total_max:.1f}；每分对应线性预测 {axes.scale:.4f}", "INFO")

    for lang in ('en', 'cn'):
        path = plot_nomogram(axes, os.path.join(fig_dir, f"nomogram_{lang}"),
                             formatter=FeatureFormatter(lang), lang=lang)
        _log(f"Nomogram ({lang}): {path}", "OK")
    _log("09 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 09 失败: {e}", "ERR")
        sys.exit(1)
