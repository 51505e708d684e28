"""
03_missing_patterns: 缺失数据模式（naplot / naclus）

输出：results/supplementary/tables/missing_*.csv，results/supplementary/figures/missing/*
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.data_loader import load_cleaned
from admitrms.logger import log as _log, log_header
from admitrms.missingness import missing_summary, na_per_observation, mean_other_missing, na_patterns, naclus
from admitrms.paths import get_supplementary_table_dir, get_supplementary_figure_dir, ensure_dirs
from admitrms.plots import (
    plot_missing_fraction, plot_na_per_observation, plot_mean_other_missing,
    plot_missing_heatmap, plot_naclus,
)
from admitrms.study_config import OUTCOME, PREDICTORS


def main():
    log_header("🚀 03_missing_patterns: 缺失数据模式")
    df = load_cleaned()[[OUTCOME] + PREDICTORS]
    table_dir = get_supplementary_table_dir()
    fig_dir = get_supplementary_figure_dir("missing")
    ensure_dirs(table_dir, fig_dir)

    frac = missing_summary(df)
    per_obs = na_per_observation(df)
    other = mean_other_missing(df)
    patterns = na_patterns(df)
    frac.rename('fraction_missing').to_csv(os.path.join(table_dir, "missing_fraction.csv"))
    per_obs.rename('observations').to_csv(os.path.join(table_dir, "missing_per_observation.csv"))
    patterns.to_csv(os.path.join(table_dir, "missing_patterns.csv"), index=False)

    for var, v in frac.items():
        _log(f"{var:<8} 缺失比例 {v:.3f}", "INFO")
    _log(f"缺失组合数: {len(patterns)}；最常见模式频数 {int(patterns['count'].iloc[0])}", "INFO")

    plot_missing_fraction(frac, os.path.join(fig_dir, "naplot_fraction"))
    plot_na_per_observation(per_obs, os.path.join(fig_dir, "naplot_per_observation"))
    plot_mean_other_missing(other, os.path.join(fig_dir, "naplot_mean_other"))
    plot_missing_heatmap(df, os.path.join(fig_dir, "missing_heatmap"))

    nc = naclus(df)
    nc.similarity.to_csv(os.path.join(table_dir, "naclus_similarity.csv"))
    plot_naclus(nc, os.path.join(fig_dir, "naclus_dendrogram"))
    _log(f"缺失模式图: {os.path.abspath(fig_dir)}", "OK")
    _log("03 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 03 失败: {e}", "ERR")
        sys.exit(1)
