"""
07_odds_ratio_forest: 效应汇总（IQR / 分类水平对比）与 OR 森林图

优先使用 Step 05 的 Bootstrap 协方差模型
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.deploy_utils import load_preferred_bundle
from admitrms.effects import summarize_effects, format_effects, odds_ratio_frame
from admitrms.feature_formatter import FeatureFormatter
from admitrms.logger import log as _log, log_block, log_header
from admitrms.paths import get_main_table_dir, get_main_figure_dir, ensure_dirs
from admitrms.plots import plot_forest_or


def main():
    log_header("🚀 07_odds_ratio_forest: OR 汇总与森林图")
    bundle, name = load_preferred_bundle()
    fit, dd = bundle['fit'], bundle['datadist']
    _log(f"模型: {name}（协方差来源: {fit.cov_source}）", "INFO")
    table_dir, fig_dir = get_main_table_dir(), get_main_figure_dir()
    ensure_dirs(table_dir, fig_dir)

    effects = summarize_effects(fit, dd)
    log_block(format_effects(effects))
    effects.to_csv(os.path.join(table_dir, "effects_summary.csv"), index=False)

    formatter = FeatureFormatter()
    or_df = odds_ratio_frame(effects)
    or_df['display_name'] = or_df['Variable'].map(formatter.get_label)
    or_df.to_csv(os.path.join(table_dir, "odds_ratios.csv"), index=False)
    or_df.to_json(os.path.join(table_dir, "odds_ratios.json"), orient='records', indent=4)

    for lang in ('en', 'cn'):
        path = plot_forest_or(effects, os.path.join(fig_dir, f"forest_or_{lang}"),
                              formatter=FeatureFormatter(lang), lang=lang)
        _log(f"Forest Plot ({lang}): {path}", "OK")
    _log("07 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 07 失败: {e}", "ERR")
        sys.exit(1)
