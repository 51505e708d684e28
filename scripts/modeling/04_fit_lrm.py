"""
04_fit_lrm: 完整病例 Logistic 回归（gre、gpa 三节点限制性立方样条 + rank 分类）

输出：
  artifacts/models/lrm_fit.joblib（fit + datadist）
  results/main/tables/lrm_coefficients.csv、lrm_anova.csv
  results/supplementary/tables/lrm_report.txt、datadist.csv
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.anova import wald_anova, format_anova
from admitrms.data_loader import load_cleaned
from admitrms.datadist import datadist
from admitrms.deploy_utils import save_fit_bundle
from admitrms.logger import log as _log, log_block, log_header
from admitrms.lrm import fit_lrm, format_lrm
from admitrms.paths import get_main_table_dir, get_supplementary_table_dir, ensure_dirs
from admitrms.splines import default_knots
from admitrms.study_config import MODEL_FORMULA, CONTINUOUS, RCS_KNOTS


def main():
    log_header("🚀 04_fit_lrm: Logistic 回归（限制性立方样条）")
    df = load_cleaned()
    main_dir = get_main_table_dir()
    supp_dir = get_supplementary_table_dir()
    ensure_dirs(main_dir, supp_dir)

    fit = fit_lrm(df, MODEL_FORMULA)
    dd = datadist(fit.data, fit.predictors)
    for var in CONTINUOUS:
        knots = default_knots(fit.data[var].values, RCS_KNOTS)
        _log(f"{var} 节点: {', '.join(f'{k:g}' for k in knots)}", "INFO")

    report = format_lrm(fit)
    anova = wald_anova(fit)
    anova_txt = format_anova(anova)
    log_block(report)
    log_block(anova_txt)
    with open(os.path.join(supp_dir, "lrm_report.txt"), "w", encoding="utf-8") as f:
        f.write(report + "\n\n" + anova_txt + "\n")
    fit.coef_table().to_csv(os.path.join(main_dir, "lrm_coefficients.csv"), index=False)
    anova.to_csv(os.path.join(main_dir, "lrm_anova.csv"), index=False)
    dd.to_frame().to_csv(os.path.join(supp_dir, "datadist.csv"))

    if fit.stats['max |deriv|'] > 1e-4:
        _log(f"max |deriv| = {fit.stats['max |deriv|']:.2e}，收敛可能不充分", "WARN")

    path = save_fit_bundle(fit, dd)
    _log(f"模型已保存: {os.path.abspath(path)}", "OK")
    _log("04 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 04 失败: {e}", "ERR")
        sys.exit(1)
