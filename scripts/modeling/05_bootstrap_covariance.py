"""
05_bootstrap_covariance: Bootstrap 协方差（bootcov）与系数百分位置信区间

输入：artifacts/models/lrm_fit.joblib
输出：artifacts/models/lrm_bootcov.joblib，results/main/tables/bootcov_coefficients.csv、bootcov_anova.csv
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.anova import wald_anova, format_anova
from admitrms.bootstrap import bootcov
from admitrms.deploy_utils import load_fit_bundle, save_fit_bundle, BOOT_BUNDLE
from admitrms.logger import log as _log, log_block, log_header
from admitrms.lrm import format_lrm
from admitrms.paths import get_main_table_dir, get_model_path, ensure_dirs
from admitrms.study_config import N_BOOT, BOOT_SEED


def main():
    log_header("🚀 05_bootstrap_covariance: Bootstrap 协方差")
    bundle = load_fit_bundle()
    if bundle is None:
        raise FileNotFoundError(f"未找到 {get_model_path()}，请先运行 Step 04")
    fit, dd = bundle['fit'], bundle['datadist']

    boot = bootcov(fit, B=N_BOOT, seed=BOOT_SEED)
    _log(f"成功重拟合 {boot.n_success}/{boot.n_requested}（失败 {boot.n_failed}）", "INFO")

    main_dir = get_main_table_dir()
    ensure_dirs(main_dir)
    ci = boot.coef_ci()
    ci.to_csv(os.path.join(main_dir, "bootcov_coefficients.csv"), index=False)
    log_block(ci.to_string(index=False, float_format=lambda v: f"{v:.4f}"))

    anova = wald_anova(boot.fit)
    anova.to_csv(os.path.join(main_dir, "bootcov_anova.csv"), index=False)
    log_block(format_lrm(boot.fit))
    log_block(format_anova(anova, title="Wald Statistics (bootstrap covariance)"))

    path = save_fit_bundle(boot.fit, dd, name=BOOT_BUNDLE, coef_ci=ci, n_failed=boot.n_failed)
    _log(f"Bootstrap 模型已保存: {os.path.abspath(path)}", "OK")
    _log("05 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 05 失败: {e}", "ERR")
        sys.exit(1)
