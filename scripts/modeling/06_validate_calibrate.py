"""
06_validate_calibrate: Bootstrap 乐观度校正验证（validate）与校准曲线（calibrate）

输出：results/main/tables/validation_indexes.csv，results/supplementary/tables/calibration_curve.csv，
      results/main/figures/calibration_bootstrap.{pdf,png}
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.deploy_utils import load_fit_bundle
from admitrms.logger import log as _log, log_block, log_header
from admitrms.paths import (
    get_main_table_dir, get_main_figure_dir, get_supplementary_table_dir, get_model_path, ensure_dirs,
)
from admitrms.plots import plot_calibration
from admitrms.study_config import N_VALIDATE, BOOT_SEED
from admitrms.validation import validate, calibrate


def main():
    log_header("🚀 06_validate_calibrate: 内部验证与校准")
    bundle = load_fit_bundle()
    if bundle is None:
        raise FileNotFoundError(f"未找到 {get_model_path()}，请先运行 Step 04")
    fit = bundle['fit']
    main_dir, fig_dir, supp_dir = get_main_table_dir(), get_main_figure_dir(), get_supplementary_table_dir()
    ensure_dirs(main_dir, fig_dir, supp_dir)

    val = validate(fit, B=N_VALIDATE, seed=BOOT_SEED)
    val.to_csv(os.path.join(main_dir, "validation_indexes.csv"), index_label="index")
    log_block(val.to_string(float_format=lambda v: f"{v:.4f}"))
    dxy = val.loc['Dxy']
    _log(f"Dxy: 表观 {dxy['index.orig']:.3f} → 校正 {dxy['index.corrected']:.3f}；"
         f"校正斜率 {val.loc['Slope', 'index.corrected']:.3f}", "INFO")

    cal = calibrate(fit, B=N_VALIDATE, seed=BOOT_SEED)
    cal.table.to_csv(os.path.join(supp_dir, "calibration_curve.csv"), index=False)
    _log(cal.summary(), "INFO")
    path = plot_calibration(cal, os.path.join(fig_dir, "calibration_bootstrap"))
    _log(f"校准曲线: {path}", "OK")
    _log("06 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 06 失败: {e}", "ERR")
        sys.exit(1)
