"""
08_predicted_curves: 预测概率曲线（Predict）

gre 按 rank 分层、gpa 单独、rank 点估计；其余变量固定于调整值
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.deploy_utils import load_preferred_bundle
from admitrms.logger import log as _log, log_header
from admitrms.paths import get_main_figure_dir, get_supplementary_table_dir, ensure_dirs
from admitrms.plots import plot_predicted_curves
from admitrms.predict import predict_grid
from admitrms.study_config import CURVE_VAR, CURVE_BY, PREDICTORS


def main():
    log_header("🚀 08_predicted_curves: 预测概率曲线")
    bundle, name = load_preferred_bundle()
    fit, dd = bundle['fit'], bundle['datadist']
    band = "Bootstrap 百分位" if fit.boot_coef is not None else "Wald"
    _log(f"模型: {name}；置信带: {band}", "INFO")
    fig_dir, table_dir = get_main_figure_dir(), get_supplementary_table_dir()
    ensure_dirs(fig_dir, table_dir)

    specs = [(CURVE_VAR, CURVE_BY)] + [(v, None) for v in PREDICTORS if v != CURVE_VAR]
    for var, by in specs:
        curve = predict_grid(fit, dd, var, by=by)
        tag = f"{var}_by_{by}" if by else var
        curve.to_csv(os.path.join(table_dir, f"predicted_{tag}.csv"), index=False)
        path = plot_predicted_curves(curve, var, os.path.join(fig_dir, f"predicted_{tag}"), by=by)
        _log(f"Predicted probability ({tag}): {path}", "OK")
    _log("08 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 08 失败: {e}", "ERR")
        sys.exit(1)
