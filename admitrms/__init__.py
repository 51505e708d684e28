# 研究生录取 Logistic 回归：样条、Bootstrap、验证与诊断图
from .study_config import (
    OUTCOME, PREDICTORS, CONTINUOUS, CATEGORICAL, MODEL_FORMULA,
    N_BOOT, N_VALIDATE, BOOT_SEED, CONF_LEVEL,
)
from .feature_formatter import FeatureFormatter
from .logger import log as log_msg, log_block, log_header
from .paths import (
    get_project_root, get_raw_path, get_cleaned_path, get_model_path, ensure_dirs,
    get_main_table_dir, get_main_figure_dir,
    get_supplementary_table_dir, get_supplementary_figure_dir,
)
from .data_loader import load_admissions, inject_missing, coerce_types, prepare_dataset, load_cleaned, save_cleaned
from .deploy_utils import save_fit_bundle, load_fit_bundle, load_preferred_bundle
from .datadist import datadist, DataDist
from .lrm import LrmFit, fit_lrm, format_lrm
from .anova import wald_anova, format_anova
from .effects import summarize_effects, format_effects, odds_ratio_frame
from .predict import predict_grid, predict_one
from .bootstrap import bootcov, BootstrapResult
from .validation import validate, calibrate, CalibrationResult
from .nomogram import nomogram_axes, NomogramAxes

__version__ = "0.1.0"

__all__ = [
    'OUTCOME', 'PREDICTORS', 'CONTINUOUS', 'CATEGORICAL', 'MODEL_FORMULA',
    'N_BOOT', 'N_VALIDATE', 'BOOT_SEED', 'CONF_LEVEL',
    'FeatureFormatter', 'log_msg', 'log_block', 'log_header',
    'get_project_root', 'get_raw_path', 'get_cleaned_path', 'get_model_path', 'ensure_dirs',
    'get_main_table_dir', 'get_main_figure_dir',
    'get_supplementary_table_dir', 'get_supplementary_figure_dir',
    'load_admissions', 'inject_missing', 'coerce_types', 'prepare_dataset', 'load_cleaned', 'save_cleaned',
    'save_fit_bundle', 'load_fit_bundle', 'load_preferred_bundle',
    'datadist', 'DataDist', 'LrmFit', 'fit_lrm', 'format_lrm',
    'wald_anova', 'format_anova', 'summarize_effects', 'format_effects', 'odds_ratio_frame',
    'predict_grid', 'predict_one', 'bootcov', 'BootstrapResult',
    'validate', 'calibrate', 'CalibrationResult', 'nomogram_axes', 'NomogramAxes',
]
