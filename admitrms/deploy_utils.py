"""模型资产读写：拟合结果 + datadist 打包为 joblib（04、05 写入；07–09 与 app 读取）"""
import os
import joblib

from .paths import get_model_path, ensure_dirs

FIT_BUNDLE = "lrm_fit"
BOOT_BUNDLE = "lrm_bootcov"


def save_fit_bundle(fit, dd, name=FIT_BUNDLE, **extra):
    """保存 {'fit', 'datadist', ...}，返回文件路径"""
    path = get_model_path(name)
    ensure_dirs(os.path.dirname(path))
    joblib.dump({'fit': fit, 'datadist': dd, **extra}, path)
    return path


def load_fit_bundle(name=FIT_BUNDLE):
    """读取模型资产；文件不存在时返回 None"""
    path = get_model_path(name)
    if not os.path.exists(path):
        return None
    bundle = joblib.load(path)
    if 'fit' not in bundle or 'datadist' not in bundle:
        raise ValueError(f"模型资产不完整: {path}")
    return bundle


def load_preferred_bundle():
    """
    优先使用 Bootstrap 协方差版本（05 产出），否则退回 MLE 版本（04 产出）

    Returns
    -------
    (bundle, name)；两者都不存在时抛出 FileNotFoundError
    """
    for name in (BOOT_BUNDLE, FIT_BUNDLE):
        bundle = load_fit_bundle(name)
        if bundle is not None:
            return bundle, name
    raise FileNotFoundError(f"未找到模型资产 {get_model_path(FIT_BUNDLE)}，请先运行 Step 04")
