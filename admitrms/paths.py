"""项目路径配置：统一管理数据、模型、结果目录

产出结构：
  data/raw/              下载的原始数据 binary.csv
  data/cleaned/          注入缺失、类型转换后的分析数据
  artifacts/models/      拟合模型（joblib）
  results/main/          主文表格 / 插图（描述统计、OR、预测曲线）
  results/supplementary/ 补充材料（缺失模式、校准、列线图等）
"""
import os

# 项目根目录（admitrms 的上级）
_PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


def get_project_root() -> str:
    """返回项目根目录；可通过环境变量 ADMIT_PROJECT_ROOT 重定向全部产出"""
    return os.environ.get("ADMIT_PROJECT_ROOT", _PROJECT_ROOT)


def get_raw_path(name: str = "binary") -> str:
    """data/raw/ 下原始数据路径"""
    return os.path.join(get_project_root(), "data", "raw", f"{name}.csv")


def get_cleaned_path(name: str) -> str:
    """data/cleaned/ 下分析数据路径"""
    return os.path.join(get_project_root(), "data", "cleaned", name)


def get_model_dir() -> str:
    """artifacts/models/"""
    return os.path.join(get_project_root(), "artifacts", "models")


def get_model_path(name: str = "lrm_fit") -> str:
    """artifacts/models/{name}.joblib"""
    return os.path.join(get_model_dir(), f"{name}.joblib")


def get_main_table_dir() -> str:
    """主文表格目录 results/main/tables/"""
    return os.path.join(get_project_root(), "results", "main", "tables")


def get_main_figure_dir() -> str:
    """主文插图目录 results/main/figures/"""
    return os.path.join(get_project_root(), "results", "main", "figures")


def get_supplementary_table_dir() -> str:
    """补充材料表格目录 results/supplementary/tables/"""
    return os.path.join(get_project_root(), "results", "supplementary", "tables")


def get_supplementary_figure_dir(*subdirs: str) -> str:
    """补充材料插图目录 results/supplementary/figures/ 或带子目录"""
    base = os.path.join(get_project_root(), "results", "supplementary", "figures")
    return os.path.join(base, *subdirs) if subdirs else base


def get_log_file() -> str:
    """运行日志文件路径，默认 logs/run.log（可通过环境变量 ADMIT_LOG_FILE 覆盖）"""
    return os.environ.get("ADMIT_LOG_FILE", os.path.join(get_project_root(), "logs", "run.log"))


def ensure_dirs(*paths: str) -> None:
    """确保目录存在"""
    for p in paths:
        os.makedirs(p, exist_ok=True)
