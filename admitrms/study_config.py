"""
研究设计配置：研究生录取 Logistic 回归教学流程
- 结局：admit（0/1，是否录取）
- 预测变量：gre（GRE 成绩）、gpa（本科 GPA）、rank（院校声望等级，1 最高）
- 数据：UCLA OARC 公开数据 binary.csv（400 例）
- 缺失值为人为注入，仅用于演示缺失数据模式与整例删除
"""
import os

DATA_URL = os.environ.get("ADMIT_DATA_URL", "https://stats.oarc.ucla.edu/stat/data/binary.csv")

OUTCOME = 'admit'
PREDICTORS = ['gre', 'gpa', 'rank']
CONTINUOUS = ['gre', 'gpa']
CATEGORICAL = ['rank']
RANK_LEVELS = [1, 2, 3, 4]

# 人为注入缺失：每列置空的观测数（结局列不注入）
MISSING_SEED = 1234
MISSING_COUNTS = {
    'gre': 20,
    'gpa': 15,
    'rank': 10,
}

# 样条节点数与模型公式（rcs 为 patsy 状态变换，见 splines.py）
RCS_KNOTS = 3
MODEL_FORMULA = f"{OUTCOME} ~ rcs(gre, {RCS_KNOTS}) + rcs(gpa, {RCS_KNOTS}) + rank"

# Bootstrap 设置（环境变量可覆盖，便于快速试跑）
N_BOOT = int(os.environ.get("ADMIT_N_BOOT", 500))
N_VALIDATE = int(os.environ.get("ADMIT_N_VALIDATE", 200))
BOOT_SEED = 42
CONF_LEVEL = 0.95

# 预测曲线：横轴变量与分层变量
CURVE_VAR = 'gre'
CURVE_BY = 'rank'

OUTCOME_LABEL = 'Admission'
