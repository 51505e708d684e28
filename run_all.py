#!/usr/bin/env python3
"""
一键运行全流程

执行顺序：
  01 读取与缺失注入 → 02 描述统计与 Table 1 → 03 缺失模式 → 04 lrm 拟合与 ANOVA
  → 05 Bootstrap 协方差 → 06 验证与校准 → 07 OR 森林图 → 08 预测概率曲线 → 09 列线图

前置条件：
  - data/raw/binary.csv 存在，或可访问 ADMIT_DATA_URL（Step 01 自动下载并缓存）

用法：
  python run_all.py                      # 全流程，遇错即停
  python run_all.py --quick              # 少量重抽样（ADMIT_N_BOOT=50, ADMIT_N_VALIDATE=40）
  python run_all.py --skip-validate      # 跳过 Step 06（最耗时）
  python run_all.py --only 04 07         # 仅运行指定步骤
  python run_all.py --continue-on-error  # 遇错继续执行后续步骤
"""
import argparse
import os
import subprocess
import sys

# 项目根目录
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
os.chdir(PROJECT_ROOT)

QUICK_ENV = {"ADMIT_N_BOOT": "50", "ADMIT_N_VALIDATE": "40"}

# 步骤定义：(工作目录, 脚本, 描述)
_STEP_DEFS = {
    "01": ("scripts/preprocess", "01_load_and_inject.py", "数据读取与缺失注入"),
    "02": ("scripts/audit_eval", "02_describe_table1.py", "描述统计与 Table 1"),
    "03": ("scripts/audit_eval", "03_missing_patterns.py", "缺失数据模式"),
    "04": ("scripts/modeling", "04_fit_lrm.py", "lrm 拟合与 ANOVA"),
    "05": ("scripts/modeling", "05_bootstrap_covariance.py", "Bootstrap 协方差"),
    "06": ("scripts/modeling", "06_validate_calibrate.py", "内部验证与校准"),
    "07": ("scripts/audit_eval", "07_odds_ratio_forest.py", "OR 汇总与森林图"),
    "08": ("scripts/audit_eval", "08_predicted_curves.py", "预测概率曲线"),
    "09": ("scripts/audit_eval", "09_nomogram.py", "列线图"),
}
ALL_STEPS = list(_STEP_DEFS)


def _build_steps(step_ids: list[str]) -> list[tuple[str, str, str, str]]:
    """按指定顺序构建步骤列表"""
    return [(sid, *_STEP_DEFS[sid]) for sid in step_ids if sid in _STEP_DEFS]


def check_prereq(step_id: str) -> tuple[bool, str]:
    """检查前置文件是否存在（01 可联网下载，不检查）"""
    cleaned = os.path.join(PROJECT_ROOT, "data/cleaned/admissions_with_missing.csv")
    fit_bundle = os.path.join(PROJECT_ROOT, "artifacts/models/lrm_fit.joblib")
    if step_id in {"02", "03", "04"} and not os.path.exists(cleaned):
        return False, f"缺少 {cleaned}，请先运行 Step 01"
    if step_id in {"05", "06", "07", "08", "09"} and not os.path.exists(fit_bundle):
        return False, f"缺少 {fit_bundle}，请先运行 Step 04"
    return True, ""


def run_step(step_id: str, workdir: str, script: str, desc: str, env: dict) -> bool:
    """执行单步，返回是否成功"""
    ok, msg = check_prereq(step_id)
    if not ok:
        print(f"\n[错误] Step {step_id}: {msg}")
        return False
    abs_workdir = os.path.join(PROJECT_ROOT, workdir)
    abs_script = os.path.join(abs_workdir, script)
    if not os.path.exists(abs_script):
        print(f"\n[错误] Step {step_id}: 脚本不存在 {abs_script}")
        return False
    print(f"\n{'='*60}")
    print(f"Step {step_id}: {desc}")
    print(f"  {workdir} / {script}")
    print("="*60)
    ret = subprocess.run([sys.executable, script], cwd=abs_workdir, env=env)
    return ret.returncode == 0


def main():
    parser = argparse.ArgumentParser(description="一键运行全流程")
    parser.add_argument("--skip-validate", action="store_true", help="跳过 Step 06（Bootstrap 验证与校准）")
    parser.add_argument("--quick", action="store_true", help="少量重抽样，快速检查流程")
    parser.add_argument("--only", nargs="+", choices=ALL_STEPS, metavar="STEP", help="仅运行指定步骤")
    parser.add_argument("--continue-on-error", action="store_true", help="遇错继续执行后续步骤")
    args = parser.parse_args()

    step_ids = [s for s in ALL_STEPS if s in args.only] if args.only else list(ALL_STEPS)
    if args.skip_validate and "06" in step_ids:
        step_ids.remove("06")
    steps_to_run = _build_steps(step_ids)

    env = {**os.environ, "PYTHONUNBUFFERED": "1", "MPLBACKEND": os.environ.get("MPLBACKEND", "Agg")}
    if args.quick:
        env.update(QUICK_ENV)

    print("\n" + "="*60)
    print("研究生录取 Logistic 回归：全流程运行")
    print("="*60)
    print(f"将执行 {len(steps_to_run)} 步: {', '.join(s[0] for s in steps_to_run)}")
    if args.quick:
        print(f"快速模式: {QUICK_ENV}")

    failed = []
    for step_id, workdir, script, desc in steps_to_run:
        if not run_step(step_id, workdir, script, desc, env):
            failed.append(step_id)
            if not args.continue_on_error:
                print(f"\n[中止] Step {step_id} 失败")
                sys.exit(1)

    print("\n" + "="*60)
    if failed:
        print(f"完成，但以下步骤失败: {', '.join(failed)}")
        sys.exit(1)
    print("全部步骤完成")
    print("="*60)


if __name__ == "__main__":
    main()
