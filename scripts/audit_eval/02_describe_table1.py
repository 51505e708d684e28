"""
02_describe_table1: 描述统计（Hmisc::describe 风格）与 Table 1 基线表

输出：
  results/supplementary/tables/describe.txt、describe_summary.csv
  results/main/tables/Table1_baseline.csv
"""
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))
from admitrms.data_loader import load_cleaned
from admitrms.describe import describe, format_describe, build_table1
from admitrms.logger import log as _log, log_block, log_header
from admitrms.paths import get_main_table_dir, get_supplementary_table_dir, ensure_dirs


def main():
    log_header("🚀 02_describe_table1: 描述统计与基线表")
    df = load_cleaned()
    supp_dir = get_supplementary_table_dir()
    main_dir = get_main_table_dir()
    ensure_dirs(supp_dir, main_dir)

    desc, summary = describe(df)
    report = format_describe(desc, len(df), title="admissions")
    log_block(report)
    txt_path = os.path.join(supp_dir, "describe.txt")
    with open(txt_path, "w", encoding="utf-8") as f:
        f.write(report + "\n")
    summary.to_csv(os.path.join(supp_dir, "describe_summary.csv"), index=False)
    _log(f"描述统计: {os.path.abspath(txt_path)}", "OK")

    table1 = build_table1(df)
    t1_path = os.path.join(main_dir, "Table1_baseline.csv")
    table1.to_csv(t1_path)
    log_block(table1.tableone.to_string())
    _log(f"Table 1 已保存: {os.path.abspath(t1_path)}", "OK")
    _log("02 步完成！", "OK")


if __name__ == "__main__":
    try:
        main()
    except (ValueError, FileNotFoundError, OSError) as e:
        _log(f"Step 02 失败: {e}", "ERR")
        sys.exit(1)
