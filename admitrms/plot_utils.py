"""绘图工具：OR 文本与误差条、坐标范围"""
import numpy as np
import pandas as pd


class PlotUtils:
    """森林图辅助：OR 文本、误差条与坐标范围"""

    def __init__(self, formatter, lang='en'):
        self.formatter = formatter
        self.lang = lang

    @staticmethod
    def format_or_ci(or_val, lower, upper):
        """格式化 OR (95% CI) 文本"""
        return f"{or_val:.2f} ({lower:.2f}–{upper:.2f})"

    @staticmethod
    def compute_or_error(or_df):
        """OR 误差条，确保非负以满足 matplotlib xerr 要求"""
        left_err = np.maximum(0, or_df['OR'] - or_df['OR_Lower'])
        right_err = np.maximum(0, or_df['OR_Upper'] - or_df['OR'])
        return left_err.values, right_err.values

    @staticmethod
    def compute_or_xlim(or_df):
        """OR 森林图 x 轴范围（对数尺度，两侧留 15% 边距，始终包含 OR=1）"""
        vals = pd.concat([or_df['OR_Lower'], or_df['OR_Upper'], pd.Series([1.0])])
        vmin, vmax = max(vals.min(), 0.01), vals.max()
        margin = (np.log10(vmax) - np.log10(vmin)) * 0.15
        return 10 ** (np.log10(vmin) - margin), 10 ** (np.log10(vmax) + margin)
