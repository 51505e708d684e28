"""录取模型图表配置：PDF + PNG 双格式，Arial/DejaVu 字体，色盲友好配色
尺寸按期刊双栏 7.2in 设计；中文图需系统提供 CJK 字体，缺失时 matplotlib 以方框代替"""
import os
import matplotlib.pyplot as plt
import seaborn as sns

FIG_DPI = 300
SAVE_DPI = 600
FIG_WIDTH_SINGLE = 3.5
FIG_WIDTH_DOUBLE = 7.2

FONT_SANS = ['Arial', 'Helvetica', 'DejaVu Sans', 'Noto Sans CJK SC', 'SimHei']
LABEL_FONT = 11
TICK_FONT = 10
TITLE_FONT = 12

# 分层曲线（rank 1–4）依次取色
PALETTE_MAIN = ['#E64B35', '#4DBBD5', '#00A087', '#3C5488', '#F39B7F', '#8491B4']
COLOR_REF_LINE = '#95A5A6'
COLOR_MISSING = '#2E5A88'
COLOR_OBSERVED = '#F5F5F5'

LINE_WIDTH_THIN = 1.2
BAND_ALPHA = 0.18

CURVE_FIGSIZE = (FIG_WIDTH_DOUBLE, 5)
CALIB_FIGSIZE = (6, 6)
NOMOGRAM_FIGSIZE = (FIG_WIDTH_DOUBLE, 6)


class PlotConfig:
    """森林图与通用字号（plots / plot_utils 共用）"""
    FIG_DPI = FIG_DPI
    SAVE_DPI = SAVE_DPI
    FOREST_FIGSIZE = (FIG_WIDTH_DOUBLE, 4.5)
    LABEL_FONT = LABEL_FONT
    TICK_FONT = TICK_FONT
    TITLE_FONT = TITLE_FONT
    OR_POINT_COLOR = '#2C3E50'
    OR_CI_COLOR = '#7F8C8D'
    OR_REF_LINE_COLOR = '#BDC3C7'
    LOG_OR_TICKS = [0.1, 0.25, 0.5, 1, 2, 4, 10]


def group_palette(groups):
    """分组名 → 颜色；组数超过调色板长度时循环使用"""
    return {g: PALETTE_MAIN[i % len(PALETTE_MAIN)] for i, g in enumerate(groups)}


def apply_medical_style():
    sns.set_theme(style='ticks', rc={'axes.spines.top': False, 'axes.spines.right': False})
    plt.rcParams.update({
        'font.family': 'sans-serif',
        'font.sans-serif': FONT_SANS,
        'font.size': TICK_FONT,
        'axes.titlesize': TITLE_FONT,
        'axes.labelsize': LABEL_FONT,
        'xtick.labelsize': TICK_FONT,
        'ytick.labelsize': TICK_FONT,
        'legend.fontsize': TICK_FONT - 1,
        'legend.frameon': False,
        'axes.unicode_minus': False,
        'pdf.fonttype': 42,
        'axes.grid': True,
        'axes.grid.axis': 'y',
        'grid.alpha': 0.4,
        'grid.color': '#ECF0F1',
        'grid.linestyle': '--',
    })


def save_fig_medical(base_path, formats=('pdf', 'png'), dpi=SAVE_DPI, fig=None, **kwargs):
    """按 base_path 写出各格式（自动建目录），白底紧凑边距；返回 PNG 绝对路径"""
    opts = dict(bbox_inches='tight', facecolor='white', pad_inches=0.02)
    opts.update(kwargs)
    target = fig if fig is not None else plt.gcf()
    os.makedirs(os.path.dirname(os.path.abspath(base_path)), exist_ok=True)
    for fmt in formats:
        target.savefig(f"{base_path}.{fmt}", dpi=dpi if fmt == 'png' else None, **opts)
    return os.path.abspath(f"{base_path}.png")
