"""
图表：OR 森林图、预测概率曲线、缺失模式（naplot / naclus）、校准曲线、列线图

所有函数接收已计算好的结果对象与保存路径前缀（不含扩展名），输出 PDF + PNG，返回 PNG 绝对路径。
"""
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker
import seaborn as sns
from scipy.cluster.hierarchy import dendrogram

from .effects import odds_ratio_frame
from .feature_formatter import FeatureFormatter
from .missingness import NaClus
from .nomogram import NomogramAxes
from .plot_config import (
    PlotConfig, apply_medical_style, save_fig_medical, group_palette,
    PALETTE_MAIN, COLOR_REF_LINE, COLOR_MISSING, COLOR_OBSERVED,
    BAND_ALPHA, LINE_WIDTH_THIN, FIG_WIDTH_DOUBLE, FIG_WIDTH_SINGLE,
    CURVE_FIGSIZE, CALIB_FIGSIZE, NOMOGRAM_FIGSIZE,
)
from .plot_utils import PlotUtils


def _effect_labels(effects, formatter):
    labels = []
    for _, row in effects.iterrows():
        var = row['Variable']
        if pd.isna(row['Diff.']):
            labels.append(f"{formatter.level_label(var, row['High'])} vs {formatter.level_label(var, row['Low'])}")
        else:
            labels.append(f"{formatter.get_label(var)} ({row['Low']:g} → {row['High']:g})")
    return labels


def plot_forest_or(effects, save_base, formatter=None, lang='en', show_or_text=True, title=None):
    """
    OR 森林图

    effects 为 summarize_effects 的输出；连续变量为 IQR 对比，分类变量为各水平对比参照水平
    """
    formatter = formatter or FeatureFormatter(lang)
    or_df = odds_ratio_frame(effects)
    or_df['Label'] = _effect_labels(effects, formatter)
    or_df = or_df.iloc[::-1].reset_index(drop=True)

    plot_utils = PlotUtils(formatter, lang)
    left_err, right_err = plot_utils.compute_or_error(or_df)
    x_min, x_max = plot_utils.compute_or_xlim(or_df)

    apply_medical_style()
    fig, ax = plt.subplots(figsize=PlotConfig.FOREST_FIGSIZE, dpi=PlotConfig.FIG_DPI)
    y_pos = np.arange(len(or_df))

    ax.errorbar(
        or_df['OR'], y_pos,
        xerr=[left_err, right_err],
        fmt='s', markersize=6,
        color=PlotConfig.OR_POINT_COLOR,
        ecolor=PlotConfig.OR_CI_COLOR,
        elinewidth=2, capsize=4,
    )
    ax.axvline(1, color=PlotConfig.OR_REF_LINE_COLOR, linestyle='--', lw=1.2)

    ax.set_yticks(y_pos)
    ax.set_yticklabels(or_df['Label'], fontsize=PlotConfig.TICK_FONT)
    ax.set_xscale('log')
    ax.set_xlabel('Odds Ratio (log scale)' if lang == 'en' else '比值比（对数尺度）',
                  fontsize=PlotConfig.LABEL_FONT)
    ticks = [t for t in PlotConfig.LOG_OR_TICKS if x_min <= t <= x_max]
    ax.set_xticks(ticks)
    ax.xaxis.set_major_formatter(ticker.ScalarFormatter())
    ax.xaxis.set_minor_formatter(ticker.NullFormatter())
    ax.set_xlim(x_min, x_max)

    if show_or_text:
        log_max = np.log10(x_max)
        text_x = 10 ** (log_max + 0.1)
        ax.set_xlim(x_min, 10 ** (log_max + 0.8))
        for y, (_, row) in zip(y_pos, or_df.iterrows()):
            ax.text(text_x, y, PlotUtils.format_or_ci(row['OR'], row['OR_Lower'], row['OR_Upper']),
                    va='center', fontsize=PlotConfig.TICK_FONT, color='#222222')
        ax.text(text_x, y_pos[-1] + 0.8, 'OR (95% CI)', ha='left', va='bottom',
                fontsize=PlotConfig.TICK_FONT, fontweight='bold')

    if title is None:
        title = 'Adjusted Odds Ratios for Admission' if lang == 'en' else '录取的校正 OR'
    ax.set_title(title, fontsize=PlotConfig.TITLE_FONT, fontweight='bold', pad=18)
    ax.grid(axis='x', alpha=0.2)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_predicted_curves(curve_df, var, save_base, by=None, formatter=None, lang='en', ylabel=None):
    """
    预测概率曲线及置信带（predict_grid 的输出）

    连续 var：折线 + 阴影带；分类 var：点估计 + 误差条
    """
    formatter = formatter or FeatureFormatter(lang)
    df = curve_df.copy()
    if by is not None:
        df['_group'] = [formatter.level_label(by, v) for v in df[by]]
        groups = list(dict.fromkeys(df['_group']))
    else:
        df['_group'] = 'All'
        groups = ['All']
    palette = group_palette(groups)

    apply_medical_style()
    fig, ax = plt.subplots(figsize=CURVE_FIGSIZE, dpi=PlotConfig.FIG_DPI)

    if isinstance(df[var].dtype, pd.CategoricalDtype):
        levels = list(df[var].cat.categories)
        offsets = np.linspace(-0.2, 0.2, len(groups)) if len(groups) > 1 else [0.0]
        for off, g in zip(offsets, groups):
            sub = df[df['_group'] == g]
            x = np.array([levels.index(v) for v in sub[var]]) + off
            ax.errorbar(x, sub['prob'], yerr=[sub['prob'] - sub['lower'], sub['upper'] - sub['prob']],
                        fmt='o', capsize=3, color=palette[g], label=g if by is not None else None)
        ax.set_xticks(range(len(levels)))
        ax.set_xticklabels([formatter.level_label(var, v) for v in levels])
    else:
        sns.lineplot(data=df, x=var, y='prob', hue='_group' if by is not None else None,
                     palette=palette if by is not None else None,
                     color=palette["All"] if by is None else None, errorbar=None, ax=ax)
        for g in groups:
            sub = df[df['_group'] == g]
            ax.fill_between(sub[var].astype(float), sub['lower'], sub['upper'],
                            color=palette[g], alpha=BAND_ALPHA, lw=0)

    ax.set_xlabel(formatter.get_label(var, with_unit=True, lang=lang), fontsize=PlotConfig.LABEL_FONT)
    ax.set_ylabel(ylabel or ('Probability of admission' if lang == 'en' else '录取概率'),
                  fontsize=PlotConfig.LABEL_FONT)
    ax.set_ylim(0, 1)
    if by is not None:
        ax.legend(title=formatter.get_label(by, lang=lang), loc='upper left')
    elif ax.get_legend() is not None:
        ax.get_legend().remove()
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_missing_fraction(summary, save_base, formatter=None, lang='en'):
    """各变量缺失比例点图（naplot: Fraction of NAs）"""
    formatter = formatter or FeatureFormatter(lang)
    s = summary.sort_values()
    apply_medical_style()
    fig, ax = plt.subplots(figsize=(FIG_WIDTH_SINGLE * 1.4, 0.5 * len(s) + 1.5), dpi=PlotConfig.FIG_DPI)
    y = np.arange(len(s))
    ax.hlines(y, 0, s.values, color=COLOR_REF_LINE, lw=LINE_WIDTH_THIN)
    ax.plot(s.values, y, 'o', color=COLOR_MISSING)
    ax.set_yticks(y)
    ax.set_yticklabels(formatter.format_features(s.index, lang=lang))
    ax.set_xlim(0, max(float(s.max()) * 1.2, 0.01))
    ax.set_xlabel('Fraction of NAs' if lang == 'en' else '缺失比例', fontsize=PlotConfig.LABEL_FONT)
    ax.grid(axis='x', alpha=0.3)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_na_per_observation(counts, save_base, lang='en'):
    """每个观测缺失变量数的直方图"""
    apply_medical_style()
    fig, ax = plt.subplots(figsize=(FIG_WIDTH_SINGLE * 1.4, 3.5), dpi=PlotConfig.FIG_DPI)
    ax.bar(counts.index.astype(int), counts.values, color=COLOR_MISSING, width=0.6)
    ax.set_xticks(counts.index.astype(int))
    ax.set_xlabel('Number of missing variables' if lang == 'en' else '缺失变量个数',
                  fontsize=PlotConfig.LABEL_FONT)
    ax.set_ylabel('Observations' if lang == 'en' else '观测数', fontsize=PlotConfig.LABEL_FONT)
    for x, v in zip(counts.index.astype(int), counts.values):
        ax.text(x, v, f"{int(v)}", ha='center', va='bottom', fontsize=PlotConfig.TICK_FONT)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_mean_other_missing(series, save_base, formatter=None, lang='en'):
    """某变量缺失时其余变量的平均缺失个数（无缺失的变量不绘制）"""
    formatter = formatter or FeatureFormatter(lang)
    s = series.dropna().sort_values()
    apply_medical_style()
    fig, ax = plt.subplots(figsize=(FIG_WIDTH_SINGLE * 1.4, 0.5 * max(len(s), 1) + 1.5), dpi=PlotConfig.FIG_DPI)
    y = np.arange(len(s))
    ax.plot(s.values, y, 'o', color=COLOR_MISSING)
    ax.set_yticks(y)
    ax.set_yticklabels(formatter.format_features(s.index, lang=lang))
    ax.set_xlabel('Mean number of other variables missing' if lang == 'en' else '其余变量平均缺失个数',
                  fontsize=PlotConfig.LABEL_FONT)
    ax.set_xlim(-0.05, max(float(s.max()) if len(s) else 0.0, 0.5) * 1.2)
    ax.grid(axis='x', alpha=0.3)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_missing_heatmap(df, save_base, formatter=None, lang='en'):
    """缺失值热图：列按缺失率降序"""
    formatter = formatter or FeatureFormatter(lang)
    sorted_cols = df.isnull().mean().sort_values(ascending=False).index
    display_labels = formatter.format_features(sorted_cols.tolist(), lang=lang)

    apply_medical_style()
    fig, ax = plt.subplots(figsize=(FIG_WIDTH_DOUBLE, 5), facecolor='white')
    sns.heatmap(
        df[sorted_cols].isnull(),
        cmap=[COLOR_OBSERVED, COLOR_MISSING],
        vmin=0, vmax=1,
        cbar=True,
        yticklabels=False,
        ax=ax,
    )
    colorbar = ax.collections[0].colorbar
    colorbar.set_ticks([0.25, 0.75])
    colorbar.set_ticklabels(['Observed', 'Missing'])

    ax.set_title("Pattern of Missing Values", fontsize=PlotConfig.TITLE_FONT, pad=14, fontweight='bold')
    ax.set_xlabel("Variables (sorted by missing rate)", fontsize=PlotConfig.LABEL_FONT, labelpad=10)
    ax.set_ylabel(f"Applicants (N={len(df)})", fontsize=PlotConfig.LABEL_FONT, labelpad=10)
    ax.set_xticks(np.arange(len(display_labels)) + 0.5)
    ax.set_xticklabels(display_labels, rotation=30, ha='right')
    sns.despine(left=True, bottom=True)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_naclus(nc: NaClus, save_base, formatter=None, lang='en'):
    """
    naclus 树状图；纵轴为两组变量同时缺失的观测比例（1 - 距离）
    """
    formatter = formatter or FeatureFormatter(lang)
    apply_medical_style()
    fig, ax = plt.subplots(figsize=(FIG_WIDTH_SINGLE * 1.6, 4), dpi=PlotConfig.FIG_DPI)
    dendrogram(
        nc.linkage,
        labels=formatter.format_features(nc.labels, lang=lang),
        ax=ax,
        color_threshold=0,
        above_threshold_color=COLOR_MISSING,
        leaf_rotation=30,
    )
    ax.yaxis.set_major_formatter(ticker.FuncFormatter(lambda d, _: f"{1 - d:.2f}"))
    ax.set_ylabel('Fraction missing in common' if lang == 'en' else '共同缺失比例',
                  fontsize=PlotConfig.LABEL_FONT)
    ax.grid(axis='y', alpha=0.3)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def plot_calibration(cal, save_base, lang='en'):
    """Bootstrap 校准曲线：理想线 / 表观 / 偏倚校正"""
    t = cal.table
    apply_medical_style()
    fig, ax = plt.subplots(figsize=CALIB_FIGSIZE, dpi=PlotConfig.FIG_DPI, facecolor='white')
    ax.plot([0, 1], [0, 1], color=COLOR_REF_LINE, linestyle=':', lw=1.5, label='Ideal')
    ax.plot(t['predicted'], t['apparent'], color=PALETTE_MAIN[1], lw=1.6, linestyle='--', label='Apparent')
    ax.plot(t['predicted'], t['bias_corrected'], color=PlotConfig.OR_POINT_COLOR, lw=2, label='Bias-corrected')
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    ax.set_xlabel('Predicted Pr{admit=1}' if lang == 'en' else '预测概率', fontsize=PlotConfig.LABEL_FONT)
    ax.set_ylabel('Actual Probability' if lang == 'en' else '实际概率', fontsize=PlotConfig.LABEL_FONT)
    ax.legend(loc='upper left')
    ax.text(0.98, 0.02, f"B={cal.n_success} repetitions, boot\nMean absolute error={cal.mean_abs_error:.3f}  n={cal.n}",
            transform=ax.transAxes, ha='right', va='bottom', fontsize=8, color='#555555')
    ax.grid(color='whitesmoke', linestyle='-', linewidth=1)
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path


def _fmt_tick(value):
    if isinstance(value, (float, np.floating)):
        return f"{value:g}"
    return str(value)


def plot_nomogram(axes: NomogramAxes, save_base, formatter=None, lang='en', risk_label=None):
    """
    列线图：Points 标尺、各变量轴、Total Points、预测概率轴

    Total Points 轴按 0–100 的宽度重新缩放，概率刻度与之对齐
    """
    formatter = formatter or FeatureFormatter(lang)
    variables = list(axes.variables)
    n_var = len(variables)

    apply_medical_style()
    fig, ax = plt.subplots(figsize=NOMOGRAM_FIGSIZE, dpi=PlotConfig.FIG_DPI, facecolor='white')

    main_y = n_var + 1
    ax.hlines(main_y, 0, 100, lw=1.6, color='black')
    for p in range(0, 101, 10):
        ax.vlines(p, main_y, main_y + 0.2, lw=1.2, color='black')
        ax.text(p, main_y + 0.35, f"{p}", ha='center', va='bottom', fontsize=PlotConfig.TICK_FONT)
        ax.vlines(p, -3.5, main_y, lw=0.5, ls='--', color='gray', alpha=0.25, zorder=0)
    ax.text(-5, main_y, 'Points' if lang == 'en' else '评分', ha='right', va='center',
            fontsize=PlotConfig.LABEL_FONT, fontweight='bold')

    for i, var in enumerate(variables):
        y = n_var - i
        tab = axes.variables[var]
        ax.hlines(y, tab['points'].min(), tab['points'].max(), lw=1.4, color='black')
        for k, (_, row) in enumerate(tab.iterrows()):
            ax.vlines(row['points'], y, y + 0.18, lw=1, color='black')
            # 分类变量水平可能重叠，交错上下放置
            dy = -0.3 if k % 2 == 0 or len(tab) <= 4 else 0.45
            ax.text(row['points'], y + dy, _fmt_tick(row['value']), ha='center',
                    va='top' if dy < 0 else 'bottom', fontsize=8, color='#333333')
        ax.text(-5, y, formatter.get_label(var, lang=lang), ha='right', va='center',
                fontsize=PlotConfig.LABEL_FONT, fontweight='bold')

    tp_y = -1
    ax.hlines(tp_y, 0, 100, lw=2, color='darkred')
    ax.text(-5, tp_y, 'Total Points' if lang == 'en' else '总评分', ha='right', va='center',
            fontsize=PlotConfig.LABEL_FONT, fontweight='bold', color='darkred')
    for tp in ticker.MaxNLocator(nbins=8).tick_values(0, axes.total_max):
        if 0 <= tp <= axes.total_max:
            x = tp / axes.total_max * 100
            ax.vlines(x, tp_y, tp_y - 0.2, lw=1.4, color='darkred')
            ax.text(x, tp_y - 0.3, f"{tp:g}", ha='center', va='top', fontsize=8, color='darkred')

    prob_y = -2.5
    ax.hlines(prob_y, 0, 100, lw=2, color='darkblue')
    if risk_label is None:
        risk_label = 'Prob(admit)' if lang == 'en' else '录取概率'
    ax.text(-5, prob_y, risk_label, ha='right', va='center',
            fontsize=PlotConfig.LABEL_FONT, fontweight='bold', color='darkblue')
    for j, (_, row) in enumerate(axes.prob_ticks.iterrows()):
        x = row['total_points'] / axes.total_max * 100
        ax.vlines(x, prob_y, prob_y + 0.2, lw=1.4, color='darkblue')
        ax.text(x, prob_y - (0.3 if j % 2 == 0 else 0.65), f"{row['prob']:g}",
                ha='center', va='top', fontsize=8, color='darkblue')

    ax.set_xlim(-35, 105)
    ax.set_ylim(prob_y - 1.2, main_y + 1)
    ax.axis('off')
    fig.tight_layout()
    path = save_fig_medical(save_base, fig=fig)
    plt.close(fig)
    return path
