import os
import sys
from typing import Any

import numpy as np
import pandas as pd
import streamlit as st

PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_ROOT)
from admitrms.deploy_utils import load_preferred_bundle
from admitrms.effects import summarize_effects
from admitrms.feature_formatter import FeatureFormatter
from admitrms.predict import predict_one
from admitrms.study_config import CONF_LEVEL


I18N = {
    "en": {
        "page_title": "Admission Probability Calculator",
        "title": "Graduate Admission Probability",
        "caption": "Logistic regression with restricted cubic splines for GRE and GPA, adjusted for institution rank.",
        "model_info": "Model: `{formula}` | n = `{n}` | Covariance: `{source}`",
        "section_inputs": "Applicant",
        "submit": "Predict",
        "prob": "Predicted probability of admission",
        "ci": "{pct:.0f}% CI",
        "lp": "Linear predictor (log-odds)",
        "extrapolation": "{name} = {value} lies outside the range used for prediction ({lo} ~ {hi}); the estimate is an extrapolation.",
        "range_err": "{name} must be between {lo} and {hi}",
        "or_title": "Adjusted odds ratios",
        "or_note": "Continuous predictors: interquartile-range contrast. Rank: each level vs the most frequent level.",
        "load_failed": "Failed to load model: {err}",
        "predict_failed": "Prediction failed: {err}",
        "footer": "For teaching purposes only, not for admission decisions.",
    },
    "zh": {
        "page_title": "录取概率计算器",
        "title": "研究生录取概率",
        "caption": "GRE、GPA 采用限制性立方样条，并校正院校等级的 Logistic 回归模型。",
        "model_info": "模型: `{formula}` | 样本量 `{n}` | 协方差: `{source}`",
        "section_inputs": "申请人信息",
        "submit": "预测",
        "prob": "预测录取概率",
        "ci": "{pct:.0f}% 置信区间",
        "lp": "线性预测值（对数优势）",
        "extrapolation": "{name} = {value} 超出预测范围（{lo} ~ {hi}），结果为外推估计。",
        "range_err": "{name} 应在 {lo} 与 {hi} 之间",
        "or_title": "校正 OR",
        "or_note": "连续变量：四分位间距对比；院校等级：各水平对比频数最多的水平。",
        "load_failed": "模型加载失败: {err}",
        "predict_failed": "预测失败: {err}",
        "footer": "本工具仅用于教学演示，不用于录取决策。",
    },
}


@st.cache_resource
def load_bundle() -> dict[str, Any]:
    bundle, _ = load_preferred_bundle()
    return bundle


def input_errors(values: dict[str, Any], L: dict[str, str], formatter: FeatureFormatter) -> list[str]:
    """按字典中的逻辑范围检查输入"""
    errors = []
    for name, value in values.items():
        ref = formatter.ref_range(name)
        if ref is None or value is None:
            continue
        lo, hi = ref
        if not lo <= value <= hi:
            errors.append(L["range_err"].format(name=formatter.get_label(name), lo=lo, hi=hi))
    return errors


def extrapolation_notes(values: dict[str, Any], dd, L: dict[str, str], formatter: FeatureFormatter) -> list[str]:
    """连续变量超出 datadist 预测范围时提示"""
    notes = []
    for name, value in values.items():
        if dd.is_categorical(name):
            continue
        lo, hi = dd.prediction_range(name)
        if not lo <= value <= hi:
            notes.append(L["extrapolation"].format(name=formatter.get_label(name), value=value, lo=lo, hi=hi))
    return notes


def odds_ratio_display(effects: pd.DataFrame, formatter: FeatureFormatter) -> pd.DataFrame:
    rows = []
    for _, r in effects.iterrows():
        var = r["Variable"]
        if pd.isna(r["Diff."]):
            label = f"{formatter.level_label(var, r['High'])} vs {formatter.level_label(var, r['Low'])}"
        else:
            label = f"{formatter.get_label(var)} {r['Low']:g} → {r['High']:g}"
        rows.append({
            "Contrast": label,
            "OR": round(float(r["Odds Ratio"]), 3),
            "Lower": round(float(r["OR Lower"]), 3),
            "Upper": round(float(r["OR Upper"]), 3),
        })
    return pd.DataFrame(rows)


def main() -> None:
    st.set_page_config(page_title=I18N["en"]["page_title"], page_icon="🎓", layout="centered")

    _, lang_col = st.columns([8, 2])
    with lang_col:
        lang = st.selectbox("Language / 语言", options=["English", "中文"], index=0,
                            label_visibility="collapsed")
    lang_key = "en" if lang == "English" else "zh"
    L = I18N[lang_key]
    formatter = FeatureFormatter("cn" if lang_key == "zh" else "en")

    st.title(L["title"])
    st.caption(L["caption"])

    try:
        bundle = load_bundle()
    except (FileNotFoundError, ValueError) as e:
        st.error(L["load_failed"].format(err=e))
        st.stop()
    fit, dd = bundle["fit"], bundle["datadist"]
    st.info(L["model_info"].format(formula=fit.formula, n=fit.stats["Obs"], source=fit.cov_source))

    st.subheader(L["section_inputs"])
    with st.form("predict_form", clear_on_submit=False):
        c1, c2, c3 = st.columns(3)
        gre = c1.number_input(formatter.get_label("gre", with_unit=True), min_value=200.0, max_value=800.0,
                              value=float(dd.adjust_to("gre")), step=10.0)
        gpa = c2.number_input(formatter.get_label("gpa", with_unit=True), min_value=0.0, max_value=4.0,
                              value=float(dd.adjust_to("gpa")), step=0.01, format="%.2f")
        levels = list(dd.levels["rank"])
        rank = c3.selectbox(formatter.get_label("rank"), options=levels,
                            index=levels.index(dd.adjust_to("rank")),
                            format_func=lambda v: formatter.level_label("rank", v))
        submitted = st.form_submit_button(L["submit"], type="primary")

    values = {"gre": gre, "gpa": gpa, "rank": rank}
    if submitted:
        errors = input_errors(values, L, formatter)
        if errors:
            st.error("\n".join(f"- {e}" for e in errors))
        else:
            try:
                res = predict_one(fit, values, conf_level=CONF_LEVEL)
            except ValueError as e:
                st.error(L["predict_failed"].format(err=e))
            else:
                m1, m2 = st.columns(2)
                m1.metric(L["prob"], f"{res['prob']:.1%}")
                m2.metric(L["ci"].format(pct=CONF_LEVEL * 100), f"{res['lower']:.1%} – {res['upper']:.1%}")
                st.progress(float(np.clip(res["prob"], 0, 1)))
                st.caption(f"{L['lp']}: {res['lp']:.3f}")
                for note in extrapolation_notes(values, dd, L, formatter):
                    st.warning(note)

    st.subheader(L["or_title"])
    st.caption(L["or_note"])
    st.dataframe(odds_ratio_display(summarize_effects(fit, dd), formatter), hide_index=True)
    st.caption(L["footer"])


if __name__ == "__main__":
    main()
