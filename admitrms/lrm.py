"""
二分类 Logistic 回归拟合（rms::lrm 风格输出）

- patsy 构建设计矩阵（支持 rcs() 样条项与分类变量）
- statsmodels GLM Binomial 极大似然估计
- 模型统计量：LR chi2、d.f.、P、max |deriv|、C、Dxy、gamma、tau-a、Nagelkerke R2、Brier
- patsy 的 DesignInfo 不支持 pickle：序列化时只保存公式与完整病例数据，反序列化时重建
"""
import re
import warnings

import numpy as np
import pandas as pd
import statsmodels.api as sm
from patsy import EvalEnvironment, build_design_matrices, dmatrices
from scipy import stats
from scipy.special import expit
from sklearn.metrics import brier_score_loss
from statsmodels.tools.sm_exceptions import PerfectSeparationError, PerfectSeparationWarning

from .concordance import concordance_stats
from .feature_formatter import FeatureFormatter, term_variable
from .splines import rcs
from .study_config import MODEL_FORMULA, CONF_LEVEL

_FORMULA_ENV = EvalEnvironment([{'rcs': rcs, 'np': np}])
_RCS_TERM = re.compile(r"^rcs\((\w+)")


def _formula_variables(formula, columns):
    """公式中出现的数据列（结局在前）"""
    lhs, rhs = formula.split('~', 1)
    outcome = lhs.strip()
    predictors = [c for c in columns if c != outcome and re.search(rf"\b{re.escape(c)}\b", rhs)]
    return outcome, predictors


def fit_glm(y, X):
    """
    在给定设计矩阵上拟合 Logistic 模型，返回 statsmodels 结果对象。
    设计矩阵秩亏、完全分离或不收敛时抛出 ValueError（Bootstrap 中据此跳过该次重抽样）
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y, dtype=float).ravel()
    if len(np.unique(y)) < 2:
        raise ValueError("结局只有一个类别")
    if np.linalg.matrix_rank(X) < X.shape[1]:
        raise ValueError("设计矩阵秩亏（某分类水平或样条区间无观测）")
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("error", PerfectSeparationWarning)
            res = sm.GLM(y, X, family=sm.families.Binomial()).fit()
    except (PerfectSeparationError, PerfectSeparationWarning) as e:
        raise ValueError(f"完全分离: {e}") from e
    if not res.converged:
        raise ValueError("模型未收敛")
    if np.allclose(res.fittedvalues, y, atol=1e-6):
        raise ValueError("完全分离: 拟合概率与结局完全一致")
    return res


def _nagelkerke_r2(lr, ll_null, n):
    return (1 - np.exp(-lr / n)) / (1 - np.exp(2 * ll_null / n))


class LrmFit:
    """
    拟合结果容器：系数、协方差、设计信息与模型统计量。
    with_covariance() 返回使用 Bootstrap 协方差的副本，ANOVA / OR / 预测置信区间随之改变。
    """

    def __init__(self, formula, data, outcome, predictors, missing_counts, n_input):
        self.formula = formula
        self.data = data
        self.outcome = outcome
        self.predictors = predictors
        self.missing_counts = missing_counts
        self.n_input = n_input
        self.boot_coef = None
        self.cov_source = 'MLE'
        self._build_design()

    def _build_design(self):
        y, X = dmatrices(self.formula, self.data, eval_env=_FORMULA_ENV,
                         NA_action='raise', return_type='dataframe')
        self.design_info = X.design_info
        self.columns = list(X.columns)
        self.X = X.values
        self.y = y.values.ravel()

    # ---------- 拟合 ----------

    def _fit(self):
        res = fit_glm(self.y, self.X)
        self.coef = pd.Series(np.asarray(res.params), index=self.columns)
        self.cov = pd.DataFrame(np.asarray(res.cov_params()), index=self.columns, columns=self.columns)
        self.stats = self._model_stats(res)
        return self

    def _model_stats(self, res):
        p = expit(self.X @ self.coef.values)
        n = len(self.y)
        lr = 2 * (res.llf - res.llnull)
        df = len(self.columns) - 1
        score = res.model.score(np.asarray(res.params))
        conc = concordance_stats(self.y, p)
        return {
            'Obs': n,
            'Events': int(self.y.sum()),
            'LR chi2': float(lr),
            'd.f.': df,
            'Pr(> chi2)': float(stats.chi2.sf(lr, df)) if df > 0 else np.nan,
            'max |deriv|': float(np.max(np.abs(score))),
            'R2': float(_nagelkerke_r2(lr, res.llnull, n)),
            'Brier': float(brier_score_loss(self.y, p)),
            'C': conc['C'],
            'Dxy': conc['Dxy'],
            'gamma': conc['gamma'],
            'tau-a': conc['tau-a'],
            'logLik': float(res.llf),
            'logLik null': float(res.llnull),
        }

    # ---------- 设计矩阵与预测 ----------

    def newdata(self, rows) -> pd.DataFrame:
        """构建预测用数据：分类变量沿用拟合数据的水平"""
        nd = pd.DataFrame(rows)
        for col in self.predictors:
            dtype = self.data[col].dtype
            if col in nd.columns and isinstance(dtype, pd.CategoricalDtype):
                nd[col] = pd.Categorical(nd[col], categories=dtype.categories, ordered=dtype.ordered)
        return nd

    def design(self, newdata) -> pd.DataFrame:
        """用拟合时的 DesignInfo（含样条节点、分类水平）构建新数据设计矩阵"""
        return build_design_matrices([self.design_info], newdata, NA_action='raise',
                                     return_type='dataframe')[0]

    def linear_predictor(self, newdata=None):
        X = self.X if newdata is None else self.design(newdata).values
        return X @ self.coef.values

    def predict_proba(self, newdata=None):
        return expit(self.linear_predictor(newdata))

    def lp_se(self, X):
        """线性预测值标准误 sqrt(diag(X V X'))"""
        X = np.asarray(X, dtype=float)
        return np.sqrt(np.einsum('ij,jk,ik->i', X, self.cov.values, X))

    # ---------- 项结构（ANOVA / 效应汇总使用） ----------

    def term_columns(self):
        """
        {变量名: {'columns': [...], 'nonlinear': [...]}}
        rcs 项第 0 列为线性，其余为非线性；截距不计入
        """
        out = {}
        for term_name, sl in self.design_info.term_name_slices.items():
            if term_name == 'Intercept':
                continue
            idx = list(range(sl.start, sl.stop))
            m = _RCS_TERM.match(term_name)
            if m:
                var = m.group(1)
            elif ':' in term_name:
                var = term_name
            else:
                var = term_variable(self.columns[idx[0]])
            entry = out.setdefault(var, {'columns': [], 'nonlinear': []})
            entry['columns'].extend(idx)
            if m:
                entry['nonlinear'].extend(idx[1:])
        return out

    def with_covariance(self, cov, boot_coef=None, source='bootstrap'):
        """返回使用指定协方差矩阵（如 Bootstrap 协方差）的副本"""
        other = object.__new__(LrmFit)
        other.__dict__.update(self.__dict__)
        other.cov = pd.DataFrame(np.asarray(cov), index=self.columns, columns=self.columns)
        other.boot_coef = None if boot_coef is None else np.asarray(boot_coef)
        other.cov_source = source
        return other

    def coef_table(self, conf_level=CONF_LEVEL) -> pd.DataFrame:
        se = np.sqrt(np.diag(self.cov.values))
        z = self.coef.values / se
        zcrit = stats.norm.ppf(0.5 + conf_level / 2)
        return pd.DataFrame({
            'Term': [FeatureFormatter.term_label(c) for c in self.columns],
            'Coef': self.coef.values,
            'S.E.': se,
            'Wald Z': z,
            'Pr(>|Z|)': 2 * stats.norm.sf(np.abs(z)),
            'Lower': self.coef.values - zcrit * se,
            'Upper': self.coef.values + zcrit * se,
        })

    # ---------- 序列化 ----------

    def __getstate__(self):
        state = self.__dict__.copy()
        state.pop('design_info', None)
        return state

    def __setstate__(self, state):
        self.__dict__.update(state)
        y, X = dmatrices(self.formula, self.data, eval_env=_FORMULA_ENV,
                         NA_action='raise', return_type='dataframe')
        self.design_info = X.design_info


def fit_lrm(df: pd.DataFrame, formula=MODEL_FORMULA) -> LrmFit:
    """
    完整病例拟合：公式涉及的任一变量缺失即删除该行（记录各变量缺失数）
    """
    outcome, predictors = _formula_variables(formula, df.columns)
    if outcome not in df.columns:
        raise ValueError(f"结局变量不存在: {outcome}")
    model_vars = [outcome] + predictors
    missing_counts = df[model_vars].isna().sum().astype(int).to_dict()

    data = df[model_vars].dropna().copy()
    if data.empty:
        raise ValueError("删除缺失后无可用观测")
    data[outcome] = data[outcome].astype(int)
    for col in predictors:
        if not isinstance(data[col].dtype, pd.CategoricalDtype):
            data[col] = data[col].astype(float)
    data = data.reset_index(drop=True)

    fit = LrmFit(formula, data, outcome, predictors, missing_counts, n_input=len(df))
    return fit._fit()


def _fmt_p(p):
    if p is None or np.isnan(p):
        return "—"
    return "<0.0001" if p < 1e-4 else f"{p:.4f}"


def format_lrm(fit: LrmFit) -> str:
    """rms 风格文本报告"""
    s = fit.stats
    lines = ["Logistic Regression Model", "", f"  {fit.formula}", ""]
    if any(fit.missing_counts.values()):
        lines.append("Frequencies of Missing Values Due to Each Variable")
        names = list(fit.missing_counts)
        lines.append("  " + " ".join(f"{n:>7}" for n in names))
        lines.append("  " + " ".join(f"{fit.missing_counts[n]:>7}" for n in names))
        lines.append("")
    n0 = s['Obs'] - s['Events']
    rows = [
        (f"Obs {s['Obs']:>9}", f"LR chi2 {s['LR chi2']:>10.2f}", f"R2    {s['R2']:>7.3f}", f"C      {s['C']:>6.3f}"),
        (f" 0  {n0:>9}", f"d.f.    {s['d.f.']:>10}", f"Brier {s['Brier']:>7.3f}", f"Dxy    {s['Dxy']:>6.3f}"),
        (f" 1  {s['Events']:>9}", f"Pr(> chi2) {_fmt_p(s['Pr(> chi2)']):>7}", "", f"gamma  {s['gamma']:>6.3f}"),
        (f"max |deriv| {s['max |deriv|']:.0e}", "", "", f"tau-a  {s['tau-a']:>6.3f}"),
    ]
    lines.append(f"{'':<22}{'Model Likelihood':<22}{'Discrimination':<16}{'Rank Discrim.'}")
    lines.append(f"{'':<22}{'Ratio Test':<22}{'Indexes':<16}{'Indexes'}")
    for r in rows:
        lines.append(f"{r[0]:<22}{r[1]:<22}{r[2]:<16}{r[3]}")
    lines.append("")
    tab = fit.coef_table()
    lines.append(f"{'':<12}{'Coef':>10}{'S.E.':>10}{'Wald Z':>9}{'Pr(>|Z|)':>10}")
    for _, r in tab.iterrows():
        lines.append(f"{r['Term']:<12}{r['Coef']:>10.4f}{r['S.E.']:>10.4f}{r['Wald Z']:>9.2f}{_fmt_p(r['Pr(>|Z|)']):>10}")
    if fit.cov_source != 'MLE':
        lines.append("")
        lines.append(f"  (S.E. from {fit.cov_source} covariance)")
    return "\n".join(lines)
