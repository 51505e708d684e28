"""
限制性立方样条（Restricted Cubic Spline）

- 节点位置：Harrell 分位数规则（3-7 个节点），n < 100 时外侧节点取第 5 小/大值
- 基函数：x 本身 + (k-2) 个非线性项，除以 (t_k - t_1)^2 归一化，外侧节点以外为线性
- rcs：patsy 状态变换，公式中写 rcs(gre, 3)；拟合时学习到的节点在预测时复用
"""
import numpy as np
from patsy import stateful_transform

KNOT_QUANTILES = {
    3: [0.10, 0.50, 0.90],
    4: [0.05, 0.35, 0.65, 0.95],
    5: [0.05, 0.275, 0.50, 0.725, 0.95],
    6: [0.05, 0.23, 0.41, 0.59, 0.77, 0.95],
    7: [0.025, 0.1833, 0.3417, 0.50, 0.6583, 0.8167, 0.975],
}


def default_knots(x, nk=5):
    """按 Harrell 规则计算节点；重复节点合并，唯一节点少于 3 个时报错"""
    x = np.asarray(x, dtype=float)
    x = np.sort(x[~np.isnan(x)])
    if nk not in KNOT_QUANTILES:
        raise ValueError(f"节点数必须在 3-7 之间，收到 {nk}")
    n = len(x)
    if n < 5:
        raise ValueError(f"非缺失观测过少（n={n}），无法放置样条节点")
    knots = np.quantile(x, KNOT_QUANTILES[nk])
    if n < 100:
        knots[0] = x[4]
        knots[-1] = x[-5]
    knots = np.unique(knots)
    if len(knots) < 3:
        raise ValueError(f"唯一节点不足 3 个（{knots.tolist()}），变量取值过于集中")
    return knots


def rcspline_basis(x, knots):
    """
    限制性立方样条设计矩阵

    Returns
    -------
    ndarray, shape (n, k-1)
        第 0 列为 x；第 j 列（j>=1）为第 j 个非线性项
    """
    x = np.asarray(x, dtype=float)
    t = np.asarray(knots, dtype=float)
    k = len(t)
    if k < 3:
        raise ValueError("限制性立方样条至少需要 3 个节点")
    norm = (t[-1] - t[0]) ** 2
    basis = np.empty((len(x), k - 1))
    basis[:, 0] = x
    tail_a = np.maximum(x - t[-2], 0) ** 3
    tail_b = np.maximum(x - t[-1], 0) ** 3
    span = t[-1] - t[-2]
    for j in range(k - 2):
        term = (
            np.maximum(x - t[j], 0) ** 3
            - tail_a * (t[-1] - t[j]) / span
            + tail_b * (t[-2] - t[j]) / span
        )
        basis[:, j + 1] = term / norm
    return basis


class RCS:
    """
    patsy 状态变换：memorize 阶段收集数据，memorize_finish 时确定节点；
    之后的 transform（含预测时的 build_design_matrices）都使用同一组节点
    """

    def __init__(self):
        self._chunks = []
        self._nk = 5
        self._fixed_knots = None
        self.knots = None

    def memorize_chunk(self, x, nk=5, knots=None):
        self._nk = nk
        self._fixed_knots = knots
        self._chunks.append(np.asarray(x, dtype=float))

    def memorize_finish(self):
        if self._fixed_knots is not None:
            self.knots = np.sort(np.asarray(self._fixed_knots, dtype=float))
        else:
            self.knots = default_knots(np.concatenate(self._chunks), self._nk)
        self._chunks = []

    def transform(self, x, nk=5, knots=None):
        return rcspline_basis(x, self.knots)


rcs = stateful_transform(RCS)
