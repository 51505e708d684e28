"""
统一变量名称格式化模块
从 feature_dictionary.json 加载 display_name，供表格、图片输出统一使用；
另负责将 patsy 设计矩阵列名（rcs(gre, 3)[1]、rank[T.2]）转为 gre'、rank=2 形式。
"""
import os
import re
import json

DEFAULT_LANG = 'en'
DICT_PATH = os.path.join(os.path.dirname(__file__), 'feature_dictionary.json')

_RCS_COLUMN = re.compile(r"^rcs\((\w+)(?:,[^)]*)?\)\[(\d+)\]$")
_FACTOR_COLUMN = re.compile(r"^(?:C\()?(\w+)\)?\[T\.([^\]]+)\]$")

# 字典缓存
_dict_cache = None


def _get_feature_dict():
    """懒加载 feature_dictionary.json"""
    global _dict_cache
    if _dict_cache is None:
        if os.path.exists(DICT_PATH):
            with open(DICT_PATH, 'r', encoding='utf-8') as f:
                _dict_cache = json.load(f)
        else:
            _dict_cache = {}
    return _dict_cache


def term_variable(column):
    """设计矩阵列名 → 原始变量名（rcs(gre, 3)[0] → gre，rank[T.2] → rank）"""
    m = _RCS_COLUMN.match(column)
    if m:
        return m.group(1)
    m = _FACTOR_COLUMN.match(column)
    if m:
        return m.group(1)
    return column


class FeatureFormatter:
    """
    变量名称格式化器：将原始变量名（如 gpa）转为展示名（如 Undergraduate GPA）
    """

    def __init__(self, lang=None):
        self.lang = lang or DEFAULT_LANG
        self._dict = _get_feature_dict()

    def get_label(self, feature_name, with_unit=False, lang=None):
        """
        获取单个变量的展示名称
        :param feature_name: 原始变量名（如 gre）
        :param with_unit: 是否附加单位
        :param lang: 可选，覆盖实例语言 ('en'|'cn')
        :return: 展示名称
        """
        if feature_name not in self._dict:
            return str(feature_name)
        cfg = self._dict[feature_name]
        _lang = lang if lang is not None else self.lang
        key = 'display_name_cn' if _lang == 'cn' else 'display_name_en'
        label = cfg.get(key) or cfg.get('display_name') or str(feature_name)
        if with_unit and cfg.get('unit'):
            label = f"{label} ({cfg['unit']})"
        return label

    def format_features(self, feature_list, with_unit=False, lang=None):
        """批量格式化变量名"""
        return [self.get_label(f, with_unit, lang) for f in feature_list]

    def ref_range(self, feature_name):
        """字典中的逻辑取值范围 (min, max)，未配置时返回 None"""
        ref = self._dict.get(feature_name, {}).get('ref_range')
        if not ref:
            return None
        return ref['logical_min'], ref['logical_max']

    def level_label(self, feature_name, level):
        """分类变量水平的展示名，字典未配置时退化为 name=level"""
        if isinstance(level, float) and level.is_integer():
            level = int(level)
        levels = self._dict.get(feature_name, {}).get('levels', {})
        return levels.get(str(level), f"{feature_name}={level}")

    @staticmethod
    def term_label(column):
        """
        设计矩阵列名 → rms 风格项名
        rcs(gre, 3)[0] → gre，rcs(gre, 3)[1] → gre'，rcs(gre, 4)[2] → gre''，rank[T.2] → rank=2
        """
        m = _RCS_COLUMN.match(column)
        if m:
            return m.group(1) + "'" * int(m.group(2))
        m = _FACTOR_COLUMN.match(column)
        if m:
            return f"{m.group(1)}={m.group(2)}"
        return column
