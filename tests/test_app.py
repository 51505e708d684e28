import pytest

pytest.importorskip("streamlit")

import app
from admitrms.effects import summarize_effects
from admitrms.feature_formatter import FeatureFormatter


def test_input_errors_use_logical_ranges():
    L = app.I18N["en"]
    f = FeatureFormatter()
    assert app.input_errors({'gre': 600.0, 'gpa': 3.4, 'rank': 2}, L, f) == []
    errors = app.input_errors({'gre': 900.0, 'gpa': 3.4, 'rank': 2}, L, f)
    assert len(errors) == 1
    assert "GRE score" in errors[0]


def test_extrapolation_notes(dd):
    L = app.I18N["en"]
    f = FeatureFormatter()
    _, hi = dd.prediction_range('gpa')
    notes = app.extrapolation_notes({'gre': dd.adjust_to('gre'), 'gpa': hi + 0.01, 'rank': 1}, dd, L, f)
    assert len(notes) == 1


def test_odds_ratio_display(fit, dd):
    table = app.odds_ratio_display(summarize_effects(fit, dd), FeatureFormatter())
    assert list(table.columns) == ['Contrast', 'OR', 'Lower', 'Upper']
    assert any(c.startswith('Rank 1') for c in table['Contrast'])
