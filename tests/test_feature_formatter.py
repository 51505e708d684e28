from admitrms.feature_formatter import FeatureFormatter, term_variable


def test_term_labels():
    assert FeatureFormatter.term_label('rcs(gre, 3)[0]') == 'gre'
    assert FeatureFormatter.term_label('rcs(gre, 3)[1]') == "gre'"
    assert FeatureFormatter.term_label('rcs(gpa, 5)[3]') == "gpa'''"
    assert FeatureFormatter.term_label('rank[T.2]') == 'rank=2'
    assert FeatureFormatter.term_label('Intercept') == 'Intercept'


def test_term_variable():
    assert term_variable('rcs(gpa, 3)[1]') == 'gpa'
    assert term_variable('rank[T.4]') == 'rank'
    assert term_variable('Intercept') == 'Intercept'


def test_labels_and_levels():
    f = FeatureFormatter()
    assert f.get_label('gre', with_unit=True) == 'GRE score (points)'
    assert f.get_label('gre', lang='cn') == 'GRE 成绩'
    assert f.get_label('toefl') == 'toefl'
    assert f.level_label('rank', 1) == 'Rank 1 (highest prestige)'
    assert f.level_label('rank', 4.0) == 'Rank 4 (lowest prestige)'
    assert f.level_label('rank', 9) == 'rank=9'
    assert f.ref_range('gpa') == (0.0, 4.0)
    assert f.ref_range('rank') is None
