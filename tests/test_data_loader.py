import numpy as np
import pandas as pd
import pytest

from admitrms.data_loader import (
    REQUIRED_COLUMNS, coerce_types, inject_missing, load_admissions, load_cleaned, save_cleaned,
)


def test_inject_missing_exact_counts(raw_admissions):
    counts = {'gre': 20, 'gpa': 15, 'rank': 10}
    out = inject_missing(raw_admissions, counts=counts, seed=1234)
    assert out.isna().sum().to_dict() == {'admit': 0, **counts}
    # 原数据不被修改
    assert not raw_admissions.isna().any().any()


def test_inject_missing_is_reproducible(raw_admissions):
    a = inject_missing(raw_admissions, seed=7)
    b = inject_missing(raw_admissions, seed=7)
    c = inject_missing(raw_admissions, seed=8)
    pd.testing.assert_frame_equal(a.isna(), b.isna())
    assert not a.isna().equals(c.isna())


@pytest.mark.parametrize("counts", [{'admit': 5}, {'toefl': 3}, {'gre': 10_000}, {'gpa': -1}])
def test_inject_missing_rejects_bad_requests(raw_admissions, counts):
    with pytest.raises(ValueError):
        inject_missing(raw_admissions, counts=counts)


def test_coerce_types(raw_admissions):
    out = coerce_types(inject_missing(raw_admissions, counts={'rank': 5}))
    assert isinstance(out['rank'].dtype, pd.CategoricalDtype)
    assert list(out['rank'].cat.categories) == [1, 2, 3, 4]
    assert out['rank'].cat.ordered
    assert out['rank'].isna().sum() == 5
    assert str(out['admit'].dtype) == 'Int64'
    assert out['gre'].dtype == float


def test_coerce_types_rejects_invalid_values(raw_admissions):
    bad_admit = raw_admissions.copy()
    bad_admit.loc[0, 'admit'] = 2
    with pytest.raises(ValueError):
        coerce_types(bad_admit)

    bad_rank = raw_admissions.copy()
    bad_rank.loc[0, 'rank'] = 5
    with pytest.raises(ValueError):
        coerce_types(bad_rank)


def test_load_admissions_reads_local_file(tmp_path, raw_admissions):
    path = tmp_path / "binary.csv"
    raw_admissions.assign(extra=1).to_csv(path, index=False)
    df = load_admissions(path=str(path))
    assert list(df.columns) == REQUIRED_COLUMNS
    assert len(df) == len(raw_admissions)


def test_load_admissions_requires_columns(tmp_path, raw_admissions):
    path = tmp_path / "binary.csv"
    raw_admissions.drop(columns=['gpa']).to_csv(path, index=False)
    with pytest.raises(ValueError, match="gpa"):
        load_admissions(path=str(path))


def test_cleaned_file_restores_types(admissions):
    save_cleaned(admissions)
    back = load_cleaned()
    assert isinstance(back['rank'].dtype, pd.CategoricalDtype)
    assert back.isna().sum().to_dict() == admissions.isna().sum().to_dict()
    np.testing.assert_allclose(back['gpa'].values, admissions['gpa'].values)


def test_load_cleaned_missing_file():
    with pytest.raises(FileNotFoundError):
        load_cleaned()


@pytest.mark.parametrize("cache", [True, False])
def test_load_admissions_downloads_and_caches(tmp_path, raw_admissions, cache):
    source = tmp_path / "remote" / "binary.csv"
    source.parent.mkdir()
    raw_admissions.to_csv(source, index=False)
    target = tmp_path / "data" / "raw" / "binary.csv"

    df = load_admissions(path=str(target), url=source.as_uri(), cache=cache)
    assert list(df.columns) == REQUIRED_COLUMNS
    assert len(df) == len(raw_admissions)
    assert target.exists() == cache
    if cache:
        pd.testing.assert_frame_equal(pd.read_csv(target), raw_admissions)
