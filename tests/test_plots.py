import os

import pytest

from admitrms.effects import summarize_effects
from admitrms.missingness import mean_other_missing, missing_summary, na_per_observation, naclus
from admitrms.nomogram import nomogram_axes
from admitrms.plots import (
    plot_calibration, plot_forest_or, plot_mean_other_missing, plot_missing_fraction,
    plot_missing_heatmap, plot_na_per_observation, plot_naclus, plot_nomogram, plot_predicted_curves,
)
from admitrms.predict import predict_grid
from admitrms.validation import calibrate


def _assert_saved(png_path):
    assert png_path.endswith(".png")
    assert os.path.getsize(png_path) > 0
    assert os.path.exists(png_path[:-4] + ".pdf")


@pytest.mark.parametrize("lang", ["en", "cn"])
def test_forest_plot(tmp_path, fit, dd, lang):
    _assert_saved(plot_forest_or(summarize_effects(fit, dd), str(tmp_path / f"forest_{lang}"), lang=lang))


def test_predicted_curves(tmp_path, fit, dd):
    by_rank = predict_grid(fit, dd, 'gre', by='rank', n=40)
    _assert_saved(plot_predicted_curves(by_rank, 'gre', str(tmp_path / "gre_by_rank"), by='rank'))
    single = predict_grid(fit, dd, 'gpa', n=40)
    _assert_saved(plot_predicted_curves(single, 'gpa', str(tmp_path / "gpa")))
    rank = predict_grid(fit, dd, 'rank')
    _assert_saved(plot_predicted_curves(rank, 'rank', str(tmp_path / "rank")))


def test_missing_plots(tmp_path, admissions):
    _assert_saved(plot_missing_fraction(missing_summary(admissions), str(tmp_path / "fraction")))
    _assert_saved(plot_na_per_observation(na_per_observation(admissions), str(tmp_path / "per_obs")))
    _assert_saved(plot_mean_other_missing(mean_other_missing(admissions), str(tmp_path / "other")))
    _assert_saved(plot_missing_heatmap(admissions, str(tmp_path / "heatmap")))
    _assert_saved(plot_naclus(naclus(admissions), str(tmp_path / "naclus")))


def test_calibration_plot(tmp_path, fit):
    cal = calibrate(fit, B=5, seed=1, verbose=False)
    _assert_saved(plot_calibration(cal, str(tmp_path / "calibration")))


def test_nomogram_plot(tmp_path, fit, dd):
    _assert_saved(plot_nomogram(nomogram_axes(fit, dd), str(tmp_path / "nomogram")))


def test_save_creates_missing_directories(tmp_path, fit, dd):
    target = tmp_path / "nested" / "dir" / "nomogram"
    _assert_saved(plot_nomogram(nomogram_axes(fit, dd), str(target)))
