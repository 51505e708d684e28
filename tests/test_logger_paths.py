import os

from admitrms import paths
from admitrms.logger import log, log_block, log_header


def test_paths_follow_project_root(isolated_outputs):
    root = str(isolated_outputs)
    assert paths.get_project_root() == root
    assert paths.get_raw_path() == os.path.join(root, "data", "raw", "binary.csv")
    assert paths.get_model_path() == os.path.join(root, "artifacts", "models", "lrm_fit.joblib")
    assert paths.get_supplementary_figure_dir("missing") == os.path.join(
        root, "results", "supplementary", "figures", "missing")


def test_ensure_dirs(tmp_path):
    target = tmp_path / "a" / "b"
    paths.ensure_dirs(str(target))
    assert target.is_dir()


def test_log_writes_console_and_file(isolated_outputs, capsys):
    log("model saved", "OK")
    log("few events", "WARN")
    log_block("line one\nline two")
    log_header("Step 04")
    out = capsys.readouterr().out
    assert "✅ model saved" in out

    with open(isolated_outputs / "logs" / "test.log", encoding="utf-8") as f:
        content = f.read()
    assert "✅ model saved" in content
    assert "⚠️ few events" in content
    assert "  line two" in content
    assert "=" * 70 + "\nStep 04\n" in content
