import os
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from tidydraws.config.loader import config_paths, load_config
from tidydraws.config.schema import AppConfig, ReshapeConfig, SummaryConfig


def test_load_config_defaults(monkeypatch):
    monkeypatch.delenv("TIDYDRAWS_CONFIG", raising=False)
    cfg = load_config()
    assert cfg == AppConfig()
    assert cfg.reshape.draw_indices == [".chain", ".iteration", ".draw"]
    assert cfg.summary.widths == [0.95]
    assert cfg.compare.comparison == "default"


def test_load_config_merges_overrides(monkeypatch):
    base = """
reshape:
  variable_column: "${TIDYDRAWS_VARIABLE}"
  drop_indices: false
summary:
  point: mean
  widths: [0.5, 0.9]
"""
    override = """
reshape:
  drop_indices: true
summary:
  interval: hdi
"""
    with tempfile.TemporaryDirectory() as tmpdir:
        monkeypatch.setenv("TIDYDRAWS_VARIABLE", "term")
        base_path = Path(tmpdir) / "base.yaml"
        override_path = Path(tmpdir) / "override.yaml"
        base_path.write_text(base, encoding="utf-8")
        override_path.write_text(override, encoding="utf-8")

        cfg = load_config([base_path, override_path])
        assert cfg.reshape.variable_column == "term"
        assert cfg.reshape.drop_indices is True
        assert cfg.summary.point == "mean"
        assert cfg.summary.interval == "hdi"
        assert cfg.summary.widths == [0.5, 0.9]


def test_load_config_single_path(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("compare:\n  comparison: control\n", encoding="utf-8")
    assert load_config(path).compare.comparison == "control"


def test_load_config_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_load_config_rejects_unknown_point(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("summary:\n  point: max\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_config(path)


@pytest.mark.parametrize("widths", [[], [0.0], [1.0], [0.5, 1.2]])
def test_summary_widths_validated(widths):
    with pytest.raises(ValidationError, match="widths"):
        SummaryConfig(widths=widths)


def test_reshape_draw_indices_validated():
    with pytest.raises(ValidationError):
        ReshapeConfig(draw_indices=[])
    with pytest.raises(ValidationError):
        ReshapeConfig(draw_indices=[".draw", ".draw"])


def test_reshape_sep_must_compile():
    with pytest.raises(ValidationError, match="regular expression"):
        ReshapeConfig(sep="[")


def test_load_config_from_environment(monkeypatch, tmp_path):
    first = tmp_path / "first.yaml"
    second = tmp_path / "second.yaml"
    first.write_text("summary:\n  point: mode\n  interval: hdi\n", encoding="utf-8")
    second.write_text("summary:\n  point: mean\n", encoding="utf-8")
    monkeypatch.setenv("TIDYDRAWS_CONFIG", os.pathsep.join([str(first), str(second)]))

    cfg = load_config()
    assert cfg.summary.point == "mean"
    assert cfg.summary.interval == "hdi"


def test_config_paths_explicit_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("TIDYDRAWS_CONFIG", str(tmp_path / "ignored.yaml"))
    assert config_paths(tmp_path / "used.yaml") == [tmp_path / "used.yaml"]


def test_load_config_rejects_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- reshape\n- summary\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_config(path)
