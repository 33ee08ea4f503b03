"""Tests for config loading: defaults, YAML, local overlay and environment."""
from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from ffafir.config import (
    AppConfig,
    coerce_env_value,
    load_config,
    local_config_path,
    save_config,
)


@pytest.fixture(autouse=True)
def no_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("ffafir.config.os_environ_items", lambda: [])


def _write(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_defaults_without_file() -> None:
    cfg = load_config(None)
    assert cfg == AppConfig()
    assert cfg.filter.lanes == 2
    assert cfg.filter.coefficient_width == 24
    assert cfg.engine.arithmetic == "fixed"


def test_shipped_config_matches_defaults(config_dir: Path) -> None:
    assert load_config(str(config_dir / "ffafir.yaml")) == AppConfig()


def test_missing_file_uses_defaults(tmp_path: Path) -> None:
    assert load_config(str(tmp_path / "absent.yaml")) == AppConfig()


def test_load_config_overlays_local_file(tmp_path: Path) -> None:
    base = _write(tmp_path / "ffafir.yaml", {"filter": {"lanes": 4, "filter_order": 64}})
    _write(tmp_path / "ffafir.local.yaml", {"filter": {"filter_order": 32}, "engine": {"parallel": True}})

    cfg = load_config(str(base))

    assert cfg.filter.lanes == 4
    assert cfg.filter.filter_order == 32
    assert cfg.engine.parallel is True


def test_local_config_path() -> None:
    assert local_config_path(Path("/etc/ffafir.yaml")) == Path("/etc/ffafir.local.yaml")


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    base = _write(tmp_path / "ffafir.yaml", {"filter": {"lanes": 4}})
    monkeypatch.setattr(
        "ffafir.config.os_environ_items",
        lambda: [
            ("FFAFIR__FILTER__LANES", "8"),
            ("FFAFIR__ENGINE__PARALLEL", "true"),
            ("FFAFIR__ENGINE__ARITHMETIC", "float"),
            ("FFAFIR__BOGUS__KEY", "1"),
            ("FFAFIR__TOO__MANY__PARTS", "1"),
            ("UNRELATED", "x"),
        ],
    )

    cfg = load_config(str(base))

    assert cfg.filter.lanes == 8
    assert cfg.engine.parallel is True
    assert cfg.engine.arithmetic == "float"


def test_coerce_env_value() -> None:
    assert coerce_env_value("TRUE") is True
    assert coerce_env_value("false") is False
    assert coerce_env_value("12") == 12
    assert coerce_env_value("-3.5") == -3.5
    assert coerce_env_value("fixed") == "fixed"


@pytest.mark.parametrize(
    "data",
    [
        {"filter": {"lanes": 3}},
        {"filter": {"lanes": 1}},
        {"filter": {"coefficient_width": 1}},
        {"filter": {"coefficient_width": 64}},
        {"filter": {"filter_order": 0}},
        {"filter": {"cutoff_hz": 60.0}},
        {"engine": {"arithmetic": "double"}},
        {"engine": {"max_workers": 0}},
        {"engine": {"block_size": -1}},
        {"signal": {"samples": 0}},
        {"signal": {"signal_power_db": "peak"}},
        {"signal": {"stimulus": "square"}},
        {"filter": {"no_such_key": 1}},
        {"filter": [1, 2]},
    ],
)
def test_invalid_values_rejected(tmp_path: Path, data: dict) -> None:
    path = _write(tmp_path / "bad.yaml", data)
    with pytest.raises(ValueError):
        load_config(str(path))


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_unknown_section_warns(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = _write(tmp_path / "extra.yaml", {"capture": {"x": 1}})
    with caplog.at_level(logging.WARNING, logger="ffafir.config"):
        cfg = load_config(str(path))
    assert cfg == AppConfig()
    assert "capture" in caplog.text


def test_save_config_round_trip(tmp_path: Path) -> None:
    cfg = load_config(None)
    cfg.filter.lanes = 4
    cfg.signal.seed = None
    path = tmp_path / "saved.yaml"

    save_config(cfg, str(path))

    assert load_config(str(path)) == cfg


def test_measured_noise_power_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "ffafir.config.os_environ_items",
        lambda: [
            ("FFAFIR__SIGNAL__SIGNAL_POWER_DB", "measured"),
            ("FFAFIR__SIGNAL__STIMULUS", "chirp"),
        ],
    )
    cfg = load_config(None)
    assert cfg.signal.signal_power_db == "measured"
    assert cfg.signal.stimulus == "chirp"
