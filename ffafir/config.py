from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml

from ffafir.dsp.coefficients import MAX_WIDTH, MIN_WIDTH
from ffafir.dsp.ffa import is_supported_lane_count
from ffafir.signals import MEASURED, STIMULI

logger = logging.getLogger(__name__)

Arithmetic = Literal["fixed", "float"]

ENV_PREFIX = "FFAFIR__"


@dataclass
class FilterConfig:
    # Parallelism L; a power of two >= 2
    lanes: int = 2
    # Coefficient width in bits, including sign
    coefficient_width: int = 24
    # Filter order N (tap count)
    filter_order: int = 128
    # Lowpass design used by `ffafir verify`
    cutoff_hz: float = 20.0
    sample_rate_hz: float = 100.0
    kaiser_beta: float = 3.0

    def __post_init__(self) -> None:
        if not is_supported_lane_count(self.lanes):
            raise ValueError(f"filter.lanes must be a power of two >= 2 (got {self.lanes})")
        if not MIN_WIDTH <= self.coefficient_width <= MAX_WIDTH:
            raise ValueError(
                f"filter.coefficient_width must be in [{MIN_WIDTH}, {MAX_WIDTH}] "
                f"(got {self.coefficient_width})"
            )
        if self.filter_order < 1:
            raise ValueError(f"filter.filter_order must be >= 1 (got {self.filter_order})")
        if not 0.0 < self.cutoff_hz < self.sample_rate_hz / 2.0:
            raise ValueError(
                f"filter.cutoff_hz must lie in (0, {self.sample_rate_hz / 2.0}) (got {self.cutoff_hz})"
            )


@dataclass
class EngineConfig:
    # Run the three top-level sub-filters on a thread pool
    parallel: bool = False
    max_workers: int = 3
    # "fixed" quantizes taps and input to integers, "float" keeps float64
    arithmetic: Arithmetic = "fixed"
    # Samples per process() call; 0 feeds the whole signal at once
    block_size: int = 0
    profile: bool = False

    def __post_init__(self) -> None:
        if self.arithmetic not in ("fixed", "float"):
            raise ValueError(f"engine.arithmetic must be 'fixed' or 'float' (got {self.arithmetic!r})")
        if self.max_workers < 1:
            raise ValueError(f"engine.max_workers must be >= 1 (got {self.max_workers})")
        if self.block_size < 0:
            raise ValueError(f"engine.block_size must be >= 0 (got {self.block_size})")


@dataclass
class SignalConfig:
    samples: int = 512
    amplitude: float = 2**14 - 1
    impulse_period: int = 200
    snr_db: float = -35.0
    seed: int | None = 42
    # Noise reference power in dBW, or "measured" for the mean power of the stimulus
    signal_power_db: float | str = 0.0
    # "impulse" marker train or "chirp"
    stimulus: str = "impulse"

    def __post_init__(self) -> None:
        if self.samples < 1:
            raise ValueError(f"signal.samples must be >= 1 (got {self.samples})")
        if not math.isfinite(self.snr_db):
            raise ValueError("signal.snr_db must be finite")
        if isinstance(self.signal_power_db, str):
            if self.signal_power_db != MEASURED:
                raise ValueError(
                    f"signal.signal_power_db must be a number or {MEASURED!r} "
                    f"(got {self.signal_power_db!r})"
                )
        elif not math.isfinite(self.signal_power_db):
            raise ValueError("signal.signal_power_db must be finite")
        if self.stimulus not in STIMULI:
            raise ValueError(f"signal.stimulus must be one of {STIMULI} (got {self.stimulus!r})")


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    filter: FilterConfig = field(default_factory=FilterConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    signal: SignalConfig = field(default_factory=SignalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTIONS: dict[str, type[Any]] = {
    "filter": FilterConfig,
    "engine": EngineConfig,
    "signal": SignalConfig,
    "logging": LoggingConfig,
}


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping ({path})")
        return data


def _overlay(dst: dict[str, Any], src: dict[str, Any]) -> dict[str, Any]:
    for k, v in src.items():
        if isinstance(v, dict) and isinstance(dst.get(k), dict):
            _overlay(dst[k], v)
        else:
            dst[k] = v
    return dst


def local_config_path(path: Path) -> Path:
    """``ffafir.yaml`` -> ``ffafir.local.yaml`` in the same directory."""
    return path.with_name(f"{path.stem}.local{path.suffix}")


def load_config(path_str: str | None = None) -> AppConfig:
    """Load configuration: defaults, YAML file, ``.local`` overlay, environment.

    Environment overrides use ``FFAFIR__SECTION__KEY``, e.g.
    ``FFAFIR__FILTER__LANES=4``.
    """
    raw: dict[str, Any] = {}
    if path_str:
        path = Path(path_str)
        raw = _read_yaml(path)
        local = local_config_path(path)
        if local.exists():
            logger.debug(f"Overlaying local config {local}")
            _overlay(raw, _read_yaml(local))

    for k, v in os_environ_items():
        if not k.startswith(ENV_PREFIX):
            continue
        parts = k[len(ENV_PREFIX):].split("__")
        if len(parts) != 2:
            continue
        section, key = (p.lower() for p in parts)
        if section not in _SECTIONS:
            continue
        if not isinstance(raw.get(section), dict):
            raw[section] = {}
        raw[section][key] = coerce_env_value(v)

    unknown = set(raw) - set(_SECTIONS)
    if unknown:
        logger.warning(f"Ignoring unknown config sections: {sorted(unknown)}")

    sections: dict[str, Any] = {}
    for name, cls in _SECTIONS.items():
        data = raw.get(name) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config section '{name}' must be a mapping")
        try:
            sections[name] = cls(**data)
        except TypeError as exc:
            raise ValueError(f"Invalid keys in config section '{name}': {exc}") from exc
    return AppConfig(**sections)


def coerce_env_value(val: str) -> Any:
    # bool/int/float coercion for convenience
    lower = val.lower()
    if lower in {"true", "false"}:
        return lower == "true"
    try:
        return int(val)
    except ValueError:
        pass
    try:
        return float(val)
    except ValueError:
        return val


def os_environ_items() -> list[tuple[str, str]]:
    # Wrapped for testability
    from os import environ

    return [(k, v) for k, v in environ.items()]


def config_to_dict(config: AppConfig) -> dict[str, Any]:
    return asdict(config)


def save_config(config: AppConfig, path_str: str) -> None:
    """Write the effective configuration to a YAML file."""
    path = Path(path_str)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(config_to_dict(config), f, default_flow_style=False, sort_keys=False)
