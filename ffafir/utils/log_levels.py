from __future__ import annotations

import logging

_LEVELS: dict[str, int] = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def parse_log_level(value: str | int | None, default: int = logging.INFO) -> int:
    """Turn a config/CLI log level ("debug", "WARN", "10", 20) into a number.

    Unknown names fall back to ``default``.
    """
    if value is None:
        return default
    if isinstance(value, int):
        return value
    raw = value.strip().upper()
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    return _LEVELS.get(raw, default)
