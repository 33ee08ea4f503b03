import logging

from ffafir.utils.log_levels import parse_log_level
from ffafir.utils.profiler import Profiler, StageStats


def test_parse_log_level_named() -> None:
    assert parse_log_level("info", logging.DEBUG) == logging.INFO
    assert parse_log_level("WARN", logging.INFO) == logging.WARNING
    assert parse_log_level(" debug ") == logging.DEBUG


def test_parse_log_level_numeric() -> None:
    assert parse_log_level("10", logging.INFO) == 10
    assert parse_log_level(30) == 30


def test_parse_log_level_unknown_uses_default() -> None:
    assert parse_log_level("nope", logging.WARNING) == logging.WARNING
    assert parse_log_level(None, logging.ERROR) == logging.ERROR
    assert parse_log_level("") == logging.INFO


def test_stage_stats_min_max() -> None:
    s = StageStats()
    for ns in (3000, 1000, 2000):
        s.record(ns)
    assert s.calls == 3
    assert s.min_ns == 1000
    assert s.max_ns == 3000
    assert s.avg_us == 2.0


def test_profiler_measures_and_resets(caplog) -> None:
    p = Profiler("unit")
    with p.measure("stage"):
        pass
    p.add_samples(42)
    assert p.stats("stage").calls == 1
    with caplog.at_level(logging.INFO, logger="ffafir.utils.profiler"):
        text = p.report()
    assert text is not None
    assert "[PROFILE] unit" in text
    assert "42 samples" in text
    assert "[PROFILE] unit" in caplog.text
    assert p.stats("stage").calls == 0
    assert p.report() is None


def test_disabled_profiler_records_nothing() -> None:
    p = Profiler("off", enabled=False)
    with p.measure("stage"):
        pass
    assert p.stats("stage").calls == 0
    assert p.report() is None
