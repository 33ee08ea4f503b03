#!/usr/bin/env python3
"""ffafir command line interface.

Usage:
    python -m ffafir verify
    python -m ffafir verify --lanes 4 --arithmetic float --block-size 37
    python -m ffafir resources 64 128 256 512
    python -m ffafir show-config -c config/ffafir.yaml
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Any

import numpy as np
import yaml

from ffafir.config import (
    AppConfig,
    EngineConfig,
    FilterConfig,
    LoggingConfig,
    SignalConfig,
    config_to_dict,
    load_config,
    save_config,
)
from ffafir.design import kaiser_lowpass
from ffafir.dsp.coefficients import adapt
from ffafir.dsp.ffa import FFAFilter
from ffafir.dsp.reference import reference_filter
from ffafir.dsp.resources import estimate_dsp, estimate_for_filter
from ffafir.errors import FFAError
from ffafir.signals import STIMULI, to_fixed, verification_signal
from ffafir.typing import NDArrayAny
from ffafir.utils.log_levels import parse_log_level
from ffafir.utils.profiler import Profiler

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_TAPS = (64, 128, 256, 512)


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    overrides: dict[str, Any] = {}
    for section, key in (
        ("filter", "lanes"),
        ("filter", "coefficient_width"),
        ("filter", "filter_order"),
        ("engine", "arithmetic"),
        ("engine", "block_size"),
        ("signal", "samples"),
        ("signal", "stimulus"),
    ):
        value = getattr(args, key, None)
        if value is not None:
            overrides.setdefault(section, {})[key] = value
    if getattr(args, "parallel", False):
        overrides.setdefault("engine", {})["parallel"] = True
    if getattr(args, "profile", False):
        overrides.setdefault("engine", {})["profile"] = True
    if not overrides:
        return cfg

    # Rebuild the touched sections so their validation runs again
    data = config_to_dict(cfg)
    for section, values in overrides.items():
        data[section].update(values)
    return AppConfig(
        filter=FilterConfig(**data["filter"]),
        engine=EngineConfig(**data["engine"]),
        signal=SignalConfig(**data["signal"]),
        logging=LoggingConfig(**data["logging"]),
    )


def _run_blocks(ffa: FFAFilter, x: NDArrayAny, block_size: int) -> NDArrayAny:
    if block_size <= 0:
        return ffa.process(x)
    return np.concatenate([ffa.process(x[i : i + block_size]) for i in range(0, x.size, block_size)])


def cmd_verify(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Filter a test signal through the FFA datapath and compare with the reference."""
    fc, ec, sc = cfg.filter, cfg.engine, cfg.signal

    real_taps = kaiser_lowpass(fc.filter_order, fc.cutoff_hz, fc.sample_rate_hz, fc.kaiser_beta)
    x_real = verification_signal(
        sc.samples,
        sc.amplitude,
        sc.impulse_period,
        sc.snr_db,
        sc.seed,
        signal_power_db=sc.signal_power_db,
        stimulus=sc.stimulus,
    )

    if ec.arithmetic == "fixed":
        taps: NDArrayAny = adapt(real_taps, fc.coefficient_width)
        x: NDArrayAny = to_fixed(x_real)
    else:
        taps = real_taps
        x = x_real

    profiler = Profiler("ffa") if ec.profile else None
    with FFAFilter(
        taps,
        fc.lanes,
        parallel=ec.parallel,
        max_workers=ec.max_workers,
        profiler=profiler,
    ) as ffa:
        y = _run_blocks(ffa, x, ec.block_size)
        subfilters = ffa.subfilter_count

    y_ref = reference_filter(taps, x)
    err = float(np.max(np.abs(y - y_ref))) if y.size else 0.0
    scale = float(np.max(np.abs(y_ref))) if y_ref.size else 0.0

    if ec.arithmetic == "fixed":
        ok = err == 0.0
    else:
        ok = err <= 1e-9 * max(scale, 1.0)

    est = estimate_for_filter(fc.filter_order)
    print(
        f"taps={fc.filter_order} lanes={fc.lanes} arithmetic={ec.arithmetic} "
        f"samples={x.size} sub-filters={subfilters}"
    )
    print(f"max |ffa - reference| = {err:.3g} (peak output {scale:.6g})")
    if fc.lanes == 2:
        print(
            f"DSP estimate: direct={est.direct_dsps} ffa={est.ffa_dsps} "
            f"saved={est.saved_percent:.3f}%"
        )
    if profiler is not None:
        report = profiler.report()
        if report:
            print(report)

    if not ok:
        logger.error("FFA output does not match the reference filter")
        return 1
    print("OK")
    return 0


def cmd_resources(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Print the DSP saving table for the 2-lane FFA."""
    taps = args.taps or list(DEFAULT_RESOURCE_TAPS)
    print(f"{'taps':>6} | {'direct':>7} | {'ffa':>7} | saved %")
    for t in taps:
        est = estimate_dsp(t)
        print(f"{t:6d} | {est.direct_dsps:7d} | {est.ffa_dsps:7d} | {est.saved_percent:.3f}")
    return 0


def cmd_show_config(args: argparse.Namespace, cfg: AppConfig) -> int:
    """Dump the effective configuration."""
    print(yaml.safe_dump(config_to_dict(cfg), default_flow_style=False, sort_keys=False), end="")
    if args.write:
        save_config(cfg, args.write)
        logger.info(f"Saved configuration to {args.write}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ffafir",
        description="Fast Filter Architecture parallel FIR model",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-c",
        "--config",
        default=os.environ.get("FFAFIR_CONFIG"),
        help="Path to YAML config file (default: $FFAFIR_CONFIG, else built-in defaults)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    p_verify = subparsers.add_parser("verify", help="Compare FFA output with the reference FIR")
    p_verify.add_argument("-L", "--lanes", type=int, help="Lane count (power of two)")
    p_verify.add_argument("-w", "--coefficient-width", type=int, help="Coefficient width in bits")
    p_verify.add_argument("-n", "--filter-order", type=int, help="Number of taps")
    p_verify.add_argument("-s", "--samples", type=int, help="Test signal length")
    p_verify.add_argument("--arithmetic", choices=["fixed", "float"], help="Arithmetic path")
    p_verify.add_argument("--stimulus", choices=list(STIMULI), help="Test signal shape")
    p_verify.add_argument("--block-size", type=int, help="Samples per streaming call (0 = one call)")
    p_verify.add_argument("--parallel", action="store_true", help="Run sub-filters on a thread pool")
    p_verify.add_argument("--profile", action="store_true", help="Print stage timings")
    p_verify.set_defaults(func=cmd_verify)

    p_res = subparsers.add_parser("resources", help="DSP block estimate for the 2-lane FFA")
    p_res.add_argument("taps", type=int, nargs="*", help="Taps per sub-filter")
    p_res.set_defaults(func=cmd_resources)

    p_show = subparsers.add_parser("show-config", help="Print the effective configuration")
    p_show.add_argument("--write", metavar="PATH", help="Also save the configuration to PATH")
    p_show.set_defaults(func=cmd_show_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        cfg = _apply_overrides(load_config(args.config), args)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else parse_log_level(cfg.logging.level),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        result = args.func(args, cfg)
    except (FFAError, ValueError) as exc:
        logger.error(f"{args.command} failed: {exc}")
        return 1
    return 0 if result is None else int(result)


if __name__ == "__main__":
    sys.exit(main())
