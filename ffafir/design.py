"""Kaiser-window lowpass taps.

Stand-in for an external coefficient-design flow so the CLI can run a
self-contained verification. Defaults: 128 taps, 20 Hz cutoff at 100 Hz
sampling, Kaiser beta 3.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import numpy as np
from scipy import signal

from ffafir.typing import NDArrayFloat

logger = logging.getLogger(__name__)


@lru_cache(maxsize=32)
def _firwin_cached(
    num_taps: int, cutoff_hz: float, sample_rate_hz: float, beta: float
) -> tuple[float, ...]:
    taps = signal.firwin(num_taps, cutoff_hz, window=("kaiser", beta), fs=sample_rate_hz)
    return tuple(float(t) for t in taps)


def kaiser_lowpass(
    num_taps: int,
    cutoff_hz: float = 20.0,
    sample_rate_hz: float = 100.0,
    beta: float = 3.0,
) -> NDArrayFloat:
    """Design a windowed-sinc lowpass FIR.

    Args:
        num_taps: Filter length N
        cutoff_hz: -6 dB cutoff frequency in Hz
        sample_rate_hz: Sample rate in Hz
        beta: Kaiser window shape parameter

    Returns:
        float64 taps normalized to unity DC gain
    """
    if num_taps < 1:
        raise ValueError(f"num_taps must be >= 1 (got {num_taps})")
    nyquist = sample_rate_hz / 2.0
    if not 0.0 < cutoff_hz < nyquist:
        raise ValueError(f"cutoff {cutoff_hz} Hz must lie in (0, {nyquist}) Hz")

    taps = np.array(_firwin_cached(num_taps, cutoff_hz, sample_rate_hz, beta))
    logger.debug(
        f"Designed {num_taps}-tap Kaiser lowpass: fc={cutoff_hz} Hz, fs={sample_rate_hz} Hz, beta={beta}"
    )
    return taps
