"""Test stimulus for verification runs.

Stand-in for an external signal source. ``verification_signal`` is an impulse
marker every ``period + 1`` samples (or a chirp) with white noise on top;
``to_fixed`` rounds it to integers for the fixed-point path.
"""

from __future__ import annotations

import numpy as np

from ffafir.dsp.coefficients import round_half_away
from ffafir.typing import NDArrayFloat, NDArrayInt

MEASURED = "measured"
STIMULI = ("impulse", "chirp")


def impulse_train(n: int, period: int = 200, amplitude: float = 2**14 - 1) -> NDArrayFloat:
    """Impulses of ``amplitude`` at indices 0, period+1, 2*(period+1), ..."""
    if n < 0:
        raise ValueError(f"length must be >= 0 (got {n})")
    if period < 0:
        raise ValueError(f"period must be >= 0 (got {period})")
    x = np.zeros(n, dtype=np.float64)
    x[:: period + 1] = amplitude
    return x


def chirp(
    n: int,
    amplitude: float = 2**14 - 1,
    start_cycles: float = 2.0,
    sweep: float = 0.25,
    envelope_cycles: float = 1.0,
) -> NDArrayFloat:
    """Linear chirp under a half-sine envelope.

    ``sweep`` is the frequency slope as a fraction of the sample rate per
    record; the record is ``n`` samples long.
    """
    i = np.arange(1, n + 1, dtype=np.float64)
    phase = (start_cycles * i + sweep * i * i / 2.0) * 2.0 * np.pi / n
    envelope = np.sin(i * envelope_cycles * np.pi / n)
    return amplitude * np.cos(phase) * envelope


def add_awgn(
    x: NDArrayFloat,
    snr_db: float,
    rng: np.random.Generator | None = None,
    signal_power_db: float | str = 0.0,
) -> NDArrayFloat:
    """Add white Gaussian noise at ``snr_db`` below a reference signal power.

    Args:
        x: Clean signal
        snr_db: Signal-to-noise ratio in dB
        rng: Noise source (fresh generator when None)
        signal_power_db: Reference power in dBW, or ``"measured"`` to use the
            mean power of ``x``. The default of 0 dBW gives a noise variance
            of ``10**(-snr_db / 10)`` whatever the amplitude of ``x``.

    Returns:
        float64 copy of ``x`` with noise added
    """
    if x.size == 0:
        return x.astype(np.float64)
    if signal_power_db == MEASURED:
        power = float(np.mean(np.abs(x) ** 2))
        if power == 0.0:
            return x.astype(np.float64)
    elif isinstance(signal_power_db, str):
        raise ValueError(f"signal power must be a dBW value or {MEASURED!r} (got {signal_power_db!r})")
    else:
        power = 10.0 ** (signal_power_db / 10.0)
    rng = rng if rng is not None else np.random.default_rng()
    noise_power = power / (10.0 ** (snr_db / 10.0))
    return x + rng.standard_normal(x.size) * np.sqrt(noise_power)


def to_fixed(x: NDArrayFloat) -> NDArrayInt:
    """Round samples half away from zero into int64."""
    return round_half_away(np.asarray(x, dtype=np.float64))


def verification_signal(
    n: int,
    amplitude: float = 2**14 - 1,
    period: int = 200,
    snr_db: float = -35.0,
    seed: int | None = 42,
    signal_power_db: float | str = 0.0,
    stimulus: str = "impulse",
) -> NDArrayFloat:
    """Noisy impulse train (or chirp) used by ``ffafir verify``."""
    if stimulus == "impulse":
        clean = impulse_train(n, period, amplitude)
    elif stimulus == "chirp":
        clean = chirp(n, amplitude)
    else:
        raise ValueError(f"stimulus must be one of {STIMULI} (got {stimulus!r})")
    rng = np.random.default_rng(seed)
    return add_awgn(clean, snr_db, rng, signal_power_db)
