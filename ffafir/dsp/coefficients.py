"""Fixed-point coefficient quantization.

Turns a real-valued impulse response into the integer taps a hardware
multiply-accumulate array would hold:

1. Normalize by the largest tap magnitude
2. Scale to full scale, ``2**(width - 1) - 1``
3. Round half away from zero

The largest-magnitude tap therefore always lands on +/- full scale.
"""

from __future__ import annotations

import logging

import numpy as np

from ffafir.errors import DegenerateFilterError
from ffafir.typing import NDArrayInt, SignalLike

logger = logging.getLogger(__name__)

MIN_WIDTH = 2
# Scaling runs in float64, which holds integers exactly up to 2**53
MAX_WIDTH = 53


def full_scale(width: int) -> int:
    """Largest positive value of a signed ``width``-bit integer."""
    if not MIN_WIDTH <= width <= MAX_WIDTH:
        raise ValueError(
            f"coefficient width must be in [{MIN_WIDTH}, {MAX_WIDTH}] bits (got {width})"
        )
    return (1 << (width - 1)) - 1


def round_half_away(x: np.ndarray) -> NDArrayInt:
    """Round to nearest integer, ties away from zero.

    ``np.round`` rounds ties to even, which fixed-point tooling does not.
    """
    whole = np.trunc(x)
    # x - trunc(x) is exact, unlike |x| + 0.5
    away = np.abs(x - whole) >= 0.5
    return (whole + np.sign(x) * away).astype(np.int64)


def adapt(real_coeffs: SignalLike, width: int) -> NDArrayInt:
    """Quantize a real impulse response to signed integer taps.

    Args:
        real_coeffs: Real-valued filter taps (any scale)
        width: Coefficient width in bits, including sign

    Returns:
        int64 array with the max-magnitude tap at +/- ``2**(width-1) - 1``

    Raises:
        DegenerateFilterError: If every tap is zero
        ValueError: If the input is empty or non-finite, or width is out of range

    Example:
        >>> adapt([0.5, -1.0, 0.25], 8)
        array([  64, -127,   32])
    """
    scale = full_scale(width)
    h = np.asarray(real_coeffs, dtype=np.float64)
    if h.ndim != 1:
        raise ValueError(f"coefficients must be 1-D (got shape {h.shape})")
    if h.size == 0:
        raise ValueError("coefficient vector is empty")
    if not np.isfinite(h).all():
        raise ValueError("coefficient vector contains non-finite values")

    peak = float(np.max(np.abs(h)))
    if peak == 0.0:
        raise DegenerateFilterError("all coefficients are zero, cannot normalize")

    taps = round_half_away(h / peak * scale)
    logger.debug(f"Quantized {h.size} taps to {width} bits (full scale {scale})")
    return taps


class FixedPointCoefficientAdapter:
    """Quantizer bound to a single coefficient width."""

    def __init__(self, width: int):
        self.width = width
        self.full_scale = full_scale(width)

    def __call__(self, real_coeffs: SignalLike) -> NDArrayInt:
        return adapt(real_coeffs, self.width)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(width={self.width})"
