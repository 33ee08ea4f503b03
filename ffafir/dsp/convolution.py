"""Streaming direct-form FIR convolution.

``StreamingFIR`` is the per-sub-filter state of the FFA datapath: it keeps the
last ``len(taps) - 1`` input samples so a signal can be fed block by block and
still produce exactly ``conv(h, x)[n] = sum_k h[k] * x[n - k]`` with zero
history before the first sample.

Integer inputs stay in int64 end to end, so the hardware-accurate path is
bit-exact as long as the accumulator fits in 63 bits. A warning is logged when
a block could exceed that.
"""

from __future__ import annotations

import logging

import numpy as np

from ffafir.errors import EmptyInputError
from ffafir.typing import NDArrayAny, SignalLike

logger = logging.getLogger(__name__)

_INT64_LIMIT = float(np.iinfo(np.int64).max)


def as_signal(x: SignalLike) -> NDArrayAny:
    """Coerce to a 1-D array, promoting integer and bool inputs to int64."""
    arr = np.asarray(x)
    if arr.ndim != 1:
        raise ValueError(f"signal must be 1-D (got shape {arr.shape})")
    if arr.dtype.kind in "biu":
        return arr.astype(np.int64)
    if arr.dtype.kind not in "fc":
        raise TypeError(f"unsupported sample dtype {arr.dtype}")
    return arr


class StreamingFIR:
    """Causal FIR convolution that carries its history across calls.

    Args:
        taps: Filter coefficients (at least one)
        name: Label used in log messages
    """

    def __init__(self, taps: SignalLike, name: str = "fir"):
        self.taps = as_signal(taps).copy()
        if self.taps.size == 0:
            raise ValueError("FIR filter needs at least one tap")
        self.taps.setflags(write=False)
        self.name = name
        self._tap_l1 = float(np.sum(np.abs(self.taps)))
        self._history: NDArrayAny = np.zeros(self.taps.size - 1, dtype=self.taps.dtype)

    @property
    def history(self) -> NDArrayAny:
        """Copy of the inputs retained for the next call (oldest first)."""
        return self._history.copy()

    def process(self, x: SignalLike) -> NDArrayAny:
        """Filter one block, continuing from the previous block's history.

        Args:
            x: Input block (non-empty)

        Returns:
            Output block, same length as ``x``

        Raises:
            EmptyInputError: If ``x`` has no samples
        """
        block = as_signal(x)
        if block.size == 0:
            raise EmptyInputError(f"{self.name}: zero-length input block")

        if block.dtype.kind in "iu" and self.taps.dtype.kind in "iu":
            self._check_headroom(block)

        # state = history + new samples; 'valid' keeps exactly one output per input
        state = np.concatenate((self._history, block))
        y = np.convolve(state, self.taps, mode="valid")

        n_hist = self.taps.size - 1
        self._history = state[state.size - n_hist:] if n_hist else state[:0]
        return y

    def reset(self) -> None:
        """Zero the history."""
        self._history = np.zeros(self.taps.size - 1, dtype=self.taps.dtype)

    def _check_headroom(self, block: NDArrayAny) -> None:
        peak = max(
            float(np.max(np.abs(block))),
            float(np.max(np.abs(self._history))) if self._history.size else 0.0,
        )
        if peak * self._tap_l1 >= _INT64_LIMIT:
            logger.warning(
                f"{self.name}: accumulator may overflow int64 "
                f"(peak input {peak:.0f}, tap L1 norm {self._tap_l1:.0f})"
            )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, taps={self.taps.size})"


def causal_convolve(h: SignalLike, x: SignalLike) -> NDArrayAny:
    """One-shot causal convolution truncated to the input length.

    Args:
        h: Filter taps
        x: Input signal (non-empty)

    Returns:
        ``conv(h, x)[:len(x)]``
    """
    return StreamingFIR(h).process(x)
