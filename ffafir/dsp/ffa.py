"""Fast Filter Architecture (FFA) parallel FIR.

A 2-lane FFA splits the taps into even/odd phases H0, H1 and the input into
X0, X1, then replaces the four sub-filters of the direct 2-parallel form

    Y0 = H0*X0 + z^-1 H1*X1
    Y1 = H0*X1 + H1*X0

with three:

    A0 = H0*X0
    A1 = H1*X1
    S  = (H0+H1)*(X0+X1)
    Y0[n] = A0[n] + A1[n-1]
    Y1[n] = S[n] - A0[n] - A1[n]

because (H0+H1)*(X0+X1) expands to all four cross products. The ``n-1`` term
is held in an AlignmentBuffer that starts at zero, so Y0[0] == A0[0].

Larger power-of-two lane counts nest the same structure: each of the three
sub-filters of an L-lane FFA is itself an L/2-lane FFA, giving 3**log2(L)
leaf convolutions instead of L**2.

Reference: K. K. Parhi, "VLSI Digital Signal Processing Systems", ch. 9
"""

from __future__ import annotations

import contextlib
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, ContextManager, Protocol, Sequence

import numpy as np

from ffafir.dsp.coefficients import adapt
from ffafir.dsp.convolution import StreamingFIR, as_signal, causal_convolve
from ffafir.dsp.lanes import merge, split
from ffafir.errors import EmptyInputError, LaneCountMismatchError, LengthMismatchError
from ffafir.typing import NDArrayAny, SignalLike
from ffafir.utils.profiler import Profiler

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 3

_SUBFILTER_LABELS = ("h0x0", "h1x1", "sum")


class SubFilter(Protocol):
    def process(self, x: SignalLike) -> NDArrayAny: ...

    def reset(self) -> None: ...


class AlignmentBuffer:
    """One-sample delay line aligning A1[n-1] with A0[n].

    Holds a single sample, zero on construction and after ``reset()``.
    """

    def __init__(self, dtype: Any = np.int64):
        self._dtype = np.dtype(dtype)
        self._held: NDArrayAny = np.zeros(1, dtype=self._dtype)

    def delay(self, block: NDArrayAny) -> NDArrayAny:
        """Return ``block`` delayed by one sample and keep its last sample."""
        if block.size == 0:
            return block.copy()
        out = np.concatenate((self._held, block[:-1]))
        self._held = block[-1:].copy()
        return out

    def peek(self) -> NDArrayAny:
        """The held sample as a length-1 array."""
        return self._held.copy()

    def reset(self) -> None:
        self._held = np.zeros(1, dtype=self._dtype)


def is_supported_lane_count(lanes: int) -> bool:
    return lanes >= 2 and (lanes & (lanes - 1)) == 0


def _pad_to(x: NDArrayAny, size: int) -> NDArrayAny:
    if x.size >= size:
        return x
    return np.concatenate((x, np.zeros(size - x.size, dtype=x.dtype)))


def _check_interleave(even: NDArrayAny, odd: NDArrayAny, what: str) -> None:
    if even.size - odd.size not in (0, 1):
        raise LengthMismatchError(
            f"{what} lanes of {even.size} and {odd.size} samples do not interleave"
        )


class FFAFilter:
    """Streaming L-lane FFA FIR filter.

    Feed any number of blocks of any length through ``process``; the
    concatenated output equals the single-rate FIR of the concatenated input.
    A block that ends between the two phases of a lane pair emits the even
    output right away and finishes the pair with the next block's first
    sample.

    Args:
        taps: Filter coefficients (N >= 1)
        lanes: Parallelism, a power of two >= 2
        executor: Optional executor for the three top-level sub-filters
        parallel: Create (and own) a thread pool when no executor is given
        max_workers: Pool size when ``parallel`` is set
        profiler: Optional stage timer
        name: Label used in log messages
    """

    def __init__(
        self,
        taps: SignalLike,
        lanes: int = 2,
        *,
        executor: ThreadPoolExecutor | None = None,
        parallel: bool = False,
        max_workers: int = DEFAULT_MAX_WORKERS,
        profiler: Profiler | None = None,
        name: str = "ffa",
    ):
        self.taps = as_signal(taps).copy()
        if self.taps.size == 0:
            raise ValueError("FFA filter needs at least one tap")
        if not is_supported_lane_count(lanes):
            raise ValueError(f"lane count must be a power of two >= 2 (got {lanes})")
        self.taps.setflags(write=False)
        self.lanes = lanes
        self.name = name

        self._executor = executor
        self._owns_executor = False
        self._parallel = parallel or executor is not None
        self._max_workers = max_workers
        self._profiler = profiler

        h0, h1 = split(self.taps, 2)
        h1 = _pad_to(h1, h0.size)
        self._subfilters: tuple[SubFilter, ...] = tuple(
            self._make_subfilter(h, label)
            for h, label in zip((h0, h1, h0 + h1), _SUBFILTER_LABELS)
        )
        self._align = AlignmentBuffer(self.taps.dtype)
        self._pending: tuple[NDArrayAny, NDArrayAny] | None = None

        logger.debug(
            f"FFA filter {name}: {self.taps.size} taps, {lanes} lanes, "
            f"{self.subfilter_count} sub-filters of <= {-(-self.taps.size // lanes)} taps"
        )

    @classmethod
    def from_real(
        cls, real_coeffs: SignalLike, width: int, lanes: int = 2, **kwargs: Any
    ) -> FFAFilter:
        """Quantize real taps to ``width`` bits and build an integer filter."""
        return cls(adapt(real_coeffs, width), lanes, **kwargs)

    def _make_subfilter(self, h: NDArrayAny, label: str) -> SubFilter:
        name = f"{self.name}.{label}"
        if self.lanes == 2:
            return StreamingFIR(h, name=name)
        return FFAFilter(h, self.lanes // 2, name=name)

    @property
    def subfilters(self) -> tuple[SubFilter, ...]:
        """The three sub-filters feeding the combination stage."""
        return self._subfilters

    @property
    def subfilter_count(self) -> int:
        """Number of leaf convolutions, ``3**log2(lanes)``."""
        return sum(
            f.subfilter_count if isinstance(f, FFAFilter) else 1 for f in self._subfilters
        )

    @property
    def pending(self) -> bool:
        """True when the last block ended halfway through a lane pair."""
        return self._pending is not None

    def process(self, x: SignalLike) -> NDArrayAny:
        """Filter one block.

        Args:
            x: Input block (non-empty)

        Returns:
            Filtered block, same length as ``x``

        Raises:
            EmptyInputError: If ``x`` has no samples
        """
        block = as_signal(x)
        if block.size == 0:
            raise EmptyInputError(f"{self.name}: zero-length input block")

        pieces: list[NDArrayAny] = []
        if self._pending is not None:
            pieces.append(self._finish_pair(block[:1]))
            block = block[1:]

        n_pairs = block.size // 2
        if n_pairs:
            x0, x1 = split(block[: 2 * n_pairs], 2)
            a0, a1, s = self._run_subfilters(x0, x1, x0 + x1)
            with self._measure("combine"):
                y0 = a0 + self._align.delay(a1)
                y1 = s - a0 - a1
                pieces.append(merge([y0, y1]))

        if block.size % 2:
            pieces.append(self._start_pair(block[-1:]))

        if self._profiler is not None:
            self._profiler.add_samples(sum(p.size for p in pieces))
        return np.concatenate(pieces)

    def _start_pair(self, x0: NDArrayAny) -> NDArrayAny:
        # Y0[n] only needs A0[n] and the held A1[n-1]
        a0 = self._subfilters[0].process(x0)
        self._pending = (x0.copy(), a0)
        return a0 + self._align.peek()

    def _finish_pair(self, x1: NDArrayAny) -> NDArrayAny:
        assert self._pending is not None
        x0, a0 = self._pending
        a1 = self._subfilters[1].process(x1)
        s = self._subfilters[2].process(x0 + x1)
        self._align.delay(a1)
        self._pending = None
        return s - a0 - a1

    def _run_subfilters(
        self, x0: NDArrayAny, x1: NDArrayAny, xs: NDArrayAny
    ) -> tuple[NDArrayAny, ...]:
        inputs = (x0, x1, xs)
        with self._measure("subfilters"):
            if not self._parallel:
                return tuple(f.process(x) for f, x in zip(self._subfilters, inputs))
            executor = self._get_executor()
            futures = [executor.submit(f.process, x) for f, x in zip(self._subfilters, inputs)]
            # Join all three before combining
            return tuple(fut.result() for fut in futures)

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix=f"{self.name}-",
            )
            self._owns_executor = True
            logger.debug(f"FFA filter {self.name}: created executor with {self._max_workers} workers")
        return self._executor

    def _measure(self, stage: str) -> ContextManager[None]:
        if self._profiler is None:
            return contextlib.nullcontext()
        return self._profiler.measure(stage)

    def reset(self) -> None:
        """Clear all sub-filter histories, the alignment buffer and any half pair."""
        for f in self._subfilters:
            f.reset()
        self._align.reset()
        self._pending = None
        logger.debug(f"FFA filter {self.name}: state reset")

    def close(self) -> None:
        """Shut down the executor if this filter created it."""
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            self._owns_executor = False

    def __enter__(self) -> FFAFilter:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(taps={self.taps.size}, lanes={self.lanes})"


@dataclass(frozen=True)
class FFATerms:
    """Intermediate and output lanes of one 2-lane FFA evaluation."""

    a0: NDArrayAny
    a1: NDArrayAny
    s: NDArrayAny
    y0: NDArrayAny
    y1: NDArrayAny


def ffa2_terms(
    h0: SignalLike, h1: SignalLike, x0: SignalLike, x1: SignalLike
) -> FFATerms:
    """Evaluate the 2-lane FFA on pre-split lanes from a cold start.

    When the input length is odd, X1 is one sample short; it is zero-padded
    for the sub-filters and Y1 is trimmed back to ``len(x1)``.

    Args:
        h0: Even-indexed taps
        h1: Odd-indexed taps
        x0: Even-indexed input samples
        x1: Odd-indexed input samples

    Returns:
        FFATerms with A0, A1, S (length ``len(x0)``), Y0 and Y1
    """
    h0a, h1a = as_signal(h0), as_signal(h1)
    x0a, x1a = as_signal(x0), as_signal(x1)
    _check_interleave(h0a, h1a, "coefficient")
    _check_interleave(x0a, x1a, "input")
    if x0a.size == 0:
        raise EmptyInputError("zero-length input lanes")

    h1a = _pad_to(h1a, h0a.size)
    x1p = _pad_to(x1a, x0a.size)

    a0 = causal_convolve(h0a, x0a)
    a1 = causal_convolve(h1a, x1p)
    s = causal_convolve(h0a + h1a, x0a + x1p)

    y0 = a0 + AlignmentBuffer(a1.dtype).delay(a1)
    y1 = (s - a0 - a1)[: x1a.size]
    return FFATerms(a0=a0, a1=a1, s=s, y0=y0, y1=y1)


def ffa_convolve(
    h_lanes: Sequence[SignalLike], x_lanes: Sequence[SignalLike]
) -> NDArrayAny:
    """Run an FFA filter over pre-split coefficient and input lanes.

    Args:
        h_lanes: Coefficient lanes (lane p holds taps p, p+L, ...)
        x_lanes: Input lanes, same lane count

    Returns:
        Merged single-rate output

    Raises:
        LaneCountMismatchError: If the lane counts differ
        EmptyInputError: If the input lanes hold no samples
        LengthMismatchError: If either lane set does not interleave
    """
    if len(h_lanes) != len(x_lanes):
        raise LaneCountMismatchError(
            f"coefficients split into {len(h_lanes)} lanes, input into {len(x_lanes)}"
        )
    x = merge(x_lanes)
    if x.size == 0:
        raise EmptyInputError("zero-length input lanes")
    taps = merge(h_lanes)
    with FFAFilter(taps, lanes=len(x_lanes)) as f:
        return f.process(x)
