"""Lane splitting and reassembly.

A signal of length ``total`` split into ``L`` lanes puts element ``i`` in lane
``i % L``. Lane ``p`` therefore holds ``total // L`` elements, plus one more
when ``p < total % L``. ``merge`` checks exactly that before interleaving, so a
merge either reproduces a valid sequence or fails.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ffafir.errors import LengthMismatchError
from ffafir.typing import NDArrayAny, SignalLike


def lane_length(total: int, lanes: int, lane: int) -> int:
    """Number of elements lane ``lane`` receives from a ``total``-long signal."""
    return total // lanes + (1 if lane < total % lanes else 0)


def split(seq: SignalLike, lanes: int) -> list[NDArrayAny]:
    """Deinterleave ``seq`` into ``lanes`` phase sequences.

    Args:
        seq: 1-D input sequence
        lanes: Number of lanes (>= 1)

    Returns:
        List of ``lanes`` arrays; lane p holds ``seq[p::lanes]``
    """
    if lanes < 1:
        raise ValueError(f"lane count must be >= 1 (got {lanes})")
    x = np.asarray(seq)
    if x.ndim != 1:
        raise ValueError(f"can only split 1-D sequences (got shape {x.shape})")
    return [x[p::lanes].copy() for p in range(lanes)]


def merge(lane_list: Sequence[SignalLike]) -> NDArrayAny:
    """Interleave lanes back into a single sequence.

    Args:
        lane_list: Lanes as produced by :func:`split`

    Returns:
        Interleaved sequence of length ``sum(len(lane))``

    Raises:
        LengthMismatchError: If the lane lengths cannot come from a split
    """
    if len(lane_list) == 0:
        raise ValueError("cannot merge an empty lane list")

    arrays = [np.asarray(lane) for lane in lane_list]
    for p, lane in enumerate(arrays):
        if lane.ndim != 1:
            raise ValueError(f"lane {p} is not 1-D (shape {lane.shape})")

    lanes = len(arrays)
    total = sum(lane.size for lane in arrays)
    for p, lane in enumerate(arrays):
        expected = lane_length(total, lanes, p)
        if lane.size != expected:
            sizes = [a.size for a in arrays]
            raise LengthMismatchError(
                f"lane {p} has {lane.size} samples, expected {expected} "
                f"(lane sizes {sizes} do not interleave)"
            )

    out = np.empty(total, dtype=np.result_type(*arrays))
    for p, lane in enumerate(arrays):
        out[p::lanes] = lane
    return out


class LaneSplitter:
    """Splitter/merger bound to one lane count."""

    def __init__(self, lanes: int):
        if lanes < 1:
            raise ValueError(f"lane count must be >= 1 (got {lanes})")
        self.lanes = lanes

    def split(self, seq: SignalLike) -> list[NDArrayAny]:
        return split(seq, self.lanes)

    def merge(self, lane_list: Sequence[SignalLike]) -> NDArrayAny:
        if len(lane_list) != self.lanes:
            raise LengthMismatchError(
                f"expected {self.lanes} lanes, got {len(lane_list)}"
            )
        return merge(lane_list)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(lanes={self.lanes})"
