"""Single-rate reference filters used to check the FFA datapath.

``reference_filter`` is the oracle: a plain direct-form FIR, exact in int64
for integer inputs and ``scipy.signal.lfilter`` otherwise.
``direct_parallel_filter`` is the 4-sub-filter 2-lane decomposition that the
FFA form improves on; it is handy for isolating a lane-splitting bug from a
combination bug.
"""

from __future__ import annotations

from typing import cast

import numpy as np
from scipy import signal

from ffafir.dsp.convolution import as_signal
from ffafir.dsp.lanes import merge, split
from ffafir.typing import NDArrayAny, SignalLike


def reference_filter(h: SignalLike, x: SignalLike) -> NDArrayAny:
    """Direct single-rate causal FIR.

    Args:
        h: Filter taps (N >= 1)
        x: Input signal (may be empty)

    Returns:
        ``conv(h, x)[:len(x)]``
    """
    taps = as_signal(h)
    if taps.size == 0:
        raise ValueError("reference filter needs at least one tap")
    data = as_signal(x)
    if data.size == 0:
        return np.zeros(0, dtype=np.result_type(taps, data))

    if taps.dtype.kind in "iu" and data.dtype.kind in "iu":
        return np.convolve(data, taps)[: data.size]
    return cast(NDArrayAny, signal.lfilter(taps, 1.0, data))


def direct_parallel_filter(h: SignalLike, x: SignalLike) -> NDArrayAny:
    """2-lane parallel FIR using all four lane cross products.

        Y0 = H0*X0 + z^-1 H1*X1
        Y1 = H0*X1 + H1*X0

    Args:
        h: Filter taps (N >= 1)
        x: Input signal (may be empty)

    Returns:
        Same result as :func:`reference_filter`
    """
    taps = as_signal(h)
    data = as_signal(x)
    if data.size == 0:
        return reference_filter(taps, data)

    h0, h1 = split(taps, 2)
    x0, x1 = split(data, 2)
    if h1.size == 0:
        h1 = np.zeros(1, dtype=taps.dtype)
    n_odd = x1.size
    x1 = np.concatenate((x1, np.zeros(x0.size - n_odd, dtype=x1.dtype)))

    a0 = reference_filter(h0, x0)
    a1 = reference_filter(h1, x1)
    y0 = a0 + np.concatenate(([0], a1[:-1])).astype(a1.dtype)
    y1 = reference_filter(h0, x1) + reference_filter(h1, x0)
    return merge([y0, y1[:n_odd]])
