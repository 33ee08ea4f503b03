"""FFA parallel FIR datapath.

Usage:
    from ffafir.dsp import FFAFilter, adapt, reference_filter

    taps = adapt(real_taps, width=24)
    with FFAFilter(taps, lanes=2) as ffa:
        y = ffa.process(x)
    assert (y == reference_filter(taps, x)).all()
"""

from .coefficients import FixedPointCoefficientAdapter, adapt
from .convolution import StreamingFIR, causal_convolve
from .ffa import AlignmentBuffer, FFAFilter, FFATerms, ffa2_terms, ffa_convolve
from .lanes import LaneSplitter, merge, split
from .reference import direct_parallel_filter, reference_filter
from .resources import DSPEstimate, estimate_dsp, estimate_for_filter

__all__ = [
    "AlignmentBuffer",
    "DSPEstimate",
    "FFAFilter",
    "FFATerms",
    "FixedPointCoefficientAdapter",
    "LaneSplitter",
    "StreamingFIR",
    "adapt",
    "causal_convolve",
    "direct_parallel_filter",
    "estimate_dsp",
    "estimate_for_filter",
    "ffa2_terms",
    "ffa_convolve",
    "merge",
    "reference_filter",
    "split",
]
