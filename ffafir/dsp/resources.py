"""DSP block estimate for a 2-lane parallel FIR.

One DSP block per multiplier plus one per adder:

    direct 2-parallel form: 4 sub-filters, 2 adders  -> 4*T + 2
    FFA form:               3 sub-filters, 5 adders  -> 3*T + 5

where T is the number of taps per sub-filter. The five FFA adders are the
X0+X1 and H0+H1 pre-adds, the Y0 sum and the two Y1 subtractions.
"""

from __future__ import annotations

from dataclasses import dataclass

DIRECT_SUBFILTERS = 4
DIRECT_ADDERS = 2
FFA_SUBFILTERS = 3
FFA_ADDERS = 5


@dataclass(frozen=True)
class DSPEstimate:
    taps_per_subfilter: int
    direct_dsps: int
    ffa_dsps: int

    @property
    def saved_dsps(self) -> int:
        return self.direct_dsps - self.ffa_dsps

    @property
    def saved_percent(self) -> float:
        return 100.0 * self.saved_dsps / self.direct_dsps


def estimate_dsp(taps_per_subfilter: int) -> DSPEstimate:
    """DSP usage of the direct and FFA 2-lane forms.

    Example:
        >>> round(estimate_dsp(128).saved_percent, 3)
        24.319
    """
    if taps_per_subfilter < 1:
        raise ValueError(f"taps per sub-filter must be >= 1 (got {taps_per_subfilter})")
    t = taps_per_subfilter
    return DSPEstimate(
        taps_per_subfilter=t,
        direct_dsps=DIRECT_SUBFILTERS * t + DIRECT_ADDERS,
        ffa_dsps=FFA_SUBFILTERS * t + FFA_ADDERS,
    )


def estimate_for_filter(n_taps: int) -> DSPEstimate:
    """Estimate for an N-tap filter split into two ceil(N/2)-tap phases."""
    if n_taps < 1:
        raise ValueError(f"filter needs at least one tap (got {n_taps})")
    return estimate_dsp(-(-n_taps // 2))
