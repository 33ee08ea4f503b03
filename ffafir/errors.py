"""Errors raised by the FFA filter core.

All of them are detected synchronously at call time. None are worth retrying:
the computation is pure, so the same inputs fail the same way.
"""

from __future__ import annotations


class FFAError(ValueError):
    """Base class for FFA filter errors."""


class DegenerateFilterError(FFAError):
    """Coefficient vector is all zeros and cannot be normalized."""


class LengthMismatchError(FFAError):
    """Lane lengths do not describe a valid interleaving."""


class LaneCountMismatchError(FFAError):
    """Coefficient and input signals were split into different lane counts."""


class EmptyInputError(FFAError):
    """Zero-length input handed to a convolution."""
