from ffafir.dsp import FFAFilter, adapt, merge, reference_filter, split
from ffafir.errors import (
    DegenerateFilterError,
    EmptyInputError,
    FFAError,
    LaneCountMismatchError,
    LengthMismatchError,
)

__all__ = [
    "__version__",
    "DegenerateFilterError",
    "EmptyInputError",
    "FFAError",
    "FFAFilter",
    "LaneCountMismatchError",
    "LengthMismatchError",
    "adapt",
    "merge",
    "reference_filter",
    "split",
]

__version__ = "0.1.0"
