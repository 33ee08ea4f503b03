from __future__ import annotations

from typing import Any, TypeAlias

import numpy as np
import numpy.typing as npt

NDArrayAny: TypeAlias = npt.NDArray[np.generic]
NDArrayFloat: TypeAlias = npt.NDArray[np.floating[Any]]
NDArrayInt: TypeAlias = npt.NDArray[np.integer[Any]]
SignalLike: TypeAlias = npt.ArrayLike
