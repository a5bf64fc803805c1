"""Uniform reconstruction grid. No engine imports."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class SignalGrid:
    """Uniform grid shared by the reconstruction and all of its consumers.

    ``closed`` grids include ``stop`` as the last point (derived from the
    sample span); half-open grids cover ``[start, stop)`` (configured domain).
    """

    start: float
    stop: float
    size: int
    closed: bool = True
    positions: NDArray[np.float64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pos = np.linspace(self.start, self.stop, self.size, endpoint=self.closed)
        pos.flags.writeable = False
        object.__setattr__(self, "positions", pos)

    @property
    def spacing(self) -> float:
        if self.size < 2:
            return 0.0
        return float(self.positions[1] - self.positions[0])

    def position_of(self, index: int) -> float:
        return float(self.positions[index])

    @classmethod
    def spanning(cls, positions: NDArray[np.float64], size: int) -> SignalGrid:
        """Closed grid over the sample span."""
        return cls(start=float(np.min(positions)), stop=float(np.max(positions)), size=size)

    @classmethod
    def domain(cls, length: float, size: int) -> SignalGrid:
        """Half-open grid over ``[0, length)``."""
        return cls(start=0.0, stop=float(length), size=size, closed=False)
