"""Input value types: sparse measurements and soft prior constraints."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict


class SparseSample(BaseModel):
    """One irregular curvature measurement. ``uncertainty`` is a standard deviation."""

    model_config = ConfigDict(frozen=True)

    position: float
    value: float
    uncertainty: float = 0.0

    @classmethod
    def from_tuple(cls, row: tuple[float, ...]) -> SparseSample:
        """Build from ``(position, value)`` or ``(position, value, uncertainty)``."""
        if len(row) == 2:
            return cls(position=row[0], value=row[1])
        return cls(position=row[0], value=row[1], uncertainty=row[2])


class PriorConstraint(BaseModel):
    """Soft bound on the believed hotspot threshold.

    ``weight`` = 1 fully enforces the nearest bound, 0 ignores it. Bounds are
    checked when the constraint is applied, not at construction, so a caller
    can hold a malformed constraint and get ``InvalidPrior`` from the update.
    """

    model_config = ConfigDict(frozen=True)

    lower: float
    upper: float
    weight: float = 1.0

    def constraints(self) -> Iterator[PriorConstraint]:
        yield self

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper

    def nearest_bound(self, value: float) -> float:
        if value < self.lower:
            return self.lower
        if value > self.upper:
            return self.upper
        return value
