from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from named_point import CutDim, NamedPoint
from sgkdtree_error import GeometryInvariantViolation

Corner = Tuple[float, float]


@dataclass(frozen=True)
class Rectangle:
    """Axis aligned rectangle given by lower-left and upper-right corners."""

    low: Corner
    high: Corner

    def __post_init__(self):
        if self.low[0] > self.high[0] or self.low[1] > self.high[1]:
            raise GeometryInvariantViolation(self, [])

    @staticmethod
    def bounding(points: Iterable[NamedPoint]) -> Rectangle:
        """Compute minimum rectangle which contains all points.

        Args:
            points: Non-empty point list.

        Returns:
            Bounding rectangle.
        """
        coords = np.array([[p.x, p.y] for p in points], dtype=np.float64)
        mins = coords.min(axis=0)
        maxs = coords.max(axis=0)
        return Rectangle((float(mins[0]), float(mins[1])), (float(maxs[0]), float(maxs[1])))

    @property
    def width(self) -> float:
        return self.high[0] - self.low[0]

    @property
    def height(self) -> float:
        return self.high[1] - self.low[1]

    def longer_dim(self) -> CutDim:
        # Tie is broken in favor of x.
        return CutDim.X if self.width >= self.height else CutDim.Y

    def contains(self, p: NamedPoint) -> bool:
        return self.low[0] <= p.x <= self.high[0] and self.low[1] <= p.y <= self.high[1]

    def left_part(self, dim: int, cut: float) -> Rectangle:
        """Return the part of rectangle on the lower side of the cut.

        Args:
            dim: Dimension to be cut.
            cut: Coordinate of the cut along dim.

        Returns:
            Rectangle whose upper bound along dim is the cut.
        """
        cut = min(max(cut, self.low[dim]), self.high[dim])
        high = list(self.high)
        high[dim] = cut
        return Rectangle(self.low, (high[0], high[1]))

    def right_part(self, dim: int, cut: float) -> Rectangle:
        """Return the part of rectangle on the upper side of the cut.

        Args:
            dim: Dimension to be cut.
            cut: Coordinate of the cut along dim.

        Returns:
            Rectangle whose lower bound along dim is the cut.
        """
        cut = min(max(cut, self.low[dim]), self.high[dim])
        low = list(self.low)
        low[dim] = cut
        return Rectangle((low[0], low[1]), self.high)

    def union(self, other: Rectangle) -> Rectangle:
        return Rectangle(
            (min(self.low[0], other.low[0]), min(self.low[1], other.low[1])),
            (max(self.high[0], other.high[0]), max(self.high[1], other.high[1])),
        )

    def expand(self, p: NamedPoint) -> Rectangle:
        if self.contains(p):
            return self
        return Rectangle(
            (min(self.low[0], p.x), min(self.low[1], p.y)),
            (max(self.high[0], p.x), max(self.high[1], p.y)),
        )

    def distance_to(self, p: NamedPoint) -> float:
        """Minimum Euclidean distance from point to rectangle. Zero if inside."""
        dx = max(self.low[0] - p.x, 0.0, p.x - self.high[0])
        dy = max(self.low[1] - p.y, 0.0, p.y - self.high[1])
        return float(np.hypot(dx, dy))

    def __str__(self) -> str:
        return f"[({self.low[0]:g}, {self.low[1]:g}) - ({self.high[0]:g}, {self.high[1]:g})]"
