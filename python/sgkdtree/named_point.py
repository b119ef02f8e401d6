from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt


class CutDim(IntEnum):
    """Axis along which a branch partitions its points."""

    X = 0
    Y = 1


@dataclass(frozen=True)
class NamedPoint:
    """2D point identified by its name."""

    x: float
    y: float
    name: str

    def get(self, dim: int) -> float:
        return self.x if dim == CutDim.X else self.y

    def as_array(self) -> npt.NDArray:
        return np.array([self.x, self.y]).reshape(1, 2)

    def same(self, other: NamedPoint) -> bool:
        """Check if both points are the same member of a tree.

        Args:
            other: Point to be compared.

        Returns:
            If names are equal, return True. Otherwise, return False.
        """
        return self.name == other.name

    def __str__(self) -> str:
        return f"{self.name}({self.x:g}, {self.y:g})"


def xy_key(p: NamedPoint) -> tuple:
    # Name is the last tie-break, so coincident points still have a total order.
    return (p.x, p.y, p.name)


def yx_key(p: NamedPoint) -> tuple:
    return (p.y, p.x, p.name)


def order_key(p: NamedPoint, cut_dim: int) -> tuple:
    """Return sort key of point for the ordering matching cut dimension.

    Args:
        p: Point.
        cut_dim: X uses (x, y) order, Y uses (y, x) order.

    Returns:
        Tuple usable as sort key.
    """
    return xy_key(p) if cut_dim == CutDim.X else yx_key(p)


def distance(a: NamedPoint, b: NamedPoint) -> float:
    return float(np.hypot(a.x - b.x, a.y - b.y))
