from __future__ import annotations


class SgKdTreeError(Exception):
    """Base class of errors raised by SG kd-tree."""


class PointNotFound(SgKdTreeError):
    """Point to be deleted does not exist in the tree."""

    def __init__(self, point):
        super().__init__(f"point not found: {point}")
        self.point = point


class GeometryInvariantViolation(SgKdTreeError):
    """Computed bounding rectangle does not contain the points it was built from.

    This never happens in a correct tree. The detailed message is logged
    where the violation is detected.
    """

    def __init__(self, rect, points):
        super().__init__(f"rectangle {rect} does not contain {len(points)} point(s)")
        self.rect = rect
        self.points = points
