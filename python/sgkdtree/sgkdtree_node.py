from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Union

from named_point import CutDim, NamedPoint, order_key
from sgkdtree_rect import Rectangle

logger = logging.getLogger(__name__)


@dataclass
class Leaf:
    """External node. Holds exactly one point."""

    point: NamedPoint

    @property
    def size(self) -> int:
        return 1

    @property
    def height(self) -> int:
        return 0


@dataclass
class Branch:
    """Internal node. Holds the splitter and the partition metadata."""

    splitter: NamedPoint
    cut_dim: CutDim
    left: Node
    right: Node
    size: int = 0
    height: int = 0

    def __post_init__(self):
        self.update()

    def update(self):
        """Recompute size and height from children."""
        self.size = self.left.size + self.right.size
        self.height = 1 + max(self.left.height, self.right.height)

    def goes_left(self, pt: NamedPoint) -> bool:
        # Points equal to the splitter are stored in the left subtree.
        return order_key(pt, self.cut_dim) <= order_key(self.splitter, self.cut_dim)


Node = Union[Leaf, Branch]


def height_of(node: Optional[Node]) -> int:
    return 0 if node is None else node.height


def entries(node: Optional[Node], out: List[NamedPoint]) -> List[NamedPoint]:
    """Append all points in subtree to the list.

    Args:
        node: Subtree root.
        out: List to store points.

    Returns:
        The list passed as out.
    """
    if isinstance(node, Leaf):
        out.append(node.point)
    elif isinstance(node, Branch):
        entries(node.left, out)
        entries(node.right, out)
    return out


def build(points: List[NamedPoint]) -> Optional[Node]:
    """Build balanced subtree from points.

    Cut dimension is the longer side of the bounding rectangle of points,
    and the median-low point becomes the splitter. Left subtree receives
    ceil(k/2) points.

    Args:
        points: Points to be stored in subtree. The list is not modified.

    Returns:
        Root of built subtree. None if no point is given.
    """
    k = len(points)
    if k == 0:
        return None
    if k == 1:
        return Leaf(points[0])

    cut_dim = Rectangle.bounding(points).longer_dim()
    ordered = sorted(points, key=lambda p: order_key(p, cut_dim))

    m = math.ceil(k / 2)
    splitter = ordered[m - 1]

    left = build(ordered[:m])
    right = build(ordered[m:])
    return Branch(splitter=splitter, cut_dim=cut_dim, left=left, right=right)


def rebuild(node: Node) -> Node:
    """Rebuild subtree from its own points."""
    if isinstance(node, Leaf):
        return node

    points = entries(node, [])
    logger.debug("Rebuilding subtree of %d points rooted at %s", len(points), describe(node))
    return build(points)


def describe(node: Node) -> str:
    if isinstance(node, Leaf):
        return f"[{node.point}]"
    return f"{int(node.cut_dim)}- ({node.splitter} ht:{node.height} sz:{node.size})"


def debug_print(node: Optional[Node], prefix: str = "") -> str:
    """Render subtree as indented text. Left subtree is printed above its parent."""
    if node is None:
        return ""
    if isinstance(node, Leaf):
        return prefix + describe(node)
    return "\n".join(
        [
            debug_print(node.left, prefix + "| "),
            prefix + describe(node),
            debug_print(node.right, prefix + "| "),
        ]
    )
