from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from named_point import NamedPoint, distance, order_key
from sgkdtree_error import GeometryInvariantViolation, PointNotFound
from sgkdtree_node import Branch, Leaf, Node, build, debug_print, entries, height_of, rebuild
from sgkdtree_rect import Rectangle

logger = logging.getLogger(__name__)

# Balance ratio. A branch is a scapegoat when one child holds more than
# BALANCE_NUM / BALANCE_DENOM of its points.
BALANCE_NUM = 2
BALANCE_DENOM = 3


@dataclass
class NearestResult:
    """Result of nearest neighbor search."""

    point: Optional[NamedPoint]
    distance: float
    visited: int


class SgKdTree:
    """Extended kd-tree rebalanced by rebuilding scapegoat subtrees.

    Points are stored only in leaves. Each branch stores a splitter point and
    the cut dimension, which is the longer side of the bounding rectangle of
    the points in the subtree at the time the branch is built. Subtrees are
    never rotated. When the tree gets too tall after insertion, the topmost
    unbalanced node on the inserted path is rebuilt. When too many points are
    deleted, the whole tree is rebuilt.
    """

    def __init__(self, extent: Rectangle):
        """Create empty tree.

        Args:
            extent: Map extent. Used as the initial search cell for nearest neighbor.
        """
        self._extent = extent
        self._root: Optional[Node] = None
        self._n_items = 0
        self._max_items = 0

        # Bounding rectangle of points inserted since the last full rebuild.
        self._bounds: Optional[Rectangle] = None

    @property
    def extent(self) -> Rectangle:
        return self._extent

    @property
    def root(self) -> Optional[Node]:
        return self._root

    @property
    def max_items(self) -> int:
        return self._max_items

    @property
    def height(self) -> int:
        return height_of(self._root)

    @property
    def bounds(self) -> Optional[Rectangle]:
        return self._bounds

    def size(self) -> int:
        return self._n_items

    def __len__(self) -> int:
        return self._n_items

    def __contains__(self, pt: NamedPoint) -> bool:
        return self.find(pt) is not None

    def __iter__(self) -> Iterator[NamedPoint]:
        return iter(self.entries())

    def max_allowed_height(self) -> int:
        """Height limit for the current high-water mark of points."""
        if self._max_items <= 0:
            return 0
        return int(math.log(self._max_items) / math.log(BALANCE_DENOM / BALANCE_NUM))

    # ------------------------------------------------------------
    # Find
    # ------------------------------------------------------------

    def find(self, pt: NamedPoint) -> Optional[NamedPoint]:
        """Find point in tree.

        Args:
            pt: Point to be found. Its coordinates guide the descent and its name is matched at the leaf.

        Returns:
            Stored point if found. Otherwise, None.
        """
        node = self._root
        while isinstance(node, Branch):
            node = node.left if node.goes_left(pt) else node.right
        if isinstance(node, Leaf) and node.point.same(pt):
            return node.point
        return None

    # ------------------------------------------------------------
    # Insert
    # ------------------------------------------------------------

    def insert(self, pt: NamedPoint):
        """Insert point into tree.

        Names must be unique within the tree. Checking that is up to the caller.

        Args:
            pt: Point to be inserted.

        Raises:
            GeometryInvariantViolation: Internal bounding rectangle check failed.
        """
        logger.debug("Inserting %s", pt)

        if self._root is None:
            self._root = Leaf(pt)
        else:
            self._root = self._insert(self._root, pt)

        self._bounds = Rectangle.bounding([pt]) if self._bounds is None else self._bounds.expand(pt)

        self._n_items += 1
        self._max_items += 1
        assert self._n_items == self._root.size

        max_height = self.max_allowed_height()
        if self._root.height > max_height:
            logger.debug(
                "Height %d exceeds %d after inserting %s. Looking for scapegoat",
                self._root.height,
                max_height,
                pt,
            )
            self._root = self._rebalance(self._root, pt)

    def _insert(self, node: Node, pt: NamedPoint) -> Node:
        if isinstance(node, Leaf):
            # Two points form a branch over two leaves.
            return build([pt, node.point])

        rect = Rectangle.bounding([pt, node.splitter])
        if not (rect.contains(node.splitter) and rect.contains(pt)):
            logger.error(
                "Rectangle low %s high %s does not contain splitter %s and point %s",
                rect.low,
                rect.high,
                node.splitter,
                pt,
            )
            raise GeometryInvariantViolation(rect, [node.splitter, pt])

        if node.goes_left(pt):
            node.left = self._insert(node.left, pt)
        else:
            node.right = self._insert(node.right, pt)
        node.update()
        return node

    def _rebalance(self, node: Node, pt: NamedPoint) -> Node:
        if isinstance(node, Leaf):
            return node

        child = node.left if node.goes_left(pt) else node.right
        if BALANCE_NUM * node.size < BALANCE_DENOM * child.size:
            # This is the scapegoat.
            return rebuild(node)

        if child is node.left:
            node.left = self._rebalance(node.left, pt)
        else:
            node.right = self._rebalance(node.right, pt)
        node.update()
        return node

    # ------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------

    def delete(self, pt: NamedPoint):
        """Delete point from tree.

        Args:
            pt: Point to be deleted. Matched by name.

        Raises:
            PointNotFound: Point does not exist in tree. The tree is left unchanged.
        """
        logger.debug("Deleting %s", pt)

        if self._root is None:
            raise PointNotFound(pt)

        self._root = self._delete(self._root, pt)
        self._n_items -= 1

        if 2 * self._n_items < self._max_items:
            logger.debug(
                "Rebuilding whole tree after deletion. n = %d m = %d",
                self._n_items,
                self._max_items,
            )
            self.rebuild()

    def _delete(self, node: Node, pt: NamedPoint) -> Optional[Node]:
        if isinstance(node, Leaf):
            if node.point.same(pt):
                return None
            raise PointNotFound(pt)

        if node.goes_left(pt):
            node.left = self._delete(node.left, pt)
            if node.left is None:
                return node.right
        else:
            node.right = self._delete(node.right, pt)
            if node.right is None:
                return node.left
        node.update()
        return node

    def rebuild(self):
        """Rebuild whole tree from its contents and reset the high-water mark."""
        points = self.entries()
        self._root = build(points)
        self._max_items = self._n_items
        self._bounds = Rectangle.bounding(points) if points else None

    # ------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------

    def clear(self):
        self._root = None
        self._n_items = 0
        self._max_items = 0
        self._bounds = None

    def entries(self) -> List[NamedPoint]:
        """Return a new list of all points in the tree."""
        return entries(self._root, [])

    def debug_print(self, prefix: str = "") -> str:
        return debug_print(self._root, prefix)

    # ------------------------------------------------------------
    # Nearest neighbor
    # ------------------------------------------------------------

    def search_cell(self) -> Rectangle:
        """Cell which covers all stored points. Root of nearest neighbor search."""
        if self._bounds is None:
            return self._extent
        return self._extent.union(self._bounds)

    def nearest_neighbor(self, q: NamedPoint, best: Optional[NamedPoint] = None) -> Optional[NamedPoint]:
        """Find the stored point closest to q.

        Args:
            q: Query point. Its name is not used.
            best: Initial candidate. Stored points replace it only when strictly closer.

        Returns:
            Closest point. None if the tree is empty and no candidate is given.
        """
        return self.nearest(q, best).point

    def nearest(self, q: NamedPoint, best: Optional[NamedPoint] = None) -> NearestResult:
        """Find the stored point closest to q with search statistics.

        Args:
            q: Query point.
            best: Initial candidate.

        Returns:
            Closest point, its distance to q and the number of visited nodes.
        """
        best_dist = math.inf if best is None else distance(q, best)
        if self._root is None:
            return NearestResult(best, best_dist, 0)

        best, best_dist, visited = self._nearest(self._root, q, self.search_cell(), best, best_dist)
        logger.debug("Nearest neighbor of %s is %s (visited %d nodes)", q, best, visited)
        return NearestResult(best, best_dist, visited)

    def _nearest(
        self,
        node: Node,
        q: NamedPoint,
        cell: Rectangle,
        best: Optional[NamedPoint],
        best_dist: float,
    ) -> Tuple[Optional[NamedPoint], float, int]:
        if isinstance(node, Leaf):
            dist = distance(q, node.point)
            if dist < best_dist:
                return node.point, dist, 1
            return best, best_dist, 1

        dim = node.cut_dim
        cut = node.splitter.get(dim)
        left_cell = cell.left_part(dim, cut)
        right_cell = cell.right_part(dim, cut)

        if q.get(dim) < cut:
            order = [(node.left, left_cell), (node.right, right_cell)]
        else:
            order = [(node.right, right_cell), (node.left, left_cell)]

        visited = 1
        for child, child_cell in order:
            # A cell farther than the best distance cannot hold a closer point.
            if child_cell.distance_to(q) >= best_dist:
                continue
            best, best_dist, n = self._nearest(child, q, child_cell, best, best_dist)
            visited += n
        return best, best_dist, visited

    # ------------------------------------------------------------
    # Integrity check
    # ------------------------------------------------------------

    def check(self) -> bool:
        """Check size, height and membership of every node.

        This is for diagnostics. Failures are logged.

        Returns:
            If tree is consistent, return True. Otherwise, return False.
        """
        if self._root is None:
            return self._n_items == 0

        ok, size, _ = self._check(self._root, [])
        if size != self._n_items:
            logger.error("Size check fails at root: %d stored, %d counted", size, self._n_items)
            return False
        return ok

    def _check(self, node: Node, ancestors: List[Tuple[Branch, bool]]) -> Tuple[bool, int, int]:
        # Returns (consistent, actual size, actual height).
        if isinstance(node, Leaf):
            for branch, is_left in ancestors:
                key = order_key(node.point, branch.cut_dim)
                splitter_key = order_key(branch.splitter, branch.cut_dim)
                if (key <= splitter_key) != is_left:
                    logger.error(
                        "Membership check fails at external %s under %s",
                        node.point,
                        branch.splitter,
                    )
                    return False, 1, 0
            return True, 1, 0

        left_ok, left_size, left_height = self._check(node.left, ancestors + [(node, True)])
        right_ok, right_size, right_height = self._check(node.right, ancestors + [(node, False)])

        ok = left_ok and right_ok
        if node.size != left_size + right_size:
            logger.error("Size check fails at internal: %s", node.splitter)
            ok = False
        if node.height != 1 + max(left_height, right_height):
            logger.error("Height check fails at internal: %s", node.splitter)
            ok = False
        return ok, left_size + right_size, 1 + max(left_height, right_height)
