from __future__ import annotations

from typing import List, Optional, Tuple

import matplotlib.patches as patches
import matplotlib.pyplot as plt
import numpy as np
import numpy.typing as npt
import rerun as rr

from named_point import CutDim, NamedPoint
from sgkdtree import SgKdTree
from sgkdtree_node import Branch, Node
from sgkdtree_rect import Rectangle

Segment = Tuple[Tuple[float, float], Tuple[float, float]]


def collect_splits(node: Optional[Node], cell: Rectangle, segments: List[Segment]) -> List[Segment]:
    """Collect splitting lines of subtree clipped to the cells.

    Args:
        node: Subtree root.
        cell: Cell of subtree.
        segments: List to store line segments.

    Returns:
        The list passed as segments.
    """
    if not isinstance(node, Branch):
        return segments

    dim = node.cut_dim
    cut = node.splitter.get(dim)
    if dim == CutDim.X:
        segments.append(((cut, cell.low[1]), (cut, cell.high[1])))
    else:
        segments.append(((cell.low[0], cut), (cell.high[0], cut)))

    collect_splits(node.left, cell.left_part(dim, cut), segments)
    collect_splits(node.right, cell.right_part(dim, cut), segments)
    return segments


def points_to_array(points: List[NamedPoint]) -> npt.NDArray:
    if not points:
        return np.zeros((0, 2))
    return np.concatenate([p.as_array() for p in points], axis=0)


def plot_tree(
    tree: SgKdTree,
    query: Optional[NamedPoint] = None,
    found: Optional[NamedPoint] = None,
    show_names: bool = False,
):
    """Draw points and partition of tree with matplotlib.

    Args:
        tree: Tree to be drawn.
        query: Query point of nearest neighbor search.
        found: Result of nearest neighbor search.
        show_names: If True, draw name of each point.
    """
    cell = tree.search_cell()
    points = tree.entries()
    coords = points_to_array(points)

    ax = plt.axes()
    ax.add_patch(
        patches.Rectangle(cell.low, cell.width, cell.height, edgecolor="gray", facecolor="none", linewidth=2)
    )

    for (x0, y0), (x1, y1) in collect_splits(tree.root, cell, []):
        ax.plot([x0, x1], [y0, y1], color="lightgray", linewidth=1)

    plt.scatter(coords[:, 0], coords[:, 1])
    if show_names:
        for p in points:
            ax.annotate(p.name, (p.x, p.y), fontsize=7)

    if query is not None:
        plt.scatter(query.x, query.y, color="red")
        if found is not None:
            radius = float(np.hypot(query.x - found.x, query.y - found.y))
            ax.add_patch(
                patches.Circle((query.x, query.y), radius=radius, edgecolor="green", facecolor="none", linewidth=1)
            )
            plt.scatter(found.x, found.y, color="green")

    plt.axis("square")
    plt.xlim(cell.low[0], cell.high[0])
    plt.ylim(cell.low[1], cell.high[1])
    plt.show()


def log_tree_to_rerun(tree: SgKdTree, query: Optional[NamedPoint] = None, found: Optional[NamedPoint] = None):
    """Send points and partition of tree to rerun viewer.

    Args:
        tree: Tree to be drawn.
        query: Query point of nearest neighbor search.
        found: Result of nearest neighbor search.
    """
    points = tree.entries()
    coords = points_to_array(points)
    colors = np.full((len(points), 3), [0, 255, 0])

    rr.init("sgkdtree", spawn=True)
    rr.log("points", rr.Points2D(coords, colors=colors, radii=2.0, labels=[p.name for p in points]))

    segments = collect_splits(tree.root, tree.search_cell(), [])
    if segments:
        rr.log("splits", rr.LineStrips2D([list(s) for s in segments], colors=[128, 128, 128]))

    if query is not None:
        rr.log("query", rr.Points2D(query.as_array(), colors=[255, 0, 0], radii=3.0))
    if found is not None:
        rr.log("nearest", rr.Points2D(found.as_array(), colors=[0, 0, 255], radii=3.0))
