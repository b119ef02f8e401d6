from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from named_point import NamedPoint
from sgkdtree import SgKdTree
from sgkdtree_error import SgKdTreeError
from sgkdtree_plot import log_tree_to_rerun, plot_tree
from sgkdtree_rect import Rectangle
from sgkdtree_xml import to_xml_string


def make_random_points(num: int, width: float, height: float, rng: np.random.Generator) -> list[NamedPoint]:
    """Generate points with integer coordinates in the map.

    Args:
        num: Number of points.
        width: Map width.
        height: Map height.
        rng: Random generator.

    Returns:
        List of points named "c0", "c1", ...
    """
    xs = rng.integers(0, int(width) + 1, size=num)
    ys = rng.integers(0, int(height) + 1, size=num)
    return [NamedPoint(float(x), float(y), f"c{i}") for i, (x, y) in enumerate(zip(xs, ys))]


def main():
    # NOTE:
    # e.g.
    # python3 ./python/sgkdtree/main.py -n 50 -d 20 -q 300 400 --xml out.xml --plot
    parser = argparse.ArgumentParser(description="Run SG kd-tree demo")
    parser.add_argument("--width", type=float, help="map width", default=1024)
    parser.add_argument("--height", type=float, help="map height", default=1024)
    parser.add_argument("-n", "--num-points", type=int, help="number of points to insert", default=30)
    parser.add_argument("-d", "--delete", type=int, help="number of points to delete", default=0)
    parser.add_argument("-s", "--seed", type=int, help="random seed", default=19)
    parser.add_argument(
        "-q", "--query", type=float, nargs=2, metavar=("X", "Y"), help="nearest neighbor query", default=None
    )
    parser.add_argument("--xml", type=str, help="path to write tree as XML", default=None)
    parser.add_argument("--plot", action="store_true", help="plot with matplotlib", default=False)
    parser.add_argument("--rerun", action="store_true", help="send to rerun viewer", default=False)
    parser.add_argument("-v", "--verbose", action="store_true", help="debug log", default=False)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    rng = np.random.default_rng(args.seed)
    tree = SgKdTree(Rectangle((0, 0), (args.width, args.height)))

    points = make_random_points(args.num_points, args.width, args.height, rng)

    found = None
    query = None

    try:
        for p in points:
            tree.insert(p)

        num_delete = min(args.delete, len(points))
        for idx in rng.permutation(len(points))[:num_delete]:
            tree.delete(points[idx])

        if args.query is not None:
            query = NamedPoint(args.query[0], args.query[1], "query")
            result = tree.nearest(query)
            found = result.point
            print(f"Nearest neighbor of {query}: {found} distance={result.distance:.3f} visited={result.visited}")
    except SgKdTreeError as err:
        print(f"{err}", file=sys.stderr)
        sys.exit(1)

    print(f"size={tree.size()} height={tree.height} limit={tree.max_allowed_height()}")
    print(tree.debug_print("  "))

    if not tree.check():
        print("Integrity check failed", file=sys.stderr)
        sys.exit(1)

    if args.xml is not None:
        with open(args.xml, mode="w") as f:
            f.write(to_xml_string(tree))

    if args.plot:
        plot_tree(tree, query, found)
    elif args.rerun:
        log_tree_to_rerun(tree, query, found)


if __name__ == "__main__":
    main()
