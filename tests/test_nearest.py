"""Tests for nearest neighbor search."""

import numpy as np
import pytest

from named_point import NamedPoint, distance
from sgkdtree import SgKdTree
from sgkdtree_rect import Rectangle


def brute_force_nearest_distance(points, q):
    return min(distance(q, p) for p in points)


def make_random_tree(rng, num, size=1000):
    tree = SgKdTree(Rectangle((0, 0), (size, size)))
    coords = rng.uniform(0, size, size=(num, 2))
    points = [NamedPoint(float(x), float(y), f"p{i}") for i, (x, y) in enumerate(coords)]
    for p in points:
        tree.insert(p)
    return tree, points


def test_square_with_center():
    tree = SgKdTree(Rectangle((0, 0), (100, 100)))
    for p in [
        NamedPoint(0, 0, "A"),
        NamedPoint(10, 0, "B"),
        NamedPoint(0, 10, "C"),
        NamedPoint(10, 10, "D"),
        NamedPoint(5, 5, "E"),
    ]:
        tree.insert(p)

    found = tree.nearest_neighbor(NamedPoint(4, 4, "q"))
    assert found.name == "E"

    assert tree.nearest_neighbor(NamedPoint(9, 1, "q")).name == "B"
    assert tree.nearest_neighbor(NamedPoint(-20, 30, "q")).name == "C"


def test_empty_tree():
    tree = SgKdTree(Rectangle((0, 0), (100, 100)))
    assert tree.nearest_neighbor(NamedPoint(1, 1, "q")) is None

    result = tree.nearest(NamedPoint(1, 1, "q"))
    assert result.point is None
    assert result.visited == 0


def test_single_point():
    tree = SgKdTree(Rectangle((0, 0), (100, 100)))
    p = NamedPoint(30, 40, "p")
    tree.insert(p)

    result = tree.nearest(NamedPoint(0, 0, "q"))
    assert result.point == p
    assert result.distance == pytest.approx(50)


def test_initial_candidate():
    tree = SgKdTree(Rectangle((0, 0), (100, 100)))
    tree.insert(NamedPoint(50, 50, "far"))
    seed = NamedPoint(1, 1, "seed")

    # Seed is closer than every stored point.
    assert tree.nearest_neighbor(NamedPoint(0, 0, "q"), best=seed) == seed
    assert tree.nearest_neighbor(NamedPoint(60, 60, "q"), best=seed).name == "far"

    tree.clear()
    assert tree.nearest_neighbor(NamedPoint(0, 0, "q"), best=seed) == seed


def test_tie_keeps_first_found():
    tree = SgKdTree(Rectangle((0, 0), (100, 100)))
    tree.insert(NamedPoint(0, 0, "a"))
    tree.insert(NamedPoint(10, 0, "b"))

    result = tree.nearest(NamedPoint(5, 0, "q"))
    assert result.distance == pytest.approx(5)
    # Query coordinate is not less than the splitter, so right side is searched first.
    assert result.point.name == "b"


def test_matches_brute_force():
    rng = np.random.default_rng(7)
    tree, points = make_random_tree(rng, 300)

    for qx, qy in rng.uniform(-200, 1200, size=(100, 2)):
        q = NamedPoint(float(qx), float(qy), "q")
        result = tree.nearest(q)
        assert result.distance == pytest.approx(brute_force_nearest_distance(points, q))
        assert distance(q, result.point) == pytest.approx(result.distance)


def test_after_deletions():
    rng = np.random.default_rng(11)
    tree, points = make_random_tree(rng, 200)

    for idx in rng.permutation(len(points))[:150]:
        tree.delete(points[idx])
    alive = tree.entries()
    assert len(alive) == 50

    for qx, qy in rng.uniform(0, 1000, size=(50, 2)):
        q = NamedPoint(float(qx), float(qy), "q")
        assert tree.nearest(q).distance == pytest.approx(brute_force_nearest_distance(alive, q))


def test_points_outside_extent():
    tree = SgKdTree(Rectangle((0, 0), (10, 10)))
    outside = NamedPoint(-50, 200, "outside")
    tree.insert(NamedPoint(5, 5, "inside"))
    tree.insert(outside)
    tree.insert(NamedPoint(8, 2, "other"))

    assert tree.search_cell().contains(outside)
    assert tree.nearest_neighbor(NamedPoint(-40, 190, "q")) == outside


def test_search_prunes_subtrees():
    rng = np.random.default_rng(3)
    tree, points = make_random_tree(rng, 500)
    node_count = 2 * len(points) - 1

    result = tree.nearest(NamedPoint(500, 500, "q"))
    assert result.visited < node_count // 4
