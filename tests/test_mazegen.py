import logging
import random

import pytest

from mazegen import (
    DEFAULT_ALGORITHM,
    Algorithm,
    Dimensions,
    Grid,
    MazeGenerator,
    bfs_distances,
    generate,
    resolve_algorithm,
)


def _is_connected(grid: Grid) -> bool:
    cells = grid.passages()
    dist = bfs_distances(grid, cells[0])
    return sum(1 for d in dist if d >= 0) == len(cells)


def test_new_grid_is_fully_walled():
    grid = Grid(4, 3)

    assert grid.passage_count() == 0
    assert all(grid.is_wall(x, y) for y in range(3) for x in range(4))


def test_grid_reads_outside_bounds_as_wall():
    grid = Grid(3, 3)
    grid.carve(0, 0)

    assert grid.is_passage(0, 0)
    assert grid.is_wall(-1, 0)
    assert grid.is_wall(0, 3)


def test_grid_rejects_bad_sizes_and_writes():
    with pytest.raises(ValueError):
        Grid(0, 5)
    with pytest.raises(IndexError):
        Grid(2, 2).carve(2, 0)


def test_grid_neighbors_and_dead_ends():
    grid = Grid(3, 3)
    for x, y in ((0, 1), (1, 1), (2, 1), (1, 0)):
        grid.carve(x, y)

    assert grid.passage_neighbors(1, 1) == [(1, 0), (2, 1), (0, 1)]
    assert grid.walled_neighbors(1, 1) == [(1, 2)]
    assert grid.dead_ends() == [(1, 0), (0, 1), (2, 1)]
    assert grid.edge_count() == 3


@pytest.mark.parametrize("algorithm", list(Algorithm))
@pytest.mark.parametrize("size", [(21, 15), (16, 12), (3, 3), (5, 9), (3, 11)])
def test_every_algorithm_carves_a_spanning_tree(algorithm, size):
    width, height = size
    grid = generate(width, height, algorithm, random.Random(7))

    assert grid.passage_count() > 0
    assert grid.edge_count() == grid.passage_count() - 1
    assert _is_connected(grid)


@pytest.mark.parametrize("algorithm", list(Algorithm))
def test_every_room_is_open_and_pillars_stay_walls(algorithm):
    grid = generate(21, 15, algorithm, random.Random(11))

    for y in range(1, 15, 2):
        for x in range(1, 21, 2):
            assert grid.is_passage(x, y)
    for y in range(0, 15, 2):
        for x in range(0, 21, 2):
            assert grid.is_wall(x, y)


def test_binary_tree_on_fifteen_by_fifteen_rooms():
    # 15x15 rooms need a 31x31 grid: 225 rooms joined by 224 links.
    grid = generate(31, 31, Algorithm.BINARY_TREE, random.Random(1))

    rooms = 15 * 15
    assert grid.passage_count() - rooms == 224
    assert grid.edge_count() == grid.passage_count() - 1


@pytest.mark.parametrize("size", [(1, 1), (1, 7), (2, 2), (2, 9), (6, 2)])
def test_degenerate_sizes_still_terminate_connected(size, caplog):
    width, height = size
    with caplog.at_level(logging.WARNING, logger="mazegen"):
        grid = generate(width, height, Algorithm.PRIM, random.Random(0))

    assert _is_connected(grid)
    assert grid.edge_count() == grid.passage_count() - 1
    assert "too small" in caplog.text


def test_one_wide_grid_is_wall_free():
    grid = generate(1, 6, Algorithm.WILSON, random.Random(0))

    assert grid.passage_count() == 6


def test_same_seed_same_maze():
    a = MazeGenerator(21, 21, algorithm="prim", braid_percent=20, seed=99)
    b = MazeGenerator(21, 21, algorithm="prim", braid_percent=20, seed=99)

    assert a.get_walkable_positions() == b.get_walkable_positions()
    assert a.get_start_position() == b.get_start_position()
    assert a.get_exit_position() == b.get_exit_position()


def test_different_seeds_give_different_mazes():
    a = MazeGenerator(21, 21, algorithm="kruskal", seed=1)
    b = MazeGenerator(21, 21, algorithm="kruskal", seed=2)

    assert a.get_walkable_positions() != b.get_walkable_positions()


def test_unseeded_generator_draws_a_seed():
    maze = MazeGenerator(11, 11)

    assert isinstance(maze.seed, int)
    assert maze.algorithm is DEFAULT_ALGORITHM


def test_unseeded_generators_get_independent_seeds():
    seeds = {MazeGenerator(11, 11).seed for _ in range(5)}

    assert len(seeds) == 5


def test_generate_without_rng_builds_a_perfect_maze():
    grid = generate(15, 11, Algorithm.KRUSKAL)

    assert grid.edge_count() == grid.passage_count() - 1
    assert _is_connected(grid)


@pytest.mark.parametrize(
    "key, expected",
    [
        ("prim", Algorithm.PRIM),
        ("Hunt_And_Kill", Algorithm.HUNT_AND_KILL),
        ("binary", Algorithm.BINARY_TREE),
        ("divided", Algorithm.DIVIDED_DIVISION),
        ("huntandkill", Algorithm.HUNT_AND_KILL),
        ("growingtree", Algorithm.GROWING_TREE),
        ("growingtree_mixed", Algorithm.GROWING_TREE_MIXED),
        (Algorithm.ELLER, Algorithm.ELLER),
    ],
)
def test_resolve_algorithm(key, expected):
    assert resolve_algorithm(key) is expected


def test_unknown_algorithm_falls_back_to_default(caplog):
    with caplog.at_level(logging.WARNING, logger="mazegen"):
        maze = MazeGenerator(11, 11, algorithm="labyrinth", seed=3)

    assert maze.algorithm is DEFAULT_ALGORITHM
    assert "Unknown maze algorithm" in caplog.text
    assert maze.edge_count() == maze.passage_count() - 1


def test_read_interface():
    maze = MazeGenerator(15, 11, algorithm="eller", seed=5)

    assert maze.get_dimensions() == Dimensions(15, 11)
    assert maze.is_wall(-1, 0)
    assert maze.is_wall(0, 0)
    assert all(maze.is_passage(x, y) for x, y in maze.get_walkable_positions())
    assert len(maze.get_walkable_positions()) == maze.passage_count()


def test_shortest_path_matches_distance():
    maze = MazeGenerator(21, 21, algorithm="wilson", braid_percent=40, seed=8)
    start = maze.get_start_position()
    exit_ = maze.get_exit_position()

    path = maze.solve_shortest_path(start, exit_)

    assert path is not None
    assert path[0] == start
    assert path[-1] == exit_
    assert len(path) - 1 == maze.distance(start, exit_)
    for (x0, y0), (x1, y1) in zip(path, path[1:]):
        assert abs(x0 - x1) + abs(y0 - y1) == 1
        assert maze.is_passage(x1, y1)


def test_shortest_path_to_wall_is_none():
    maze = MazeGenerator(11, 11, seed=4)

    assert maze.solve_shortest_path(maze.get_start_position(), (0, 0)) is None
    assert maze.distance(maze.get_start_position(), (0, 0)) is None
