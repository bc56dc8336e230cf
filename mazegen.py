"""Reusable maze topology module.

Builds a perfect maze on a binary wall/passage grid, optionally braids it into
a loopy maze, then picks a start/exit pair near the border with the longest
shortest path between them.

Basic usage:

    from mazegen import MazeGenerator

    maze = MazeGenerator(31, 31, algorithm="prim", braid_percent=20, seed=42)
    start = maze.get_start_position()
    path = maze.solve_shortest_path(start, maze.get_exit_position())

Cells are addressed as (x, y), 0-indexed from the top-left corner. The grid is
a flat list indexed by `y * width + x` where True means wall.
"""

from collections import deque
from enum import Enum
import logging
import random
import time
from typing import (
    Deque,
    Dict,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

import carvers


Coord = Tuple[int, int]  # (x, y)


WALL = True
PASSAGE = False

# N, E, S, W
DIRECTIONS: Tuple[Coord, ...] = ((0, -1), (1, 0), (0, 1), (-1, 0))

# Cells with x or y this close to an edge may hold the start or the exit.
BORDER_BAND = 2

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Carving algorithms known to the topology builder."""

    BINARY_TREE = "binary-tree"
    SIDEWINDER = "sidewinder"
    ELLER = "eller"
    ICEY = "icey"
    DIVIDED_DIVISION = "divided-division"
    PRIM = "prim"
    KRUSKAL = "kruskal"
    HUNT_AND_KILL = "hunt-and-kill"
    WILSON = "wilson"
    GROWING_TREE = "growing-tree"
    GROWING_TREE_MIXED = "growing-tree-mixed"


DEFAULT_ALGORITHM = Algorithm.DIVIDED_DIVISION

_ALIASES: Dict[str, Algorithm] = {
    "binary": Algorithm.BINARY_TREE,
    "divided": Algorithm.DIVIDED_DIVISION,
    "huntandkill": Algorithm.HUNT_AND_KILL,
    "growingtree": Algorithm.GROWING_TREE,
    "growingtree-mixed": Algorithm.GROWING_TREE_MIXED,
}

CARVERS: Dict[Algorithm, carvers.Carver] = {
    Algorithm.BINARY_TREE: carvers.carve_binary_tree,
    Algorithm.SIDEWINDER: carvers.carve_sidewinder,
    Algorithm.ELLER: carvers.carve_eller,
    Algorithm.ICEY: carvers.carve_icey,
    Algorithm.DIVIDED_DIVISION: carvers.carve_divided_division,
    Algorithm.PRIM: carvers.carve_prim,
    Algorithm.KRUSKAL: carvers.carve_kruskal,
    Algorithm.HUNT_AND_KILL: carvers.carve_hunt_and_kill,
    Algorithm.WILSON: carvers.carve_wilson,
    Algorithm.GROWING_TREE: carvers.carve_growing_tree,
    Algorithm.GROWING_TREE_MIXED: carvers.carve_growing_tree_mixed,
}


def resolve_algorithm(key: Union[str, Algorithm]) -> Algorithm:
    """Map an algorithm key to an `Algorithm`.

    Keys are matched case-insensitively with `_` and `-` treated alike; the
    short keys of the difficulty table ("binary", "huntandkill", ...) are
    accepted too. Unknown keys fall back to the default algorithm.
    """

    if isinstance(key, Algorithm):
        return key

    norm = str(key).strip().lower().replace("_", "-")
    try:
        return Algorithm(norm)
    except ValueError:
        pass

    alias = _ALIASES.get(norm)
    if alias is not None:
        return alias

    logger.warning(
        "Unknown maze algorithm %r, falling back to %s",
        key,
        DEFAULT_ALGORITHM.value,
    )
    return DEFAULT_ALGORITHM


class Dimensions(NamedTuple):
    width: int
    height: int


class Grid:
    """Rectangular wall/passage map.

    Created fully walled and mutated in place by carving; never resized.
    Reads outside the grid report a wall.
    """

    width: int
    height: int
    cells: List[bool]

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError("Grid width and height must be >= 1")
        self.width = width
        self.height = height
        self.cells = [WALL] * (width * height)

    def index(self, x: int, y: int) -> int:
        return y * self.width + x

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_wall(self, x: int, y: int) -> bool:
        if not self.in_bounds(x, y):
            return True
        return self.cells[y * self.width + x]

    def is_passage(self, x: int, y: int) -> bool:
        return not self.is_wall(x, y)

    def set_wall(self, x: int, y: int, wall: bool) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) is outside the grid")
        self.cells[y * self.width + x] = wall

    def carve(self, x: int, y: int) -> None:
        self.set_wall(x, y, PASSAGE)

    def neighbors(self, x: int, y: int) -> Iterator[Coord]:
        """Yield in-bounds orthogonal neighbors in N, E, S, W order."""

        for dx, dy in DIRECTIONS:
            nx, ny = x + dx, y + dy
            if 0 <= nx < self.width and 0 <= ny < self.height:
                yield (nx, ny)

    def passage_neighbors(self, x: int, y: int) -> List[Coord]:
        return [n for n in self.neighbors(x, y) if not self.is_wall(*n)]

    def walled_neighbors(self, x: int, y: int) -> List[Coord]:
        return [n for n in self.neighbors(x, y) if self.is_wall(*n)]

    def passages(self) -> List[Coord]:
        """Return every passage cell in row-major order."""

        w = self.width
        return [
            (i % w, i // w)
            for i, wall in enumerate(self.cells)
            if not wall
        ]

    def passage_count(self) -> int:
        return self.cells.count(PASSAGE)

    def edge_count(self) -> int:
        """Count orthogonally adjacent passage pairs."""

        edges = 0
        for x, y in self.passages():
            if x + 1 < self.width and not self.is_wall(x + 1, y):
                edges += 1
            if y + 1 < self.height and not self.is_wall(x, y + 1):
                edges += 1
        return edges

    def is_dead_end(self, x: int, y: int) -> bool:
        if self.is_wall(x, y):
            return False
        return len(self.passage_neighbors(x, y)) == 1

    def dead_ends(self) -> List[Coord]:
        return [c for c in self.passages() if self.is_dead_end(*c)]

    def copy(self) -> "Grid":
        clone = Grid(self.width, self.height)
        clone.cells = list(self.cells)
        return clone


def make_seed() -> int:
    """Return a fresh wall-clock based seed."""

    return time.time_ns() + random.randrange(1_000_000)


def _carve_degenerate(grid: Grid) -> None:
    # Top row plus left column: connected and cycle-free at any size.
    for x in range(grid.width):
        grid.carve(x, 0)
    for y in range(grid.height):
        grid.carve(0, y)


def generate(
    width: int,
    height: int,
    algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
    rng: Optional[random.Random] = None,
) -> Grid:
    """Build a perfect maze on a fresh `width` x `height` grid.

    Grids too small to hold a room (width or height below 3) get a
    degenerate but connected maze instead of an error.
    """

    grid = Grid(width, height)
    if rng is None:
        rng = random.Random(make_seed())
    algo = resolve_algorithm(algorithm)

    if width < 3 or height < 3:
        logger.warning(
            "Maze %dx%d is too small for %s, carving a degenerate maze",
            width,
            height,
            algo.value,
        )
        _carve_degenerate(grid)
        return grid

    CARVERS[algo](grid, rng)

    if grid.edge_count() != grid.passage_count() - 1:
        raise RuntimeError(
            f"Maze generation with {algo.value} did not produce a spanning tree"
        )

    logger.debug(
        "Carved %dx%d maze with %s: %d passages",
        width,
        height,
        algo.value,
        grid.passage_count(),
    )
    return grid


def braid(grid: Grid, percentage: float, rng: random.Random) -> int:
    """Carve extra openings at dead ends to introduce loops.

    Each dead end found by a single scan is braided with probability
    `percentage / 100` by opening one of its walled neighbors at random.
    Dead ends are not re-checked after earlier carvings, so at 100 some may
    be left with no walled neighbor and stay dead ends.

    Returns the number of cells carved.
    """

    if percentage <= 0:
        return 0

    carved = 0
    for x, y in grid.dead_ends():
        # Both draws happen for every dead end so one seed yields nested
        # trigger sets across percentages.
        roll = rng.random() * 100
        pick = rng.random()
        if roll >= percentage:
            continue
        walled = grid.walled_neighbors(x, y)
        if not walled:
            continue
        tx, ty = walled[int(pick * len(walled))]
        grid.carve(tx, ty)
        carved += 1

    logger.debug("Braided %d dead ends at %s%%", carved, percentage)
    return carved


def bfs_distances(grid: Grid, start: Coord) -> List[int]:
    """Return hop counts from `start` to every cell (-1 when unreachable)."""

    dist = [-1] * (grid.width * grid.height)
    if grid.is_wall(*start):
        return dist

    dist[grid.index(*start)] = 0
    q: Deque[Coord] = deque([start])
    while q:
        x, y = q.popleft()
        step = dist[grid.index(x, y)] + 1
        for nx, ny in grid.passage_neighbors(x, y):
            i = grid.index(nx, ny)
            if dist[i] < 0:
                dist[i] = step
                q.append((nx, ny))
    return dist


def border_cells(grid: Grid) -> List[Coord]:
    """Return passage cells within the border band, in row-major order."""

    lo = BORDER_BAND - 1
    hi_x = grid.width - BORDER_BAND
    hi_y = grid.height - BORDER_BAND
    return [
        (x, y)
        for x, y in grid.passages()
        if x <= lo or x >= hi_x or y <= lo or y >= hi_y
    ]


def _fallback_endpoints(grid: Grid) -> Tuple[Coord, Coord]:
    # Near opposite corners; a walled corner gives way to the first or last
    # passage so both endpoints stay walkable.
    start = (min(1, grid.width - 1), min(1, grid.height - 1))
    exit_ = (max(grid.width - 2, 0), max(grid.height - 2, 0))
    cells = grid.passages()
    if cells:
        if grid.is_wall(*start):
            start = cells[0]
        if grid.is_wall(*exit_):
            exit_ = cells[-1]
    return start, exit_


def select_endpoints(grid: Grid) -> Tuple[Coord, Coord]:
    """Pick the border-cell pair with the longest shortest path.

    Returns (start, exit); start is the cell closer to the top-left corner.
    Ties on distance keep the first pair in enumeration order.
    """

    cells = border_cells(grid)
    if len(cells) < 2:
        logger.warning(
            "Only %d border cells in %dx%d maze, using default endpoints",
            len(cells),
            grid.width,
            grid.height,
        )
        return _fallback_endpoints(grid)

    best_distance = 0
    best: Tuple[Coord, Coord] = (cells[0], cells[1])
    for i, a in enumerate(cells[:-1]):
        dist = bfs_distances(grid, a)
        for b in cells[i + 1:]:
            d = dist[grid.index(*b)]
            if d > best_distance:
                best_distance = d
                best = (a, b)

    first, second = best
    if first[0] + first[1] < second[0] + second[1]:
        return first, second
    return second, first


class MazeGenerator:
    """Generate one maze level: carve, braid, then place the endpoints.

    The whole pipeline runs in the constructor, so a half-built grid is never
    visible. Afterwards the instance only offers read methods.
    """

    width: int
    height: int
    seed: int
    algorithm: Algorithm
    braid_percent: float
    braided: int
    _grid: Grid
    _start: Coord
    _exit: Coord

    def __init__(
        self,
        width: int,
        height: int,
        *,
        algorithm: Union[str, Algorithm] = DEFAULT_ALGORITHM,
        braid_percent: float = 0,
        seed: Optional[int] = None,
    ) -> None:
        if seed is None:
            seed = make_seed()
            logger.info("Seeding maze RNG with %d", seed)

        self.width = width
        self.height = height
        self.seed = seed
        self.algorithm = resolve_algorithm(algorithm)
        self.braid_percent = braid_percent

        rng = random.Random(seed)
        grid = generate(width, height, self.algorithm, rng)
        self.braided = braid(grid, braid_percent, rng)
        self._start, self._exit = select_endpoints(grid)
        self._grid = grid

        logger.info(
            "Maze %dx%d (%s, braid %s%%): start %s, exit %s",
            width,
            height,
            self.algorithm.value,
            braid_percent,
            self._start,
            self._exit,
        )

    def is_wall(self, x: int, y: int) -> bool:
        return self._grid.is_wall(x, y)

    def is_passage(self, x: int, y: int) -> bool:
        return self._grid.is_passage(x, y)

    def get_dimensions(self) -> Dimensions:
        return Dimensions(self.width, self.height)

    def get_start_position(self) -> Coord:
        return self._start

    def get_exit_position(self) -> Coord:
        return self._exit

    def get_walkable_positions(self) -> List[Coord]:
        """Return every passage cell in row-major order."""

        return self._grid.passages()

    def passage_count(self) -> int:
        return self._grid.passage_count()

    def edge_count(self) -> int:
        return self._grid.edge_count()

    def dead_end_count(self) -> int:
        return len(self._grid.dead_ends())

    def distance(self, a: Coord, b: Coord) -> Optional[int]:
        """Return the shortest-path length between two cells, or None."""

        if not self._grid.in_bounds(*b):
            return None
        d = bfs_distances(self._grid, a)[self._grid.index(*b)]
        return d if d >= 0 else None

    def solve_shortest_path(
        self, entry: Coord, exit_: Coord
    ) -> Optional[List[Coord]]:
        """Return the shortest path from entry to exit using BFS.

        Returns a list of coordinates including both endpoints, or None if no
        path exists.
        """

        grid = self._grid
        if grid.is_wall(*entry) or grid.is_wall(*exit_):
            return None
        if entry == exit_:
            return [entry]

        prev = [-1] * (grid.width * grid.height)
        start_i = grid.index(*entry)
        goal_i = grid.index(*exit_)
        prev[start_i] = start_i

        q: Deque[Coord] = deque([entry])
        while q:
            x, y = q.popleft()
            cur = grid.index(x, y)
            if cur == goal_i:
                break
            for nx, ny in grid.passage_neighbors(x, y):
                i = grid.index(nx, ny)
                if prev[i] < 0:
                    prev[i] = cur
                    q.append((nx, ny))

        if prev[goal_i] < 0:
            return None

        out: List[Coord] = []
        i = goal_i
        while i != start_i:
            out.append((i % grid.width, i // grid.width))
            i = prev[i]
        out.append(entry)
        out.reverse()
        return out
