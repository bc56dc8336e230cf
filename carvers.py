"""Perfect-maze carving algorithms.

Every carver takes a fully walled grid and a `random.Random` and links the
rooms sitting at odd coordinates into a spanning tree: room (i, j) is cell
(2i+1, 2j+1) and linking two rooms also carves the cell between them. Cells
at even/even coordinates are never carved, so the passage graph of the grid
is a tree whenever the room graph is.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Set, Tuple

if TYPE_CHECKING:
    from mazegen import Grid


Room = Tuple[int, int]  # (col, row) on the room lattice

Carver = Callable[["Grid", random.Random], None]


class RoomLattice:
    """Room view of a grid."""

    grid: Grid
    cols: int
    rows: int

    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.cols = (grid.width - 1) // 2
        self.rows = (grid.height - 1) // 2

    def rooms(self) -> List[Room]:
        """Return all rooms in row-major order."""

        return [(i, j) for j in range(self.rows) for i in range(self.cols)]

    def index(self, room: Room) -> int:
        return room[1] * self.cols + room[0]

    def neighbors(self, room: Room) -> List[Room]:
        i, j = room
        out: List[Room] = []
        for di, dj in ((0, -1), (1, 0), (0, 1), (-1, 0)):
            ni, nj = i + di, j + dj
            if 0 <= ni < self.cols and 0 <= nj < self.rows:
                out.append((ni, nj))
        return out

    def open(self, room: Room) -> None:
        self.grid.carve(2 * room[0] + 1, 2 * room[1] + 1)

    def _between(self, a: Room, b: Room) -> Tuple[int, int]:
        (ai, aj), (bi, bj) = a, b
        if abs(ai - bi) + abs(aj - bj) != 1:
            raise ValueError("Rooms are not adjacent")
        return (ai + bi + 1, aj + bj + 1)

    def link(self, a: Room, b: Room) -> None:
        x, y = self._between(a, b)
        self.open(a)
        self.open(b)
        self.grid.carve(x, y)

    def unlink(self, a: Room, b: Room) -> None:
        x, y = self._between(a, b)
        self.grid.set_wall(x, y, True)


class UnionFind:
    """Disjoint sets over room indices."""

    def __init__(self, n: int) -> None:
        self.parent = list(range(n))
        self.rank = [0] * n

    def find(self, x: int) -> int:
        while self.parent[x] != x:
            self.parent[x] = self.parent[self.parent[x]]
            x = self.parent[x]
        return x

    def union(self, a: int, b: int) -> bool:
        ra = self.find(a)
        rb = self.find(b)
        if ra == rb:
            return False
        if self.rank[ra] < self.rank[rb]:
            self.parent[ra] = rb
        elif self.rank[ra] > self.rank[rb]:
            self.parent[rb] = ra
        else:
            self.parent[rb] = ra
            self.rank[ra] += 1
        return True


def carve_binary_tree(grid: Grid, rng: random.Random) -> None:
    """Link every room to its north or west neighbor."""

    lattice = RoomLattice(grid)
    for room in lattice.rooms():
        i, j = room
        lattice.open(room)
        choices: List[Room] = []
        if j > 0:
            choices.append((i, j - 1))
        if i > 0:
            choices.append((i - 1, j))
        if choices:
            lattice.link(room, rng.choice(choices))


def carve_sidewinder(grid: Grid, rng: random.Random) -> None:
    """Carve eastward runs, closing each with one link north."""

    lattice = RoomLattice(grid)
    for j in range(lattice.rows):
        run: List[Room] = []
        for i in range(lattice.cols):
            room = (i, j)
            lattice.open(room)
            run.append(room)

            at_east = i == lattice.cols - 1
            carve_east = not at_east and (j == 0 or rng.random() < 0.5)
            if carve_east:
                lattice.link(room, (i + 1, j))
                continue

            if j > 0:
                ri, rj = rng.choice(run)
                lattice.link((ri, rj), (ri, rj - 1))
            run = []


def carve_eller(grid: Grid, rng: random.Random) -> None:
    """Eller's algorithm: one row at a time, merging sets as it goes."""

    lattice = RoomLattice(grid)
    cols = lattice.cols
    row_sets: List[Optional[int]] = [None] * cols
    next_set = 0

    for j in range(lattice.rows):
        last = j == lattice.rows - 1
        for i in range(cols):
            lattice.open((i, j))
            if row_sets[i] is None:
                row_sets[i] = next_set
                next_set += 1

        # The last row must join every set still apart.
        for i in range(cols - 1):
            left, right = row_sets[i], row_sets[i + 1]
            if left != right and (last or rng.random() < 0.5):
                lattice.link((i, j), (i + 1, j))
                row_sets = [left if s == right else s for s in row_sets]

        if last:
            break

        members: Dict[Optional[int], List[int]] = {}
        for i, s in enumerate(row_sets):
            members.setdefault(s, []).append(i)

        below: List[Optional[int]] = [None] * cols
        for s, columns in members.items():
            rng.shuffle(columns)
            for i in columns[: rng.randint(1, len(columns))]:
                lattice.link((i, j), (i, j + 1))
                below[i] = s
        row_sets = below


def carve_icey(
    grid: Grid, rng: random.Random, regularity: int = 0
) -> None:
    """Randomized depth-first carving.

    `regularity` 0 picks every turn at random; higher values keep going
    straight more often, giving longer corridors.
    """

    lattice = RoomLattice(grid)
    start = rng.choice(lattice.rooms())
    lattice.open(start)
    visited: Set[Room] = {start}
    stack: List[Room] = [start]
    heading: Optional[Tuple[int, int]] = None

    while stack:
        i, j = stack[-1]
        unvisited = [n for n in lattice.neighbors((i, j)) if n not in visited]
        if not unvisited:
            stack.pop()
            heading = None
            continue

        nxt: Optional[Room] = None
        if (
            heading is not None
            and regularity > 0
            and rng.randrange(regularity + 1) != 0
        ):
            ahead = (i + heading[0], j + heading[1])
            if ahead in unvisited:
                nxt = ahead
        if nxt is None:
            nxt = rng.choice(unvisited)

        heading = (nxt[0] - i, nxt[1] - j)
        lattice.link((i, j), nxt)
        visited.add(nxt)
        stack.append(nxt)


def carve_divided_division(grid: Grid, rng: random.Random) -> None:
    """Recursive division of a fully open lattice.

    Each dividing wall keeps exactly one gap.
    """

    lattice = RoomLattice(grid)
    cols, rows = lattice.cols, lattice.rows
    for room in lattice.rooms():
        i, j = room
        lattice.open(room)
        if i + 1 < cols:
            lattice.link(room, (i + 1, j))
        if j + 1 < rows:
            lattice.link(room, (i, j + 1))

    regions: List[Tuple[int, int, int, int]] = [(0, 0, cols - 1, rows - 1)]
    while regions:
        x0, y0, x1, y1 = regions.pop()
        w = x1 - x0 + 1
        h = y1 - y0 + 1
        if w < 2 and h < 2:
            continue

        if w < h:
            horizontal = True
        elif w > h:
            horizontal = False
        else:
            horizontal = rng.random() < 0.5

        if horizontal:
            k = rng.randint(y0, y1 - 1)
            gap = rng.randint(x0, x1)
            for i in range(x0, x1 + 1):
                if i != gap:
                    lattice.unlink((i, k), (i, k + 1))
            regions.append((x0, y0, x1, k))
            regions.append((x0, k + 1, x1, y1))
        else:
            k = rng.randint(x0, x1 - 1)
            gap = rng.randint(y0, y1)
            for j in range(y0, y1 + 1):
                if j != gap:
                    lattice.unlink((k, j), (k + 1, j))
            regions.append((x0, y0, k, y1))
            regions.append((k + 1, y0, x1, y1))


def carve_prim(grid: Grid, rng: random.Random) -> None:
    """Randomized Prim's: grow from a random frontier edge."""

    lattice = RoomLattice(grid)
    start = rng.choice(lattice.rooms())
    lattice.open(start)
    in_maze: Set[Room] = {start}
    frontier: List[Tuple[Room, Room]] = [
        (start, n) for n in lattice.neighbors(start)
    ]

    while frontier:
        k = rng.randrange(len(frontier))
        frontier[k], frontier[-1] = frontier[-1], frontier[k]
        a, b = frontier.pop()
        if b in in_maze:
            continue
        lattice.link(a, b)
        in_maze.add(b)
        frontier.extend(
            (b, n) for n in lattice.neighbors(b) if n not in in_maze
        )


def carve_kruskal(grid: Grid, rng: random.Random) -> None:
    """Randomized Kruskal's over shuffled room links."""

    lattice = RoomLattice(grid)
    rooms = lattice.rooms()
    edges: List[Tuple[Room, Room]] = []
    for i, j in rooms:
        lattice.open((i, j))
        if i + 1 < lattice.cols:
            edges.append(((i, j), (i + 1, j)))
        if j + 1 < lattice.rows:
            edges.append(((i, j), (i, j + 1)))
    rng.shuffle(edges)

    sets = UnionFind(len(rooms))
    for a, b in edges:
        if sets.union(lattice.index(a), lattice.index(b)):
            lattice.link(a, b)


def carve_hunt_and_kill(grid: Grid, rng: random.Random) -> None:
    """Random walk until stuck, then hunt row by row for a new start."""

    lattice = RoomLattice(grid)
    start = rng.choice(lattice.rooms())
    lattice.open(start)
    visited: Set[Room] = {start}
    current: Optional[Room] = start

    while current is not None:
        unvisited = [n for n in lattice.neighbors(current) if n not in visited]
        if unvisited:
            nxt = rng.choice(unvisited)
            lattice.link(current, nxt)
            visited.add(nxt)
            current = nxt
            continue

        current = None
        for room in lattice.rooms():
            if room in visited:
                continue
            adjacent = [n for n in lattice.neighbors(room) if n in visited]
            if adjacent:
                lattice.link(room, rng.choice(adjacent))
                visited.add(room)
                current = room
                break


def carve_wilson(grid: Grid, rng: random.Random) -> None:
    """Wilson's algorithm using loop-erased random walks."""

    lattice = RoomLattice(grid)
    rooms = lattice.rooms()
    first = rng.choice(rooms)
    lattice.open(first)
    in_maze: Set[Room] = {first}
    remaining = [r for r in rooms if r != first]

    while remaining:
        cell = rng.choice(remaining)
        path: List[Room] = [cell]
        position: Dict[Room, int] = {cell: 0}

        while cell not in in_maze:
            cell = rng.choice(lattice.neighbors(cell))
            if cell in position:
                # Erase the loop just walked.
                cut = position[cell]
                for dropped in path[cut + 1:]:
                    del position[dropped]
                del path[cut + 1:]
            else:
                position[cell] = len(path)
                path.append(cell)

        for a, b in zip(path, path[1:]):
            lattice.link(a, b)
            in_maze.add(a)
        remaining = [r for r in remaining if r not in in_maze]


def _grow(
    grid: Grid,
    rng: random.Random,
    pick: Callable[[List[Room], random.Random], int],
) -> None:
    lattice = RoomLattice(grid)
    start = rng.choice(lattice.rooms())
    lattice.open(start)
    visited: Set[Room] = {start}
    active: List[Room] = [start]

    while active:
        k = pick(active, rng)
        room = active[k]
        unvisited = [n for n in lattice.neighbors(room) if n not in visited]
        if not unvisited:
            del active[k]
            continue
        nxt = rng.choice(unvisited)
        lattice.link(room, nxt)
        visited.add(nxt)
        active.append(nxt)


def _newest_or_random(active: List[Room], rng: random.Random) -> int:
    if rng.random() < 0.75:
        return len(active) - 1
    return rng.randrange(len(active))


def _mixed(active: List[Room], rng: random.Random) -> int:
    strategy = rng.randrange(4)
    if strategy == 0:
        return len(active) - 1
    if strategy == 1:
        return 0
    if strategy == 2:
        return rng.randrange(len(active))
    return len(active) // 2


def carve_growing_tree(grid: Grid, rng: random.Random) -> None:
    """Growing tree, mostly extending the newest room."""

    _grow(grid, rng, _newest_or_random)


def carve_growing_tree_mixed(grid: Grid, rng: random.Random) -> None:
    """Growing tree switching between newest, oldest, random and middle."""

    _grow(grid, rng, _mixed)
