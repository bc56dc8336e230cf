"""Command line entry point: generate, validate and report maze levels.

Usage: python3 maze_runner.py config.txt
"""

from collections import deque
import logging
from pathlib import Path
import sys
from typing import Deque, List, Optional, Sequence, Set

from level import LevelManager
from mazegen import BORDER_BAND, Coord, MazeGenerator
from parsing import Config, ConfigError, read_config
from storage import ProgressStore


logger = logging.getLogger(__name__)


def in_border_band(maze: MazeGenerator, cell: Coord) -> bool:
    width, height = maze.get_dimensions()
    x, y = cell
    return (
        x < BORDER_BAND
        or y < BORDER_BAND
        or x >= width - BORDER_BAND
        or y >= height - BORDER_BAND
    )


def validate_maze(maze: MazeGenerator, *, perfect: bool) -> None:
    """Validate the generated maze.

    Checks:
    - START and EXIT are passages near the border, distinct when possible.
    - Full connectivity of the passage cells.
    - If perfect=True: the passage graph is a tree (no loops).
    """

    cells = maze.get_walkable_positions()
    if not cells:
        raise RuntimeError("Invalid maze: no passage cells")

    start = maze.get_start_position()
    exit_ = maze.get_exit_position()
    for name, cell in (("START", start), ("EXIT", exit_)):
        if not maze.is_passage(*cell):
            raise RuntimeError(f"Invalid maze: {name} {cell} is a wall")
        if not in_border_band(maze, cell):
            raise RuntimeError(f"Invalid maze: {name} {cell} is not near the border")
    if start == exit_ and len(cells) > 1:
        raise RuntimeError("Invalid maze: START and EXIT are the same cell")

    # Connectivity: every passage must be reachable from START.
    reachable: Set[Coord] = {start}
    q: Deque[Coord] = deque([start])
    while q:
        x, y = q.popleft()
        for nxt in ((x, y - 1), (x + 1, y), (x, y + 1), (x - 1, y)):
            if nxt in reachable or not maze.is_passage(*nxt):
                continue
            reachable.add(nxt)
            q.append(nxt)

    if len(reachable) != len(cells):
        raise RuntimeError("Invalid maze: disconnected cells exist")

    if perfect and maze.edge_count() != len(cells) - 1:
        # A perfect maze is a tree: edges == nodes - 1.
        raise RuntimeError("Invalid maze: unbraided maze contains loops")


def path_to_directions(path: Sequence[Coord]) -> str:
    """Convert a coordinate path into N/E/S/W directions."""

    if len(path) < 2:
        return ""

    out: List[str] = []
    for (x0, y0), (x1, y1) in zip(path, path[1:]):
        dx = x1 - x0
        dy = y1 - y0
        if dx == 0 and dy == -1:
            out.append("N")
        elif dx == 0 and dy == 1:
            out.append("S")
        elif dx == 1 and dy == 0:
            out.append("E")
        elif dx == -1 and dy == 0:
            out.append("W")
        else:
            raise ValueError("Non-adjacent steps in path")
    return "".join(out)


def describe_maze(maze: MazeGenerator, title: str) -> List[str]:
    """Return the report lines for one maze."""

    width, height = maze.get_dimensions()
    start = maze.get_start_position()
    exit_ = maze.get_exit_position()
    path = maze.solve_shortest_path(start, exit_)
    if path is None:
        raise RuntimeError("No valid path from START to EXIT")

    return [
        f"{title}: {maze.algorithm.value}, {width}x{height}, "
        f"braid {maze.braid_percent}%, seed {maze.seed}",
        f"  start {start} -> exit {exit_}: {len(path) - 1} steps",
        f"  passages {maze.passage_count()}, "
        f"dead ends {maze.dead_end_count()}, "
        f"extra openings {maze.braided}",
        f"  path: {path_to_directions(path)}",
    ]


def run(config: Config) -> int:
    """Generate the maze or levels the config asks for and report them."""

    if config.width is not None and config.height is not None:
        width = min(config.width, config.max_size)
        height = min(config.height, config.max_size)
        if (width, height) != (config.width, config.height):
            logger.warning(
                "Maze %dx%d exceeds MAX_SIZE %d, generating %dx%d",
                config.width,
                config.height,
                config.max_size,
                width,
                height,
            )
        maze = MazeGenerator(
            width,
            height,
            algorithm=config.algorithm,
            braid_percent=config.braid,
            seed=config.seed,
        )
        validate_maze(maze, perfect=config.braid == 0)
        print("\n".join(describe_maze(maze, "Maze")))
        return 0

    store = ProgressStore(config.save_file) if config.save_file else None
    manager = LevelManager(store, seed=config.seed, max_size=config.max_size)

    if config.level is not None:
        level = manager.generate_level(config.level)
    else:
        level = manager.resume()

    for n in range(config.count):
        if n:
            level = manager.generate_level(level.level_number + 1)
        validate_maze(level.maze, perfect=level.difficulty.braid_percent == 0)
        title = f"Level {level.level_number} [{level.difficulty.tier}]"
        print("\n".join(describe_maze(level.maze, title)))

    if store is not None and not manager.save():
        print(f"Error: could not save progress to {store.path}", file=sys.stderr)
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entrypoint."""

    if argv is None:
        argv = sys.argv
    if len(argv) != 2:
        print("Usage: python3 maze_runner.py config.txt", file=sys.stderr)
        return 2

    try:
        config = read_config(Path(argv[1]))
        logging.basicConfig(
            level=getattr(logging, config.log_level),
            format="%(levelname)s %(name)s: %(message)s",
        )
        return run(config)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except (ConfigError, OSError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except Exception as exc:
        # Avoid tracebacks for users; keep output concise.
        logger.debug("Unexpected error", exc_info=True)
        print(f"Unexpected error: "
              f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
