"""Difficulty tiers: map a level number to maze parameters.

Levels are grouped into named tiers; inside a tier the maze size and braid
percentage grow linearly with the level, and the carving algorithm rotates
through the tier's pool.
"""

from dataclasses import dataclass
import math
from typing import Any, Dict, Mapping, Sequence, Tuple

from mazegen import Algorithm, resolve_algorithm


@dataclass(frozen=True)
class Tier:
    """A band of levels sharing an algorithm pool and parameter ranges."""

    name: str
    levels: Tuple[int, float]
    algorithms: Tuple[Algorithm, ...]
    size_range: Tuple[int, int]
    braid_range: Tuple[int, int]
    description: str = ""

    def contains(self, level: int) -> bool:
        return self.levels[0] <= level <= self.levels[1]


@dataclass(frozen=True)
class Difficulty:
    """Maze parameters for one level."""

    tier: str
    maze_size: int
    braid_percent: int
    algorithm: Algorithm
    level: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.tier,
            "maze_size": self.maze_size,
            "braid_percent": self.braid_percent,
            "algorithm": self.algorithm.value,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Difficulty":
        return cls(
            tier=str(raw["tier"]),
            maze_size=int(raw["maze_size"]),
            braid_percent=int(raw["braid_percent"]),
            algorithm=resolve_algorithm(str(raw["algorithm"])),
            level=int(raw["level"]),
        )


DIFFICULTY_TIERS: Tuple[Tier, ...] = (
    Tier(
        name="Learning",
        levels=(1, 10),
        algorithms=(Algorithm.BINARY_TREE, Algorithm.SIDEWINDER),
        size_range=(15, 25),
        braid_range=(0, 0),
        description="Predictable patterns help players learn mechanics",
    ),
    Tier(
        name="Skill Building",
        levels=(11, 25),
        algorithms=(Algorithm.PRIM, Algorithm.KRUSKAL),
        size_range=(25, 40),
        braid_range=(0, 10),
        description="True branching without bias and multiple short paths",
    ),
    Tier(
        name="Challenge",
        levels=(26, 50),
        algorithms=(Algorithm.HUNT_AND_KILL, Algorithm.GROWING_TREE),
        size_range=(40, 60),
        braid_range=(10, 25),
        description="Balanced corridors and branches with harder navigation",
    ),
    Tier(
        name="Expert",
        levels=(51, 100),
        algorithms=(Algorithm.WILSON, Algorithm.GROWING_TREE_MIXED),
        size_range=(60, 80),
        braid_range=(25, 50),
        description="Complex decision trees where loops make tracking difficult",
    ),
    Tier(
        name="Master",
        levels=(101, math.inf),
        algorithms=(
            Algorithm.PRIM,
            Algorithm.KRUSKAL,
            Algorithm.HUNT_AND_KILL,
            Algorithm.WILSON,
            Algorithm.GROWING_TREE,
        ),
        size_range=(80, 100),
        braid_range=(50, 100),
        description="Maximum variety prevents pattern recognition",
    ),
)


def lerp(start: float, end: float, t: float) -> float:
    return start + (end - start) * t


def find_tier(level: int, tiers: Sequence[Tier] = DIFFICULTY_TIERS) -> Tier:
    """Return the tier holding `level` (the last tier if none does)."""

    for tier in tiers:
        if tier.contains(level):
            return tier
    return tiers[-1]


def get_difficulty_for_level(
    level: int, tiers: Sequence[Tier] = DIFFICULTY_TIERS
) -> Difficulty:
    """Compute the maze parameters for a level.

    Size and braid percentage are interpolated across the tier and floored.
    An open-ended tier stays at the bottom of its ranges.
    """

    tier = find_tier(level, tiers)
    first, last = tier.levels
    span = last - first
    progress = (level - first) / span if span > 0 else 0.0

    maze_size = math.floor(lerp(tier.size_range[0], tier.size_range[1], progress))
    braid_percent = math.floor(
        lerp(tier.braid_range[0], tier.braid_range[1], progress)
    )
    algorithm = tier.algorithms[level % len(tier.algorithms)]

    return Difficulty(
        tier=tier.name,
        maze_size=maze_size,
        braid_percent=braid_percent,
        algorithm=algorithm,
        level=level,
    )
