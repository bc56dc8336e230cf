import pytest

from difficulty import (
    DIFFICULTY_TIERS,
    Difficulty,
    find_tier,
    get_difficulty_for_level,
)
from mazegen import Algorithm


@pytest.mark.parametrize(
    "level, tier, size, braid, algorithm",
    [
        (1, "Learning", 15, 0, Algorithm.SIDEWINDER),
        (10, "Learning", 25, 0, Algorithm.BINARY_TREE),
        (11, "Skill Building", 25, 0, Algorithm.KRUSKAL),
        (18, "Skill Building", 32, 5, Algorithm.PRIM),
        (25, "Skill Building", 40, 10, Algorithm.KRUSKAL),
        (26, "Challenge", 40, 10, Algorithm.HUNT_AND_KILL),
        (50, "Challenge", 60, 25, Algorithm.HUNT_AND_KILL),
        (51, "Expert", 60, 25, Algorithm.GROWING_TREE_MIXED),
        (100, "Expert", 80, 50, Algorithm.WILSON),
        (101, "Master", 80, 50, Algorithm.KRUSKAL),
        (500, "Master", 80, 50, Algorithm.PRIM),
    ],
)
def test_difficulty_for_level(level, tier, size, braid, algorithm):
    difficulty = get_difficulty_for_level(level)

    assert difficulty == Difficulty(
        tier=tier,
        maze_size=size,
        braid_percent=braid,
        algorithm=algorithm,
        level=level,
    )


def test_size_and_braid_never_shrink_within_a_tier():
    for tier in DIFFICULTY_TIERS[:-1]:
        first, last = tier.levels
        previous = get_difficulty_for_level(first)
        for level in range(first + 1, int(last) + 1):
            current = get_difficulty_for_level(level)
            assert current.maze_size >= previous.maze_size
            assert current.braid_percent >= previous.braid_percent
            previous = current


def test_levels_below_one_use_the_last_tier():
    assert find_tier(0) is DIFFICULTY_TIERS[-1]
    assert get_difficulty_for_level(0).tier == "Master"


def test_difficulty_dict_round_trip():
    difficulty = get_difficulty_for_level(42)

    raw = difficulty.to_dict()

    assert raw["algorithm"] == difficulty.algorithm.value
    assert Difficulty.from_dict(raw) == difficulty
