"""Level completion scoring."""

from dataclasses import dataclass
import math

SCORE_BASE = 100
SCORE_TIME_BONUS_MULTIPLIER = 10
SCORE_MOVE_EFFICIENCY_MULTIPLIER = 5


@dataclass(frozen=True)
class ScoreBreakdown:
    total: int
    base: int
    time_bonus: int
    move_bonus: int


def calculate_level_score(
    level_number: int,
    completion_time_ms: float,
    moves: int,
    maze_size: int,
) -> ScoreBreakdown:
    """Score a completed level.

    The time target is one second per cell; the move target is roughly one
    and a half times the maze side. Beating either earns a bonus scaled on
    the base score.
    """

    base = SCORE_BASE * level_number

    target_time = maze_size * maze_size * 1000
    time_ratio = 0.0
    if target_time > 0:
        time_ratio = max(0.0, (target_time - completion_time_ms) / target_time)
    time_bonus = math.floor(base * time_ratio * SCORE_TIME_BONUS_MULTIPLIER)

    optimal_moves = maze_size * 1.5
    move_ratio = 0.0
    if optimal_moves > 0:
        move_ratio = max(0.0, (optimal_moves - moves) / optimal_moves)
    move_bonus = math.floor(base * move_ratio * SCORE_MOVE_EFFICIENCY_MULTIPLIER)

    return ScoreBreakdown(
        total=max(0, base + time_bonus + move_bonus),
        base=base,
        time_bonus=max(0, time_bonus),
        move_bonus=max(0, move_bonus),
    )
