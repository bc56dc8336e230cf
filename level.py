"""Level progression on top of the maze engine.

A `Level` pairs one generated maze with its difficulty and completion
metadata; `LevelManager` walks the endless level sequence, keeps the score
and saves progress metadata through a `ProgressStore`.
"""

import logging
import time
from typing import Any, Dict, List, Optional

from difficulty import Difficulty, get_difficulty_for_level
from mazegen import MazeGenerator
from scoring import ScoreBreakdown, calculate_level_score
from storage import HIGH_SCORE_KEY, SAVE_GAME_KEY, ProgressStore

# Larger mazes make endpoint selection too slow for a level transition.
MAX_MAZE_SIZE = 60

logger = logging.getLogger(__name__)


def now_ms() -> float:
    return time.monotonic() * 1000


class Level:
    """A generated maze with its level metadata."""

    maze: MazeGenerator
    level_number: int
    difficulty: Difficulty
    start_time: float
    completion_time: Optional[float]
    completed: bool

    def __init__(
        self,
        maze: MazeGenerator,
        level_number: int,
        difficulty: Difficulty,
        *,
        start_time: Optional[float] = None,
    ) -> None:
        self.maze = maze
        self.level_number = level_number
        self.difficulty = difficulty
        self.start_time = now_ms() if start_time is None else start_time
        self.completion_time = None
        self.completed = False

    def complete(self, now: Optional[float] = None) -> None:
        """Mark the level completed; later calls keep the first time."""

        if self.completed:
            return
        self.completed = True
        self.completion_time = (now_ms() if now is None else now) - self.start_time

    def serialize(self) -> Dict[str, Any]:
        return {
            "level_number": self.level_number,
            "difficulty": self.difficulty.to_dict(),
            "completed": self.completed,
            "completion_time": self.completion_time,
        }

    def get_metadata(self) -> Dict[str, Any]:
        meta = self.serialize()
        meta["maze_size"] = self.maze.get_dimensions()._asdict()
        return meta


class LevelManager:
    """Generate levels in sequence and track score and progress.

    Generation failures other than at level 1 restart the progression at
    level 1 instead of leaving a broken level in play.
    """

    store: Optional[ProgressStore]
    seed: Optional[int]
    max_size: int
    current_level: int
    score: int
    high_score: int
    completed_levels: List[int]
    total_play_time: float
    current: Optional[Level]

    def __init__(
        self,
        store: Optional[ProgressStore] = None,
        *,
        seed: Optional[int] = None,
        max_size: int = MAX_MAZE_SIZE,
    ) -> None:
        self.store = store
        self.seed = seed
        self.max_size = max_size
        self.current_level = 1
        self.score = 0
        self.high_score = 0
        self.completed_levels = []
        self.total_play_time = 0.0
        self.current = None

        if store is not None:
            high_score = store.load(HIGH_SCORE_KEY)
            if isinstance(high_score, int):
                self.high_score = high_score

    def level_seed(self, level_number: int) -> Optional[int]:
        """Per-level seed derived from the base seed (None = wall clock)."""

        if self.seed is None:
            return None
        return self.seed + level_number

    def build_level(self, level_number: int) -> Level:
        """Generate a level without any recovery."""

        difficulty = get_difficulty_for_level(level_number)
        size = min(difficulty.maze_size, self.max_size)
        logger.info(
            "Generating level %d: %dx%d, %d%% braiding, %s",
            level_number,
            size,
            size,
            difficulty.braid_percent,
            difficulty.algorithm.value,
        )
        maze = MazeGenerator(
            size,
            size,
            algorithm=difficulty.algorithm,
            braid_percent=difficulty.braid_percent,
            seed=self.level_seed(level_number),
        )
        return Level(maze, level_number, difficulty)

    def generate_level(self, level_number: int) -> Level:
        """Generate `level_number` and make it the current level."""

        try:
            level = self.build_level(level_number)
        except Exception:
            if level_number == 1:
                raise
            logger.exception(
                "Failed to generate level %d, restarting from level 1",
                level_number,
            )
            self.reset()
            level = self.build_level(1)

        self.current_level = level.level_number
        self.current = level
        return level

    def restart_level(self) -> Level:
        return self.generate_level(self.current_level)

    def add_score(self, points: int) -> None:
        self.score += points
        if self.score > self.high_score:
            self.high_score = self.score
            if self.store is not None:
                self.store.save(HIGH_SCORE_KEY, self.high_score)

    def complete_level(
        self, moves: int, now: Optional[float] = None
    ) -> ScoreBreakdown:
        """Finish the current level, award score, save and move on."""

        level = self.current
        if level is None:
            raise RuntimeError("No level in progress")
        if level.completed:
            raise RuntimeError(f"Level {level.level_number} is already completed")

        level.complete(now)
        breakdown = calculate_level_score(
            level.level_number,
            level.completion_time or 0.0,
            moves,
            level.maze.get_dimensions().width,
        )
        self.completed_levels.append(level.level_number)
        self.total_play_time += level.completion_time or 0.0
        self.add_score(breakdown.total)
        logger.info("Level %d completed: %s", level.level_number, breakdown)

        self.current_level += 1
        self.save()
        self.generate_level(self.current_level)
        return breakdown

    def save(self) -> bool:
        if self.store is None:
            return False
        data = {
            "current_level": self.current_level,
            "score": self.score,
            "completed_levels": list(self.completed_levels),
            "total_play_time": self.total_play_time,
            "level": self.current.serialize() if self.current else None,
        }
        return self.store.save(SAVE_GAME_KEY, data)

    def resume(self) -> Level:
        """Regenerate the saved level (level 1 without a usable save)."""

        data = self.store.load(SAVE_GAME_KEY) if self.store else None
        if isinstance(data, dict):
            try:
                self.current_level = max(1, int(data.get("current_level", 1)))
                self.score = max(0, int(data.get("score", 0)))
                self.completed_levels = [
                    int(n) for n in data.get("completed_levels", [])
                ]
                self.total_play_time = max(
                    0.0, float(data.get("total_play_time", 0.0))
                )
            except (TypeError, ValueError) as exc:
                logger.warning("Ignoring malformed save data: %s", exc)
                self.current_level = 1
                self.score = 0
                self.completed_levels = []
                self.total_play_time = 0.0
        return self.generate_level(self.current_level)

    def reset(self) -> None:
        """Forget progress and start over at level 1; keeps the high score."""

        self.current_level = 1
        self.score = 0
        self.completed_levels = []
        self.total_play_time = 0.0
        self.current = None
        if self.store is not None:
            self.store.remove(SAVE_GAME_KEY)
