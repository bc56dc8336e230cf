"""Progress storage.

Keeps keyed, versioned JSON envelopes in a single file:

    {"maze_runner_save": {"version": 1, "timestamp": 1700000000000, "data": {...}}}

Only progress metadata (level number, difficulty, completion, score) is
stored; mazes are regenerated from the level number on resume.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
import time
from typing import Any, Dict, Optional, Union

STORAGE_VERSION = 1

SAVE_GAME_KEY = "maze_runner_save"
HIGH_SCORE_KEY = "maze_runner_high_score"

logger = logging.getLogger(__name__)


class ProgressStore:
    """Save/load progress data in a JSON file.

    Failures never raise: they are logged and reported as False or None so a
    broken save file cannot stop a game from starting.
    """

    path: Path

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("progress file must hold a JSON object")
        return raw

    def _write(self, entries: Dict[str, Any]) -> None:
        text = json.dumps(entries, indent=2, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Written beside the live file and swapped in; an interrupted write
        # leaves the previous save intact.
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as file:
                file.write(text + "\n")
            tmp.replace(self.path)
        finally:
            if tmp.exists():
                tmp.unlink()

    def _envelope(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            entries = self._read()
        except (OSError, ValueError) as error:
            logger.error("Error loading progress from %s: %s", self.path, error)
            return None
        envelope = entries.get(key)
        return envelope if isinstance(envelope, dict) else None

    def save(self, key: str, data: Any) -> bool:
        """Store `data` under `key` with the current version and timestamp.

        Args:
            key: Entry name, e.g. SAVE_GAME_KEY.
            data: JSON-serialisable payload.

        Returns:
            True if the file was written.
        """
        try:
            entries = self._read()
        except (OSError, ValueError) as error:
            logger.warning(
                "Replacing unreadable progress file %s: %s", self.path, error
            )
            entries = {}

        entries[key] = {
            "version": STORAGE_VERSION,
            "timestamp": int(time.time() * 1000),
            "data": data,
        }
        try:
            self._write(entries)
        except (OSError, TypeError, ValueError) as error:
            logger.error("Error saving progress to %s: %s", self.path, error)
            return False
        return True

    def load(self, key: str) -> Any:
        """Return the payload stored under `key`, or None.

        Entries written by another storage version are ignored.
        """
        envelope = self._envelope(key)
        if envelope is None:
            return None
        if envelope.get("version") != STORAGE_VERSION:
            logger.warning("Save data version mismatch for %r, ignoring", key)
            return None
        return envelope.get("data")

    def remove(self, key: str) -> bool:
        try:
            entries = self._read()
            if key in entries:
                del entries[key]
                self._write(entries)
        except (OSError, ValueError) as error:
            logger.error("Error removing %r from %s: %s", key, self.path, error)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as error:
            logger.error("Error clearing %s: %s", self.path, error)
            return False
        return True

    def has(self, key: str) -> bool:
        return self._envelope(key) is not None

    def get_timestamp(self, key: str) -> Optional[int]:
        envelope = self._envelope(key)
        if envelope is None:
            return None
        timestamp = envelope.get("timestamp")
        return int(timestamp) if isinstance(timestamp, (int, float)) else None
