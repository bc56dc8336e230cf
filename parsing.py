"""Parsing module for maze configuration files.

Reads a KEY=VALUE config file into a `Config`. Known keys: WIDTH, HEIGHT,
ALGORITHM, BRAID, LEVEL, COUNT, SEED, MAX_SIZE, SAVE_FILE and LOG_LEVEL.
Giving WIDTH and HEIGHT generates a single maze of that size; otherwise
levels are generated from the difficulty table.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from level import MAX_MAZE_SIZE
from mazegen import DEFAULT_ALGORITHM


ACCEPTABLE_KEYS = (
    "WIDTH",
    "HEIGHT",
    "ALGORITHM",
    "BRAID",
    "LEVEL",
    "COUNT",
    "SEED",
    "MAX_SIZE",
    "SAVE_FILE",
    "LOG_LEVEL",
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class Config:
    """Parsed configuration for maze generation."""

    width: Optional[int]
    height: Optional[int]
    algorithm: str
    braid: int
    level: Optional[int]
    count: int
    seed: Optional[int]
    max_size: int
    save_file: Optional[Path]
    log_level: str


class ConfigError(ValueError):
    """Configuration and validation error."""

    pass


def _read_raw(path: Path) -> Dict[str, Tuple[str, int, str]]:
    """Return KEY -> (value, line number, line) for every config entry."""

    raw: Dict[str, Tuple[str, int, str]] = {}
    try:
        with path.open("r", encoding="utf-8") as file:
            for line_number, line in enumerate(file, start=1):
                stripped = line.split("#", 1)[0].strip()
                if not stripped:
                    continue
                if "=" not in stripped:
                    raise ConfigError(
                        f"Line {line_number}: Invalid syntax"
                        " (expected KEY=VALUE)\n"
                        f"→ {stripped}"
                    )
                k, v = stripped.split("=", 1)
                key = k.strip().upper()
                if key not in ACCEPTABLE_KEYS:
                    raise ConfigError(
                        f"Line {line_number}: Unknown configuration "
                        f"key '{key}'\n"
                        f"→ {stripped}"
                    )
                raw[key] = (v.strip(), line_number, stripped)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except OSError as exc:
        raise ConfigError(f"Could not read"
                          f" config file: {path}: {exc}") from exc
    return raw


def parse_int(
    raw: Dict[str, Tuple[str, int, str]],
    key: str,
    *,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> Optional[int]:
    """Parse an optional integer entry, checking its bounds."""

    if key not in raw:
        return None
    value, line_number, line = raw[key]
    try:
        number = int(value)
    except ValueError as exc:
        raise ConfigError(
            f"Line {line_number}: {key} must be an integer\n" f"→ {line}"
        ) from exc

    if minimum is not None and maximum is not None:
        if not minimum <= number <= maximum:
            raise ConfigError(
                f"Line {line_number}: {key} must be between "
                f"{minimum} and {maximum}\n" f"→ {line}"
            )
    elif minimum is not None and number < minimum:
        raise ConfigError(
            f"Line {line_number}: {key} must be "
            f"at least {minimum}\n" f"→ {line}"
        )
    return number


def read_config(path: Path) -> Config:
    """Read and validate the configuration file.

    Raises ConfigError if a line is malformed, a key is unknown or a value
    is invalid or out of bounds.
    """

    raw = _read_raw(path)

    width = parse_int(raw, "WIDTH", minimum=1)
    height = parse_int(raw, "HEIGHT", minimum=1)
    if (width is None) != (height is None):
        raise ConfigError("WIDTH and HEIGHT must be given together")

    braid = parse_int(raw, "BRAID", minimum=0, maximum=100)
    level = parse_int(raw, "LEVEL", minimum=1)
    count = parse_int(raw, "COUNT", minimum=1)
    seed = parse_int(raw, "SEED")
    max_size = parse_int(raw, "MAX_SIZE", minimum=1)

    algorithm = DEFAULT_ALGORITHM.value
    if "ALGORITHM" in raw:
        algorithm, line_number, line = raw["ALGORITHM"]
        if not algorithm:
            raise ConfigError(
                f"Line {line_number}: ALGORITHM must not be empty\n" f"→ {line}"
            )

    save_file: Optional[Path] = None
    if "SAVE_FILE" in raw:
        value, line_number, line = raw["SAVE_FILE"]
        if not value:
            raise ConfigError(
                f"Line {line_number}: SAVE_FILE must not be empty\n" f"→ {line}"
            )
        save_file = Path(value).expanduser()

    log_level = "WARNING"
    if "LOG_LEVEL" in raw:
        value, line_number, line = raw["LOG_LEVEL"]
        log_level = value.upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(
                f"Line {line_number}: LOG_LEVEL must be one of "
                f"{', '.join(LOG_LEVELS)}\n" f"→ {line}"
            )

    return Config(
        width=width,
        height=height,
        algorithm=algorithm,
        braid=0 if braid is None else braid,
        level=level,
        count=1 if count is None else count,
        seed=seed,
        max_size=MAX_MAZE_SIZE if max_size is None else max_size,
        save_file=save_file,
        log_level=log_level,
    )
