from __future__ import annotations

import logging
from pathlib import Path
from typing import Tuple

logger = logging.getLogger(__name__)


class HighScoreStore:
    """Untimed and timed high scores kept as ``"<high>,<timed_high>"`` in a text file.

    A missing file is the normal first-run state and reads as ``(0, 0)``.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> Tuple[int, int]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return 0, 0
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read high scores from %s: %s", self.path, exc)
            return 0, 0
        try:
            high, timed_high = (int(part) for part in text.strip().split(","))
        except ValueError:
            logger.warning("Ignoring malformed high score file %s: %r", self.path, text)
            return 0, 0
        return max(0, high), max(0, timed_high)

    def save(self, high_score: int, timed_high_score: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write beside the store and swap it in so a crash never leaves a half-written file.
        staging = self.path.with_name(self.path.name + ".tmp")
        staging.write_text(f"{high_score},{timed_high_score}", encoding="utf-8")
        staging.replace(self.path)
