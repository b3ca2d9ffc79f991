import random
from dataclasses import dataclass
from typing import Dict, List, Tuple

# Seven piece colors; names are the identity, RGB is only used for drawing.
PIECE_COLORS: Dict[str, Tuple[int, int, int]] = {
    'amber': (255, 190, 0),
    'sky': (30, 191, 255),
    'forest': (34, 139, 34),
    'pink': (255, 20, 147),
    'lime': (123, 255, 17),
    'red': (255, 0, 0),
    'indigo': (69, 0, 255),
}
PALETTE: List[str] = list(PIECE_COLORS.keys())


@dataclass(slots=True)
class Piece:
    """A colored piece occupying one grid slot.

    Position is not stored here; it is implied by the slot holding the piece.
    ``marked`` is set while the piece belongs to a completed run and waits for removal.
    """
    color: str
    marked: bool = False

    @classmethod
    def create(cls, rng: random.Random) -> "Piece":
        return cls(color=rng.choice(PALETTE))
