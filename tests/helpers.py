from __future__ import annotations

import random
from typing import Sequence

from esper import World

from gemfall.components.board import Board
from gemfall.components.piece import PALETTE, Piece
from gemfall.systems.session_utils import get_session_entity

# One letter per palette color so boards can be drawn as strings.
LETTER_COLORS = {letter: color for letter, color in zip("ABCDEFG", PALETTE)}
COLOR_LETTERS = {color: letter for letter, color in LETTER_COLORS.items()}


def board_from_rows(rows: Sequence[str], rng: random.Random | None = None) -> Board:
    """Build a board from top-to-bottom row strings; '.' is an empty slot."""
    height = len(rows)
    width = len(rows[0])
    board = Board(width=width, height=height, rng=rng or random.Random(0))
    for y, row in enumerate(rows):
        assert len(row) == width, f"Row {y} has {len(row)} cells, expected {width}"
        for x, letter in enumerate(row):
            board.grid[x][y] = None if letter == "." else Piece(color=LETTER_COLORS[letter])
    return board


def rows_of(board: Board) -> list[str]:
    colors = board.colors()
    return [
        "".join(
            "." if colors[x][y] is None else COLOR_LETTERS[colors[x][y]]
            for x in range(board.width)
        )
        for y in range(board.height)
    ]


def install_board(world: World, board: Board) -> Board:
    world.add_component(get_session_entity(world), board)
    return board


# A single swap, (0,2) <-> (1,2), completes a vertical run in column 0.
ONE_MOVE_ROWS = [
    "ABCD",
    "ACDB",
    "BACD",
    "CDAB",
]

# Diagonal stripes of three colors: no adjacent swap can complete a run.
DEADLOCK_ROWS = [
    "ABCA",
    "BCAB",
    "CABC",
    "ABCA",
]
