from __future__ import annotations

from enum import Enum, auto
from typing import Iterator, Optional, Sequence, Tuple

from gemfall.components.board import Board, Position
from gemfall.components.piece import Piece
from gemfall.constants import SETUP_MAX_ITERATIONS
from gemfall.errors import InvariantViolation


class SelectionOutcome(Enum):
    REJECTED = auto()        # move lock held
    SELECTED = auto()
    DESELECTED = auto()      # second click was not a 4-neighbour
    SWAPPED = auto()         # swap completed a run; resolution started
    SWAP_REVERTED = auto()   # swap completed nothing and was undone


def is_adjacent(a: Position, b: Position) -> bool:
    return abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def setup_board(board: Board, *, max_iterations: int = SETUP_MAX_ITERATIONS) -> Board:
    """Fill the board and resolve it until no run and no empty slot remains.

    Runs synchronously: nothing is scored and the move lock is released afterwards.
    """
    for x in range(board.width):
        for y in range(board.height):
            board.grid[x][y] = Piece.create(board.rng)
    board.selected = None
    for _ in range(max_iterations):
        if not detect_matches(board):
            break
        remove_marked(board)
        compact(board, initial_setup=True)
    else:
        raise InvariantViolation(f"Board did not stabilise after {max_iterations} resolve passes")
    board.pending_removal_count = 0
    board.needs_recheck = False
    return board


def _same_color(trio: Sequence[Optional[Piece]]) -> bool:
    first, second, third = trio
    if first is None or second is None or third is None:
        return False
    return first.color == second.color == third.color


def detect_matches(board: Board) -> bool:
    """Mark every piece sitting in a horizontal or vertical run of three or more.

    Marks accumulate across calls; nothing is unmarked here. Callers probing
    speculatively must call ``unmark_all`` themselves.
    """
    grid = board.grid
    match_found = False
    for x in range(board.width - 2):
        for y in range(board.height):
            trio = (grid[x][y], grid[x + 1][y], grid[x + 2][y])
            if _same_color(trio):
                for piece in trio:
                    piece.marked = True
                match_found = True
    for x in range(board.width):
        for y in range(board.height - 2):
            trio = (grid[x][y], grid[x][y + 1], grid[x][y + 2])
            if _same_color(trio):
                for piece in trio:
                    piece.marked = True
                match_found = True
    return match_found


def unmark_all(board: Board) -> None:
    for column in board.grid:
        for piece in column:
            if piece is not None and piece.marked:
                piece.marked = False


def remove_marked(board: Board) -> int:
    removed = 0
    for column in board.grid:
        for y, piece in enumerate(column):
            if piece is not None and piece.marked:
                column[y] = None
                removed += 1
    board.pending_removal_count += removed
    return removed


def _gravity_sweep(board: Board) -> bool:
    changed = False
    for column in board.grid:
        y = 0
        while y < board.height:
            piece = column[y]
            if piece is not None and y + 1 < board.height and column[y + 1] is None:
                column[y + 1] = piece
                column[y] = None
                changed = True
                # the piece just moved may fall again next sweep, not this one
                y += 2
                continue
            if y == 0 and piece is None:
                column[0] = Piece.create(board.rng)
                changed = True
            y += 1
    return changed


def compact(board: Board, *, initial_setup: bool = False) -> bool:
    """Apply one top-to-bottom gravity sweep and refill empty top slots.

    During play one sweep per call lets a cascade show up over several ticks.
    With ``initial_setup`` the sweep is repeated until the grid is full and still.
    """
    changed = _gravity_sweep(board)
    if initial_setup and changed:
        max_sweeps = board.height * 4 + 4
        sweeps = 1
        while _gravity_sweep(board):
            sweeps += 1
            if sweeps > max_sweeps:
                raise InvariantViolation(f"Gravity did not settle after {max_sweeps} sweeps")
    board.needs_recheck = changed
    return changed


def resolve_step(board: Board) -> int:
    """One unit of cascade work: mark runs, remove them, apply one gravity sweep."""
    detect_matches(board)
    removed = remove_marked(board)
    compact(board)
    return removed


def _swap_colors(board: Board, a: Position, b: Position) -> None:
    piece_a = board.grid[a[0]][a[1]]
    piece_b = board.grid[b[0]][b[1]]
    piece_a.color, piece_b.color = piece_b.color, piece_a.color


def swap_and_validate(board: Board, a: Position, b: Position) -> bool:
    _swap_colors(board, a, b)
    board.selected = None
    if not detect_matches(board):
        # Not a match-completing move: put the colors back.
        _swap_colors(board, a, b)
        return False
    resolve_step(board)
    return True


def select_piece(board: Board, x: int, y: int) -> SelectionOutcome:
    if not board.in_bounds(x, y):
        raise InvariantViolation(f"Selection ({x}, {y}) is outside the {board.width}x{board.height} board")
    if board.pending_removal_count != 0:
        return SelectionOutcome.REJECTED
    if board.selected is None:
        board.selected = (x, y)
        return SelectionOutcome.SELECTED
    if is_adjacent(board.selected, (x, y)):
        if swap_and_validate(board, board.selected, (x, y)):
            return SelectionOutcome.SWAPPED
        return SelectionOutcome.SWAP_REVERTED
    board.selected = None
    return SelectionOutcome.DESELECTED


def adjacent_pairs(board: Board) -> Iterator[Tuple[Position, Position]]:
    """Every horizontal pair, then every vertical pair."""
    for x in range(board.width - 1):
        for y in range(board.height):
            yield (x, y), (x + 1, y)
    for x in range(board.width):
        for y in range(board.height - 1):
            yield (x, y), (x, y + 1)


def has_legal_move(board: Board) -> bool:
    """Try every adjacent swap; True as soon as one would complete a run.

    Each probe is undone, so colors are left exactly as found.
    """
    for a, b in adjacent_pairs(board):
        if board.grid[a[0]][a[1]] is None or board.grid[b[0]][b[1]] is None:
            continue
        _swap_colors(board, a, b)
        found = detect_matches(board)
        _swap_colors(board, a, b)
        if found:
            unmark_all(board)
            return True
    return False
