"""Core rules for a single 3x3 tic-tac-toe board."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .errors import CellOccupied, OutOfBounds

Team = int  # 1 or 2; 0 is reserved for "nobody" (blank cell, system sender)

BLANK: Team = 0
TEAM_ONE: Team = 1
TEAM_TWO: Team = 2
BOARD_SIZE = 9

# Scan order matters: the first complete line wins and its position here is
# the line id reported to clients. Rows, then columns, then diagonals.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


@dataclass(frozen=True)
class BoardResult:
    """What a board looks like after a move: still open, won, or tied."""

    state: str = "none"  # "none", "win" or "tie"
    team: Optional[Team] = None
    line: Optional[int] = None

    @property
    def finished(self) -> bool:
        return self.state != "none"


NO_RESULT = BoardResult()
TIE = BoardResult(state="tie")


def new_board() -> List[Team]:
    return [BLANK] * BOARD_SIZE


def apply_move(board: Sequence[Team], location: int, team: Team) -> List[Team]:
    """Return a copy of ``board`` with ``team`` placed at ``location``.

    The input board is never modified, so a rejected move leaves the caller's
    board exactly as it was.
    """

    if not 0 <= location < BOARD_SIZE:
        raise OutOfBounds()
    if board[location] != BLANK:
        raise CellOccupied()
    updated = list(board)
    updated[location] = team
    return updated


def detect_outcome(board: Sequence[Team]) -> BoardResult:
    for line_id, (a, b, c) in enumerate(WINNING_LINES):
        v = board[a]
        if v != BLANK and v == board[b] == board[c]:
            return BoardResult(state="win", team=v, line=line_id)
    if all(cell != BLANK for cell in board):
        return TIE
    return NO_RESULT


def team_to_move(turn: int) -> Team:
    """Team one plays on even turns, team two on odd turns."""

    return TEAM_ONE if turn % 2 == 0 else TEAM_TWO


def filled_cells(board: Sequence[Team]) -> int:
    return sum(1 for cell in board if cell != BLANK)
