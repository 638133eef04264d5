"""Room lifecycle: seating, turn enforcement, outcome tracking and fan-out."""

from __future__ import annotations

import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from .errors import AlreadyInRoom, NotAMember, NotYourTurn, Outcome, RoomError, RoomFull
from .game import Team, apply_move, detect_outcome, new_board, team_to_move
from .seats import Connection, SeatRegistry

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    WIN = "win"
    TIE = "tie"
    DISCONNECT = "disconnect"


TERMINAL_PHASES = frozenset({Phase.WIN, Phase.TIE, Phase.DISCONNECT})


def _timestamp() -> str:
    return time.strftime("%H:%M")


class Room:
    """One game between two seats.

    Every public transition validates first and only then mutates, and none of
    them await, so a transition is never observed half-applied. Failures come
    back as an :class:`Outcome` instead of an exception.
    """

    def __init__(self, roomcode: str) -> None:
        self.roomcode = roomcode
        self.seats = SeatRegistry()
        self.board: List[Team] = new_board()
        self.turn = 0
        self.phase = Phase.WAITING
        self.winning_team: Optional[Team] = None
        self.winning_line: Optional[int] = None

    def __repr__(self) -> str:
        return f"Room(roomcode={self.roomcode!r}, phase={self.phase.value}, turn={self.turn})"

    # ---- derived state ----

    @property
    def game_over(self) -> bool:
        return self.phase in TERMINAL_PHASES

    @property
    def in_progress(self) -> bool:
        return self.phase is Phase.PLAYING

    @property
    def current_team(self) -> Team:
        return team_to_move(self.turn)

    def is_your_turn(self, team: Team) -> bool:
        return self.in_progress and self.current_team == team

    def connections(self) -> List[Connection]:
        return [seat.connection for seat in self.seats.occupied_seats()]

    # ---- transitions ----

    def join(self, connection: Connection) -> Outcome:
        if self.seats.find_seat(connection) is not None:
            return Outcome.failed(AlreadyInRoom())
        index = self.seats.assign_seat(connection)
        if index is None:
            return Outcome.failed(RoomFull())

        team = self.seats.seats[index].team
        logger.info("Connection %s took seat %d in room %s", connection.id, team, self.roomcode)
        self._deliver(connection, "resetchat", {})

        if self.phase is Phase.WAITING and self.seats.both_occupied():
            self._start()

        self.send_state()
        self.announce(True, f"Player {team} joined the room.")
        return Outcome.ok("Joined room.")

    def move(self, connection: Connection, location: int) -> Outcome:
        seat = self.seats.find_seat(connection)
        if seat is None:
            return Outcome.failed(NotAMember())
        if not self.in_progress:
            return Outcome.failed(NotYourTurn("Game is not in progress."))
        if self.current_team != seat.team:
            return Outcome.failed(NotYourTurn())
        try:
            board = apply_move(self.board, location, seat.team)
        except RoomError as exc:
            return Outcome.failed(exc)

        self.board = board
        self.turn += 1
        logger.debug("Room %s: team %d played %d", self.roomcode, seat.team, location)

        result = detect_outcome(board)
        if result.state == "win":
            self.phase = Phase.WIN
            self.winning_team = result.team
            self.winning_line = result.line
        elif result.state == "tie":
            self.phase = Phase.TIE

        self.send_state()
        if result.finished:
            logger.info("Room %s finished: %s", self.roomcode, self.phase.value)
            if self.phase is Phase.WIN:
                self.announce(True, f"Team {self.winning_team} wins!")
            else:
                self.announce(True, "Tie game.")
        return Outcome.ok("Move accepted.")

    def chat(self, connection: Connection, message: str) -> Outcome:
        seat = self.seats.find_seat(connection)
        if seat is None:
            return Outcome.failed(NotAMember())
        logger.debug("Room %s: chat from team %d", self.roomcode, seat.team)
        self.broadcast(
            "chat",
            {"senderTeam": seat.team, "message": message, "timestamp": _timestamp()},
        )
        return Outcome.ok("Message sent.")

    def disconnect(self, connection: Connection) -> Outcome:
        seat = self.seats.vacate(connection)
        if seat is None:
            return Outcome.failed(NotAMember())
        self.phase = Phase.DISCONNECT
        logger.info("Connection %s left room %s", connection.id, self.roomcode)
        self.send_state()
        self.announce(False, f"Player {seat.team} disconnected.")
        return Outcome.ok("Left room.")

    def _start(self) -> None:
        self.board = new_board()
        self.turn = 0
        self.winning_team = None
        self.winning_line = None
        self.phase = Phase.PLAYING
        logger.info("Room %s: game started", self.roomcode)

    # ---- outbound ----

    def snapshot(self, team: Optional[Team] = None) -> Dict[str, Any]:
        """Room state as sent in ``roomstatus``, personalised when ``team`` is given."""

        occupancy = self.seats.occupancy()
        state: Dict[str, Any] = {
            "code": self.roomcode,
            "player1Connected": occupancy[1],
            "player2Connected": occupancy[2],
            "board": list(self.board),
            "turn": self.turn,
            "gameState": self.phase.value,
            "gameStateOver": self.game_over,
            "gameStateInProgress": self.in_progress,
            "winningTeam": self.winning_team,
            "winningLine": self.winning_line,
        }
        if team is not None:
            state["yourTeam"] = team
            state["yourTurn"] = self.is_your_turn(team)
        return state

    def send_state(self) -> None:
        for seat in self.seats.occupied_seats():
            self._deliver(seat.connection, "roomstatus", self.snapshot(seat.team))

    def announce(self, success: bool, message: str) -> None:
        self.broadcast("status", {"success": success, "message": message})

    def broadcast(self, event: str, data: Any) -> None:
        for connection in self.connections():
            self._deliver(connection, event, data)

    def _deliver(self, connection: Connection, event: str, data: Any) -> None:
        try:
            connection.send(event, data)
        except Exception:  # one bad recipient must not undo a committed transition
            logger.warning(
                "Failed to deliver %s to %s in room %s",
                event,
                connection.id,
                self.roomcode,
                exc_info=True,
            )
