"""Error taxonomy for room admission and move validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


class RoomError(Exception):
    """Base class for recoverable, client-caused room errors."""

    default_message = "Request rejected"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


# ---------- admission ----------


class InvalidCode(RoomError):
    default_message = "Invalid room code."


class DuplicateCode(RoomError):
    default_message = "Room code already taken."


class AlreadyInRoom(RoomError):
    default_message = "Already in a room."


class RoomFull(RoomError):
    default_message = "Room is full."


class NotFound(RoomError):
    default_message = "Room not found."


# ---------- membership ----------


class NotAMember(RoomError):
    default_message = "Not a member of this room."


# ---------- moves ----------


class NotYourTurn(RoomError):
    default_message = "Not your team's turn."


class OutOfBounds(RoomError):
    default_message = "Invalid move: location out of bounds."


class CellOccupied(RoomError):
    default_message = "Invalid move: space occupied."


@dataclass(frozen=True)
class Outcome:
    """Result of a core operation, handed back to the router as a status."""

    success: bool
    message: str
    error: Optional[RoomError] = field(default=None, compare=False, repr=False)

    @classmethod
    def ok(cls, message: str) -> "Outcome":
        return cls(success=True, message=message)

    @classmethod
    def failed(cls, error: RoomError) -> "Outcome":
        return cls(success=False, message=error.message, error=error)

    def to_payload(self) -> Dict[str, object]:
        return {"success": self.success, "message": self.message}
