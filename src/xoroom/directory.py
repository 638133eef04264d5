"""Process-wide registry of rooms keyed by room code."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from .errors import AlreadyInRoom, DuplicateCode, InvalidCode, NotAMember, NotFound, Outcome, RoomError
from .room import Room
from .seats import Connection

logger = logging.getLogger(__name__)


def normalize_code(roomcode: object) -> str:
    if not isinstance(roomcode, str):
        raise InvalidCode()
    normalized = roomcode.strip()
    if not normalized:
        raise InvalidCode()
    return normalized


class RoomDirectory:
    """Owns every live :class:`Room` and which connection sits in which room.

    A connection belongs to at most one room. The connection to room mapping is
    kept here and updated only on create, join, disconnect and dissolve.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._members: Dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, roomcode: object) -> bool:
        return roomcode in self._rooms

    def get(self, roomcode: str) -> Optional[Room]:
        return self._rooms.get(roomcode.strip())

    def resolve_room_for(self, connection: Connection) -> Optional[str]:
        return self._members.get(connection.id)

    # ---- admission ----

    def create(self, roomcode: object, connection: Connection) -> Outcome:
        try:
            code = self._admit(roomcode, connection)
            if code in self._rooms:
                raise DuplicateCode()
        except RoomError as exc:
            return Outcome.failed(exc)

        room = Room(code)
        outcome = room.join(connection)
        if not outcome.success:
            return outcome
        self._rooms[code] = room
        self._members[connection.id] = code
        logger.info("Room %s created by %s", code, connection.id)
        return Outcome.ok("Room created.")

    def join(self, roomcode: object, connection: Connection) -> Outcome:
        try:
            code = self._admit(roomcode, connection)
            room = self._rooms.get(code)
            if room is None:
                raise NotFound()
        except RoomError as exc:
            return Outcome.failed(exc)

        outcome = room.join(connection)
        if outcome.success:
            self._members[connection.id] = code
        return outcome

    def _admit(self, roomcode: object, connection: Connection) -> str:
        code = normalize_code(roomcode)
        if connection.id in self._members:
            raise AlreadyInRoom()
        return code

    # ---- room-scoped actions ----

    def move(self, connection: Connection, location: int) -> Outcome:
        room = self._room_for(connection)
        if room is None:
            return Outcome.failed(NotAMember("Not in a room."))
        return room.move(connection, location)

    def chat(self, connection: Connection, message: str) -> Outcome:
        room = self._room_for(connection)
        if room is None:
            return Outcome.failed(NotAMember("Not in a room."))
        return room.chat(connection, message)

    def disconnect(self, connection: Connection) -> Outcome:
        """Vacate the connection's seat and tear its room down."""

        room = self._room_for(connection)
        if room is None:
            self._members.pop(connection.id, None)
            return Outcome.failed(NotAMember("Not in a room."))
        outcome = room.disconnect(connection)
        self._members.pop(connection.id, None)
        self.dissolve(room.roomcode)
        return outcome

    def dissolve(self, roomcode: str) -> bool:
        room = self._rooms.pop(roomcode, None)
        if room is None:
            return False
        for connection in room.connections():
            if self._members.get(connection.id) == roomcode:
                del self._members[connection.id]
        logger.info("Room %s dissolved", roomcode)
        return True

    def _room_for(self, connection: Connection) -> Optional[Room]:
        roomcode = self.resolve_room_for(connection)
        if roomcode is None:
            return None
        return self._rooms.get(roomcode)
