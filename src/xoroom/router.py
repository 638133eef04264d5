"""Dispatch of inbound connection events to the room directory."""

from __future__ import annotations

import logging
from typing import Annotated, Callable, Dict, Literal, Type, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError

from .directory import RoomDirectory
from .errors import Outcome
from .seats import Connection

logger = logging.getLogger(__name__)


class InboundEvent(BaseModel):
    model_config = ConfigDict(frozen=True)


class CreateRoom(InboundEvent):
    event: Literal["createroom"] = "createroom"
    roomcode: StrictStr = Field(alias="data")


class JoinRoom(InboundEvent):
    event: Literal["joinroom"] = "joinroom"
    roomcode: StrictStr = Field(alias="data")


class Move(InboundEvent):
    event: Literal["move"] = "move"
    location: StrictInt = Field(alias="data")


class Chat(InboundEvent):
    event: Literal["chat"] = "chat"
    message: StrictStr = Field(alias="data")


class Disconnecting(InboundEvent):
    """Raised by the transport when a connection closes; never sent by clients."""

    event: Literal["disconnecting"] = "disconnecting"


ClientEvent = Annotated[
    Union[CreateRoom, JoinRoom, Move, Chat],
    Field(discriminator="event"),
]

CLIENT_EVENTS: TypeAdapter = TypeAdapter(ClientEvent)

MALFORMED = Outcome(success=False, message="Malformed message.")


def parse_client_event(raw: Union[str, bytes, dict]) -> InboundEvent:
    """Validate one client frame of the form ``{"event": ..., "data": ...}``."""

    if isinstance(raw, dict):
        return CLIENT_EVENTS.validate_python(raw)
    return CLIENT_EVENTS.validate_json(raw)


class EventRouter:
    """Routes each inbound event to one handler and acknowledges the sender."""

    def __init__(self, directory: RoomDirectory) -> None:
        self.directory = directory
        self._handlers: Dict[Type[InboundEvent], Callable[[Connection, InboundEvent], Outcome]] = {
            CreateRoom: self._create_room,
            JoinRoom: self._join_room,
            Move: self._move,
            Chat: self._chat,
            Disconnecting: self._disconnecting,
        }

    def receive(self, connection: Connection, raw: Union[str, bytes, dict]) -> Outcome:
        try:
            event = parse_client_event(raw)
        except ValidationError as exc:
            logger.warning(
                "Malformed frame from %s: %d validation error(s)",
                connection.id,
                exc.error_count(),
            )
            self._acknowledge(connection, MALFORMED)
            return MALFORMED
        return self.dispatch(connection, event)

    def disconnect(self, connection: Connection) -> Outcome:
        return self.dispatch(connection, Disconnecting())

    def dispatch(self, connection: Connection, event: InboundEvent) -> Outcome:
        handler = self._handlers[type(event)]
        outcome = handler(connection, event)
        if not isinstance(event, Disconnecting):
            self._acknowledge(connection, outcome)
        return outcome

    # ---- handlers ----

    def _create_room(self, connection: Connection, event: CreateRoom) -> Outcome:
        return self.directory.create(event.roomcode, connection)

    def _join_room(self, connection: Connection, event: JoinRoom) -> Outcome:
        return self.directory.join(event.roomcode, connection)

    def _move(self, connection: Connection, event: Move) -> Outcome:
        return self.directory.move(connection, event.location)

    def _chat(self, connection: Connection, event: Chat) -> Outcome:
        return self.directory.chat(connection, event.message)

    def _disconnecting(self, connection: Connection, event: Disconnecting) -> Outcome:
        return self.directory.disconnect(connection)

    def _acknowledge(self, connection: Connection, outcome: Outcome) -> None:
        try:
            connection.send("status", outcome.to_payload())
        except Exception:
            logger.warning("Failed to acknowledge %s", connection.id, exc_info=True)
