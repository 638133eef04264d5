"""FastAPI websocket transport for tic-tac-toe rooms."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from typing import Any, Dict, Optional, Tuple

from fastapi import FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect

from .directory import RoomDirectory
from .router import EventRouter

logger = logging.getLogger(__name__)


class WebSocketConnection:
    """A connected socket as seen by the rooms.

    ``send`` only queues; :meth:`pump` writes queued frames to the socket, so
    room transitions never wait on the network.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        self._outbox: "asyncio.Queue[Tuple[str, Any]]" = asyncio.Queue()
        self.closed = False

    def send(self, event: str, data: Any) -> None:
        if self.closed:
            return
        self._outbox.put_nowait((event, data))

    async def pump(self) -> None:
        while True:
            event, data = await self._outbox.get()
            try:
                await self.websocket.send_json({"event": event, "data": data})
            except (RuntimeError, WebSocketDisconnect):
                logger.warning("Dropping %s for closed connection %s", event, self.id)
                self.closed = True
                return


def create_app(directory: Optional[RoomDirectory] = None) -> FastAPI:
    """Build the web application around its own room directory."""

    app = FastAPI(title="xoroom", description="Two-player tic-tac-toe rooms over websockets")
    app.state.directory = directory if directory is not None else RoomDirectory()
    app.state.router = EventRouter(app.state.directory)

    @app.get("/api/room/{roomcode}")
    def inspect_room(roomcode: str, request: Request) -> Dict[str, object]:
        room = request.app.state.directory.get(roomcode)
        if room is None:
            raise HTTPException(status_code=404, detail="Room not found")
        occupied = [seat.team for seat in room.seats.occupied_seats()]
        return {
            "roomcode": room.roomcode,
            "phase": room.phase.value,
            "occupiedSeats": occupied,
            "available": not room.seats.both_occupied() and not room.game_over,
        }

    @app.websocket("/ws")
    async def room_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        router: EventRouter = websocket.app.state.router
        connection = WebSocketConnection(websocket)
        writer = asyncio.create_task(connection.pump())
        logger.info("Connection %s opened", connection.id)

        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                frame = message.get("text")
                if frame is None:
                    frame = message.get("bytes") or b""
                router.receive(connection, frame)
        except WebSocketDisconnect:
            pass
        finally:
            connection.closed = True
            router.disconnect(connection)
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
            logger.info("Connection %s closed", connection.id)

    return app


app = create_app()
