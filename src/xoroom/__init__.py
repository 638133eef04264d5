"""xoroom package exposing the room core and the websocket application."""

from .directory import RoomDirectory
from .room import Phase, Room
from .router import EventRouter
from .server import app, create_app

__all__ = ["EventRouter", "Phase", "Room", "RoomDirectory", "app", "create_app"]
