"""The two seats of a room and the connections occupying them."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .game import Team


class Connection(Protocol):
    """A live client handle supplied by the transport layer."""

    id: str

    def send(self, event: str, data: Any) -> None:
        ...


@dataclass
class Seat:
    index: int
    connection: Optional[Connection] = field(default=None, repr=False)

    @property
    def team(self) -> Team:
        return self.index + 1

    @property
    def occupied(self) -> bool:
        return self.connection is not None


SEAT_COUNT = 2


class SeatRegistry:
    """Fixed pair of seats; vacated seats stay in place and can be re-filled."""

    def __init__(self) -> None:
        self.seats: Tuple[Seat, ...] = tuple(Seat(index=i) for i in range(SEAT_COUNT))

    def assign_seat(self, connection: Connection) -> Optional[int]:
        """Occupy the first vacant seat, or return ``None`` when both are taken."""

        for seat in self.seats:
            if not seat.occupied:
                seat.connection = connection
                return seat.index
        return None

    def vacate(self, connection: Connection) -> Optional[Seat]:
        seat = self.find_seat(connection)
        if seat is not None:
            seat.connection = None
        return seat

    def find_seat(self, connection: Connection) -> Optional[Seat]:
        for seat in self.seats:
            if seat.connection is connection:
                return seat
        return None

    def both_occupied(self) -> bool:
        return all(seat.occupied for seat in self.seats)

    def occupied_seats(self) -> List[Seat]:
        return [seat for seat in self.seats if seat.occupied]

    def occupancy(self) -> Dict[Team, bool]:
        return {seat.team: seat.occupied for seat in self.seats}
