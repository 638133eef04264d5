"""Tests for the room state machine."""

import re

import pytest

from xoroom.errors import AlreadyInRoom, CellOccupied, NotAMember, NotYourTurn, OutOfBounds, RoomFull
from xoroom.game import filled_cells, team_to_move
from xoroom.room import Phase, Room


@pytest.fixture
def players(connect):
    return connect(), connect()


@pytest.fixture
def room(players):
    x, y = players
    room = Room("abc")
    room.join(x)
    room.join(y)
    x.clear()
    y.clear()
    return room


def play(room, x, y, moves):
    """Alternate moves starting with ``x``; return each outcome."""

    outcomes = []
    for index, location in enumerate(moves):
        mover = x if index % 2 == 0 else y
        outcomes.append(room.move(mover, location))
    return outcomes


def test_first_join_waits(connect):
    x = connect()
    room = Room("abc")

    outcome = room.join(x)

    assert outcome.success
    assert room.phase is Phase.WAITING
    assert room.seats.find_seat(x).team == 1
    assert x.names() == ["resetchat", "roomstatus", "status"]
    state = x.last("roomstatus")
    assert state["yourTeam"] == 1
    assert state["yourTurn"] is False
    assert state["player2Connected"] is False


def test_second_join_starts_game(players):
    x, y = players
    room = Room("abc")
    room.join(x)
    x.clear()

    room.join(y)

    assert room.phase is Phase.PLAYING
    assert room.turn == 0
    assert y.names()[0] == "resetchat"
    assert x.last("roomstatus")["yourTurn"] is True
    assert y.last("roomstatus")["yourTurn"] is False
    assert y.last("roomstatus")["yourTeam"] == 2
    assert x.last("status") == {"success": True, "message": "Player 2 joined the room."}


def test_third_connection_is_rejected(room, connect):
    before = room.snapshot()
    outcome = room.join(connect())

    assert not outcome.success
    assert isinstance(outcome.error, RoomFull)
    assert room.snapshot() == before


def test_same_connection_cannot_join_twice(connect):
    x = connect()
    room = Room("abc")
    room.join(x)

    outcome = room.join(x)

    assert isinstance(outcome.error, AlreadyInRoom)
    assert room.seats.occupancy() == {1: True, 2: False}


def test_move_then_occupied_cell(room, players):
    x, y = players

    assert room.move(x, 4).success
    assert room.board[4] == 1
    assert room.turn == 1
    assert room.phase is Phase.PLAYING

    board_before = list(room.board)
    outcome = room.move(y, 4)
    assert isinstance(outcome.error, CellOccupied)
    assert room.board == board_before
    assert room.turn == 1


def test_out_of_bounds_move(room, players):
    x, _ = players
    outcome = room.move(x, 9)
    assert isinstance(outcome.error, OutOfBounds)
    assert room.turn == 0


def test_wrong_team_cannot_move(room, players):
    _, y = players
    outcome = room.move(y, 0)
    assert isinstance(outcome.error, NotYourTurn)
    assert filled_cells(room.board) == 0


def test_move_before_game_starts(connect):
    x = connect()
    room = Room("abc")
    room.join(x)

    outcome = room.move(x, 0)

    assert isinstance(outcome.error, NotYourTurn)
    assert outcome.message == "Game is not in progress."


def test_stranger_cannot_move(room, connect):
    outcome = room.move(connect(), 0)
    assert isinstance(outcome.error, NotAMember)


def test_row_win(room, players):
    x, y = players
    outcomes = play(room, x, y, [0, 3, 1, 4, 2])

    assert all(outcome.success for outcome in outcomes)
    assert room.phase is Phase.WIN
    assert room.winning_team == 1
    assert room.winning_line == 0
    state = y.last("roomstatus")
    assert state["gameStateOver"] is True
    assert state["winningTeam"] == 1
    assert state["yourTurn"] is False
    assert y.last("status") == {"success": True, "message": "Team 1 wins!"}

    after = room.move(y, 8)
    assert isinstance(after.error, NotYourTurn)


def test_full_board_is_tie(room, players):
    x, y = players
    play(room, x, y, [0, 1, 2, 4, 3, 5, 7, 6, 8])

    assert room.phase is Phase.TIE
    assert room.turn == 9
    assert room.winning_team is None
    assert x.last("status") == {"success": True, "message": "Tie game."}


def test_turn_matches_filled_cells_while_playing(room, players):
    x, y = players
    for index, location in enumerate([4, 0, 8, 2, 1]):
        mover = x if index % 2 == 0 else y
        assert room.current_team == team_to_move(room.turn)
        room.move(mover, location)
        if room.phase is Phase.PLAYING:
            assert room.turn == filled_cells(room.board)


def test_snapshot_derived_fields_match_raw_state(room, players):
    x, y = players
    room.move(x, 4)

    for conn in (x, y):
        sent = conn.last("roomstatus")
        team = room.seats.find_seat(conn).team
        expected_turn = room.phase is Phase.PLAYING and team_to_move(room.turn) == team
        assert sent["yourTeam"] == team
        assert sent["yourTurn"] == expected_turn
        assert sent == room.snapshot(team)


def test_chat_reaches_both_seats(room, players):
    x, y = players
    outcome = room.chat(y, "good luck")

    assert outcome.success
    for conn in (x, y):
        message = conn.last("chat")
        assert message["senderTeam"] == 2
        assert message["message"] == "good luck"
        assert re.fullmatch(r"\d\d:\d\d", message["timestamp"])


def test_chat_allowed_while_waiting(connect):
    x = connect()
    room = Room("abc")
    room.join(x)
    assert room.chat(x, "anyone?").success


def test_stranger_cannot_chat(room, connect, players):
    x, _ = players
    outcome = room.chat(connect(), "hi")
    assert isinstance(outcome.error, NotAMember)
    assert x.events("chat") == []


def test_disconnect_is_terminal(room, players):
    x, y = players
    room.move(x, 4)

    outcome = room.disconnect(x)

    assert outcome.success
    assert room.phase is Phase.DISCONNECT
    assert room.seats.find_seat(x) is None
    state = y.last("roomstatus")
    assert state["gameState"] == "disconnect"
    assert state["gameStateOver"] is True
    assert state["player1Connected"] is False
    assert y.last("status") == {"success": False, "message": "Player 1 disconnected."}


def test_failed_delivery_does_not_roll_back(connect):
    x = connect(broken=True)
    y = connect()
    room = Room("abc")
    room.join(x)
    room.join(y)

    outcome = room.move(x, 0)

    assert outcome.success
    assert room.board[0] == 1
    assert y.last("roomstatus")["board"][0] == 1
