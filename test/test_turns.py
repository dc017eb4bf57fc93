"""
Turn sequencing: start, wraparound, lazy elimination, victory.
"""

import pytest

from quizconquest.engine import GameRuleError
from quizconquest.engine.actions import attack_territory, join_game, start_game
from quizconquest.engine.events import GAME_OVER, PLAYER_ELIMINATED
from quizconquest.engine.ledger import transfer, vacate_all
from quizconquest.engine.state import AWAITING_PLAYERS, CONCLUDED, IN_PROGRESS, GameSession
from quizconquest.engine.turns import (
    ALL_CAPITALS_CAPTURED,
    LAST_WIZARD_STANDING,
    NO_WIZARDS_REMAIN,
    advance,
    check_win_condition,
)

from support import apply, border_target, find_events, new_game


def test_start_needs_two_players():
    session = GameSession()
    session, _ = apply(session, join_game("alice", "Alice"))
    with pytest.raises(GameRuleError, match="Need at least 2 players to start"):
        apply(session, start_game("alice", [1] * 36))
    assert session.status == AWAITING_PLAYERS
    assert session.territories == {}


def test_first_joined_player_moves_first_and_order_is_join_order():
    session = new_game(["Carol", "Alice", "Bob"])
    assert session.status == IN_PROGRESS
    assert session.turn_order == ["carol", "alice", "bob"]
    assert session.current_turn == "carol"


def test_advance_wraps_around_in_join_order():
    session = new_game(["Alice", "Bob", "Carol"])
    seen = []
    for _ in range(4):
        advance(session)
        seen.append(session.current_turn)
    assert seen == ["bob", "carol", "alice", "bob"]


def test_player_without_territory_is_eliminated_when_reached():
    session = new_game(["Alice", "Bob", "Carol"])
    vacate_all(session, "carol")

    events = advance(session)
    assert session.current_turn == "bob"
    assert not session.players["carol"].eliminated
    assert events == []

    events = advance(session)
    assert session.players["carol"].eliminated
    eliminated = find_events(events, PLAYER_ELIMINATED)
    assert [e.payload["playerId"] for e in eliminated] == ["carol"]
    assert session.current_turn == "alice"

    for _ in range(6):
        events = advance(session)
        assert session.current_turn != "carol"
        assert find_events(events, PLAYER_ELIMINATED) == []


def test_last_player_standing_wins_on_advance():
    session = new_game(["Alice", "Bob"])
    vacate_all(session, "bob")

    events = advance(session)
    assert session.players["bob"].eliminated
    over = find_events(events, GAME_OVER)
    assert len(over) == 1
    assert over[0].payload["winner"]["id"] == "alice"
    assert over[0].payload["reason"] == LAST_WIZARD_STANDING
    assert session.status == CONCLUDED


def test_game_ends_when_nobody_holds_territory():
    session = new_game(["Alice", "Bob"])
    vacate_all(session, "alice")
    vacate_all(session, "bob")

    events = advance(session)
    over = find_events(events, GAME_OVER)
    assert over[0].payload["winner"] is None
    assert over[0].payload["reason"] == NO_WIZARDS_REMAIN
    assert session.status == CONCLUDED


def test_holding_every_rival_capital_wins_immediately():
    session = new_game(["Alice", "Bob", "Carol"])
    transfer(session, session.players["bob"].capital, "bob", "alice")
    assert check_win_condition(session) == []

    transfer(session, session.players["carol"].capital, "carol", "alice")
    events = check_win_condition(session)
    over = find_events(events, GAME_OVER)
    assert over[0].payload["winner"]["name"] == "Alice"
    assert over[0].payload["reason"] == ALL_CAPITALS_CAPTURED
    assert session.winner_id == "alice"


def test_concluded_game_accepts_no_more_attacks():
    session = new_game(["Alice", "Bob"])
    target = border_target(session, "alice", "bob")
    vacate_all(session, "bob")
    advance(session)
    assert session.status == CONCLUDED

    with pytest.raises(GameRuleError, match="The game is over"):
        apply(session, attack_territory("alice", target, 0, 0.0))
    assert advance(session) == []
