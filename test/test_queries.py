"""
Read-only queries used by the REST endpoints.
"""

from quizconquest.engine.actions import attack_territory, join_game
from quizconquest.engine.ledger import adjacent, transfer
from quizconquest.engine.queries import get_attackable_territories, get_game_summary, get_player_stats

from support import ISSUED_AT, apply, border_target, new_game


def test_attackable_territories_border_the_player_and_exclude_duels():
    session = new_game(["Alice", "Bob"])
    targets = get_attackable_territories(session, "alice")
    assert targets
    owned = session.players["alice"].territories
    for tid in targets:
        assert tid not in owned
        assert any(adjacent(session, tid, mine) for mine in owned)

    contested = border_target(session, "alice", "bob")
    session, _ = apply(session, attack_territory("alice", contested, 0, ISSUED_AT))
    assert contested not in get_attackable_territories(session, "alice")


def test_spectator_has_no_targets():
    session = new_game(["Alice", "Bob"])
    session, _ = apply(session, join_game("dave", "Dave"))
    assert get_attackable_territories(session, "dave") == []


def test_player_stats_track_capital_ownership():
    session = new_game(["Alice", "Bob"])
    stats = get_player_stats(session)
    assert stats["alice"]["territories"] == len(session.players["alice"].territories)
    assert stats["alice"]["ownsCapital"] is True
    assert stats["alice"]["inGame"] is True
    assert stats["alice"]["totalValue"] == sum(
        session.territories[tid].value for tid in session.players["alice"].territories
    )

    transfer(session, "t-5-5", "bob", "alice")
    stats = get_player_stats(session)
    assert stats["bob"]["ownsCapital"] is False
    assert stats["alice"]["territories"] == stats["bob"]["territories"] + 2


def test_game_summary():
    session = new_game(["Alice", "Bob"])
    summary = get_game_summary(session)
    assert summary["status"] == "in_progress"
    assert summary["currentTurnName"] == "Alice"
    assert summary["unownedTerritories"] == 0
    assert summary["totalTerritories"] == 36
    assert summary["activeDuels"] == []
    assert summary["winner"] is None
