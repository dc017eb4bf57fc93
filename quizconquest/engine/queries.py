"""
Read-only queries over game state for the presentation layer.
"""

from typing import Any

from quizconquest.engine.ledger import borders_any, territories_owned_by, unowned_count
from quizconquest.engine.state import GameSession


def get_attackable_territories(session: GameSession, player_id: str) -> list[str]:
    """Territories player_id could attack right now if it were their turn."""
    owned = territories_owned_by(session, player_id)
    if not owned:
        return []
    return [
        tid for tid, t in session.territories.items()
        if t.owner != player_id
        and tid not in session.active_duels
        and borders_any(session, tid, owned)
    ]


def get_player_stats(session: GameSession) -> dict[str, dict[str, Any]]:
    """Per-player territory count, total tile value and capital status."""
    stats = {}
    for pid, player in session.players.items():
        owned = territories_owned_by(session, pid)
        capital = session.territories.get(player.capital) if player.capital else None
        stats[pid] = {
            "name": player.name,
            "territories": len(owned),
            "totalValue": sum(session.territories[tid].value for tid in owned),
            "ownsCapital": bool(capital and capital.owner == pid and capital.is_capital),
            "eliminated": player.eliminated,
            "inGame": pid in session.turn_order,
        }
    return stats


def get_game_summary(session: GameSession) -> dict[str, Any]:
    return {
        "status": session.status,
        "currentTurn": session.current_turn,
        "currentTurnName": session.player_name(session.current_turn) if session.current_turn else None,
        "players": get_player_stats(session),
        "activeDuels": sorted(session.active_duels),
        "unownedTerritories": unowned_count(session),
        "totalTerritories": len(session.territories),
        "winner": session.winner_id,
        "winReason": session.win_reason,
    }
