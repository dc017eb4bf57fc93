"""
Action definitions for the game.
Actions are immutable, deterministic instructions. Anything random or
time-dependent (tile values, question choice, timestamps) is decided by the
caller and carried in the payload, so the reducer stays deterministic.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class Action:
    """Base action class. All actions have a type, acting player, and payload."""
    type: str  # e.g. "join_game", "attack_territory", "submit_answer"
    player_id: str | None  # None for server-originated actions (resolve_duel)
    payload: dict[str, Any]


def join_game(player_id: str, name: str) -> Action:
    return Action(type="join_game", player_id=player_id, payload={"name": name})


def leave_game(player_id: str, forfeit: bool = False) -> Action:
    """
    Remove a player from the roster.
    forfeit=True additionally releases their territories, aborts their duels
    and eliminates them; by default a departure has no game-state side effects.
    """
    return Action(type="leave_game", player_id=player_id, payload={"forfeit": forfeit})


def start_game(player_id: str, tile_values: list[int]) -> Action:
    """
    Start (or restart) a game.
    tile_values holds one value per grid cell in row-major order (y outer, x inner).
    Example: start_game("p1", [2, 1, 3, ...])
    """
    return Action(type="start_game", player_id=player_id, payload={"tile_values": tile_values})


def attack_territory(
    player_id: str,
    territory_id: str,
    question_index: int | None,
    issued_at: float,
) -> Action:
    """
    Challenge for a territory.
    question_index is the pre-drawn index into the question bank, or None when
    the bank is empty. issued_at is the server time in ms.
    """
    return Action(
        type="attack_territory",
        player_id=player_id,
        payload={
            "territory_id": territory_id,
            "question_index": question_index,
            "issued_at": issued_at,
        },
    )


def submit_answer(
    player_id: str,
    territory_id: str,
    answer: int,
    response_time: float,
    received_at: float,
) -> Action:
    """
    Answer a duel question.
    response_time is the client's own measurement in ms; received_at is the
    server receipt time in ms.
    """
    return Action(
        type="submit_answer",
        player_id=player_id,
        payload={
            "territory_id": territory_id,
            "answer": answer,
            "response_time": response_time,
            "received_at": received_at,
        },
    )


def resolve_duel(territory_id: str, duel_snapshot: Any) -> Action:
    """
    Settle a completed duel. duel_snapshot is the Duel captured when the last
    required answer arrived; the winner is computed from it, not from live state.
    """
    return Action(
        type="resolve_duel",
        player_id=None,
        payload={"territory_id": territory_id, "duel": duel_snapshot},
    )
