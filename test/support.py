"""
Shared helpers for building and playing games in tests.
"""

import random

from quizconquest.engine.actions import (
    attack_territory,
    join_game,
    resolve_duel,
    start_game,
    submit_answer,
)
from quizconquest.engine.grid import roll_tile_values
from quizconquest.engine.ledger import borders_any, territories_owned_by
from quizconquest.engine.reducer import apply_action
from quizconquest.engine.state import GameSession, Question

QUESTIONS = [
    Question(id=1, question="What is 2 + 2?", answers=["3", "4", "5"], correct_answer=1),
    Question(id=2, question="Which planet is known as the Red Planet?", answers=["Mars", "Venus"], correct_answer=0),
]
RIGHT = 1  # correct choice for QUESTIONS[0]
WRONG = 0

ISSUED_AT = 10_000.0


def apply(session, action, **kwargs):
    return apply_action(session, action, QUESTIONS, **kwargs)


def new_game(names: list[str], width: int = 6, height: int = 6, seed: int = 7) -> GameSession:
    """Join the named players (id = lowercase name) and start a game."""
    session = GameSession(width=width, height=height)
    for name in names:
        session, _ = apply(session, join_game(name.lower(), name))
    values = roll_tile_values(width * height, random.Random(seed))
    session, _ = apply(session, start_game(names[0].lower(), values))
    return session


def event_types(events) -> list[str]:
    return [e.type for e in events]


def find_events(events, event_type: str) -> list:
    return [e for e in events if e.type == event_type]


def border_target(session: GameSession, attacker_id: str, owner_id: str | None) -> str:
    """First territory owned by owner_id that attacker_id could attack."""
    owned = territories_owned_by(session, attacker_id)
    for tid, t in session.territories.items():
        if t.owner == owner_id and tid not in owned and borders_any(session, tid, owned):
            return tid
    raise AssertionError(f"No territory of {owner_id} borders {attacker_id}")


def release(session: GameSession, territory_id: str) -> None:
    """Make a territory unowned in place (test setup only)."""
    territory = session.territories[territory_id]
    if territory.owner in session.players:
        session.players[territory.owner].territories.discard(territory_id)
    territory.owner = None
    territory.is_capital = False


def answer_duel(
    session: GameSession,
    territory_id: str,
    attacker_answer: int,
    attacker_time: float,
    defender_answer: int | None = None,
    defender_time: float | None = None,
):
    """Open a duel with QUESTIONS[0] and submit the given answers. Returns (session, events of last answer)."""
    attacker_id = session.current_turn
    defender_id = session.territories[territory_id].owner
    session, _ = apply(session, attack_territory(attacker_id, territory_id, 0, ISSUED_AT))
    session, events = apply(
        session,
        submit_answer(attacker_id, territory_id, attacker_answer, attacker_time, ISSUED_AT + attacker_time),
    )
    if defender_answer is not None:
        session, events = apply(
            session,
            submit_answer(defender_id, territory_id, defender_answer, defender_time, ISSUED_AT + defender_time),
        )
    return session, events


def play_duel(session: GameSession, territory_id: str, *answers, **kwargs):
    """answer_duel, then resolve from the snapshot. Returns (session, resolution events)."""
    session, _ = answer_duel(session, territory_id, *answers)
    snapshot = session.active_duels[territory_id]
    return apply(session, resolve_duel(territory_id, snapshot), **kwargs)
