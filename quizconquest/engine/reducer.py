"""
Main game reducer.
Applies actions to a copy of the session, enforcing rules.
Returns (new_session, events); a GameRuleError leaves the caller's session untouched.
"""

import logging

from quizconquest.engine import MAX_PLAYERS, GameRuleError
from quizconquest.engine import directory, duel, turns
from quizconquest.engine.actions import Action
from quizconquest.engine.events import (
    GameEvent,
    game_log,
    game_started,
    territory_update,
    turn_update,
)
from quizconquest.engine.grid import generate_board
from quizconquest.engine.state import IN_PROGRESS, GameSession, Question

logger = logging.getLogger(__name__)

DEFAULT_TIMING_TOLERANCE_MS = 250


def apply_action(
    session: GameSession,
    action: Action,
    questions: list[Question],
    trust_client_timing: bool = True,
    timing_tolerance: float = DEFAULT_TIMING_TOLERANCE_MS,
) -> tuple[GameSession, list[GameEvent]]:
    """
    Apply a single action to the current session, returning the new session and events.

    Args:
        session: Current authoritative session (not modified)
        action: Action to apply
        questions: Read-only question bank
        trust_client_timing: Break speed ties on client-reported times (default)
            rather than server-observed elapsed time
        timing_tolerance: Slack in ms before a client timing claim is flagged

    Returns:
        Tuple of (new_session, events) where events describe what happened
    """
    new_session = session.copy()

    if action.type == "join_game":
        events = directory.join(new_session, action.player_id, action.payload.get("name"))

    elif action.type == "leave_game":
        events = _handle_leave(new_session, action)

    elif action.type == "start_game":
        events = _handle_start(new_session, action)

    elif action.type == "attack_territory":
        index = action.payload.get("question_index")
        question = questions[index] if index is not None and 0 <= index < len(questions) else None
        events = duel.challenge(
            new_session,
            action.player_id,
            action.payload["territory_id"],
            question,
            action.payload["issued_at"],
        )

    elif action.type == "submit_answer":
        events = duel.submit_answer(
            new_session,
            action.player_id,
            action.payload["territory_id"],
            action.payload["answer"],
            action.payload["response_time"],
            action.payload["received_at"],
            timing_tolerance,
        )

    elif action.type == "resolve_duel":
        events = _handle_resolve(new_session, action, trust_client_timing)

    else:
        raise GameRuleError(f"Unknown action type: {action.type}")

    return new_session, events


def _handle_start(session: GameSession, action: Action) -> list[GameEvent]:
    """Start or restart: fresh board, fresh turn order, no leftover duels."""
    directory.require_player(session, action.player_id)
    if len(session.players) > MAX_PLAYERS:
        raise GameRuleError(f"Too many players to start (maximum {MAX_PLAYERS})")

    turns.start(session)
    session.active_duels.clear()
    for player in session.players.values():
        player.territories = set()
        player.capital = None
        player.eliminated = False
    try:
        generate_board(session, session.turn_order, action.payload["tile_values"])
    except ValueError as e:
        # Board too small for this many players (or misconfigured)
        logger.warning("Cannot start game: %s", e)
        raise GameRuleError(str(e)) from e

    first = session.player_name(session.current_turn)
    logger.info("Game started with %d players, %s goes first", len(session.turn_order), first)
    return [
        game_started(session.territories_snapshot(), session.players_snapshot(), session.current_turn),
        game_log(f"The game has started! It's {first}'s turn."),
    ]


def _handle_resolve(session: GameSession, action: Action, trust_client_timing: bool) -> list[GameEvent]:
    territory_id = action.payload["territory_id"]
    snapshot = action.payload["duel"]
    live = session.active_duels.get(territory_id)
    if live is None or (live.attacker_id, live.created_at) != (snapshot.attacker_id, snapshot.created_at):
        # Already resolved, aborted, or replaced by a newer duel on the same tile
        logger.info("Duel %s already processed, skipping", territory_id)
        return []
    return duel.resolve(session, territory_id, snapshot, trust_client_timing)


def _handle_leave(session: GameSession, action: Action) -> list[GameEvent]:
    """
    Default: roster change only. With forfeit, an active player also gives up:
    duels aborted, territories released, eliminated, and the turn moves on if
    it was theirs.
    """
    player_id = action.player_id
    forfeiting = (
        action.payload.get("forfeit")
        and session.status == IN_PROGRESS
        and player_id in session.turn_order
        and player_id in session.players
        and not session.players[player_id].eliminated
    )
    if not forfeiting:
        return directory.leave(session, player_id)

    had_turn = session.current_turn == player_id
    duel.abort_duels_for(session, player_id)
    events = turns.eliminate(session, player_id)
    events.extend(directory.leave(session, player_id))
    events.append(territory_update(session.territories_snapshot()))
    events.extend(turns.check_win_condition(session))
    if had_turn and session.status == IN_PROGRESS:
        events.extend(turns.advance(session))
        if session.status == IN_PROGRESS:
            events.append(turn_update(session.current_turn))
            events.append(game_log(f"It's now {session.player_name(session.current_turn)}'s turn."))
    return events
