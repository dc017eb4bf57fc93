"""
Turn sequencer.
Session lifecycle awaiting_players -> in_progress -> concluded, whose turn it
is, elimination and victory detection. Turn order is the join order frozen at
game start and is never re-sorted.
"""

import logging

from quizconquest.engine import MIN_PLAYERS, GameRuleError
from quizconquest.engine.events import GameEvent, game_log, game_over, player_eliminated
from quizconquest.engine.ledger import territories_owned_by, vacate_all
from quizconquest.engine.state import CONCLUDED, IN_PROGRESS, GameSession

logger = logging.getLogger(__name__)

ALL_CAPITALS_CAPTURED = "All capitals captured"
LAST_WIZARD_STANDING = "Last wizard standing!"
NO_WIZARDS_REMAIN = "No wizards remain"


def start(session: GameSession) -> None:
    """Freeze the turn order and hand the first turn to the earliest joiner."""
    if len(session.players) < MIN_PLAYERS:
        raise GameRuleError(f"Need at least {MIN_PLAYERS} players to start")
    session.turn_order = list(session.players)
    session.current_turn = session.turn_order[0]
    session.status = IN_PROGRESS
    session.winner_id = None
    session.win_reason = None


def require_in_progress(session: GameSession) -> None:
    if session.status == CONCLUDED:
        raise GameRuleError("The game is over")
    if session.status != IN_PROGRESS:
        raise GameRuleError("The game has not started yet")


def contenders(session: GameSession) -> list[str]:
    """Players in the turn order who are still connected and not eliminated."""
    return [
        pid for pid in session.turn_order
        if pid in session.players and not session.players[pid].eliminated
    ]


def conclude(session: GameSession, winner_id: str | None, reason: str) -> list[GameEvent]:
    """End the game. Final: afterwards no turn or duel mutation is accepted."""
    session.status = CONCLUDED
    session.winner_id = winner_id
    session.win_reason = reason
    session.active_duels.clear()
    winner = session.players.get(winner_id) if winner_id else None
    logger.info("Game over: %s (%s)", session.player_name(winner_id) if winner else "nobody", reason)
    events = [game_over(winner.to_dict() if winner else None, reason)]
    if winner:
        events.append(game_log(f"{winner.name} wins! {reason}"))
    else:
        events.append(game_log(f"Game over. {reason}"))
    return events


def eliminate(session: GameSession, player_id: str, except_territory_id: str | None = None) -> list[GameEvent]:
    """Flag a player eliminated and release their remaining territories."""
    player = session.players.get(player_id)
    if player is None or player.eliminated:
        return []
    vacate_all(session, player_id, except_territory_id)
    player.eliminated = True
    logger.info("%s has been eliminated", player.name)
    return [
        player_eliminated(player_id, player.name),
        game_log(f"{player.name} has been eliminated from the game!"),
    ]


def check_win_condition(session: GameSession) -> list[GameEvent]:
    """
    Decide whether the game is won. Run after every ownership change, not
    only at turn boundaries.

    A player wins when they own every other player's capital, or when they are
    the only player left standing.
    """
    if session.status != IN_PROGRESS:
        return []

    present = [pid for pid in session.turn_order if pid in session.players]
    for pid in contenders(session):
        rival_capitals = [
            session.players[other].capital for other in present
            if other != pid and session.players[other].capital
        ]
        if rival_capitals and all(
            session.territories[cap].owner == pid for cap in rival_capitals
        ):
            return conclude(session, pid, ALL_CAPITALS_CAPTURED)

    standing = contenders(session)
    if len(standing) == 1:
        return conclude(session, standing[0], LAST_WIZARD_STANDING)
    if not standing:
        return conclude(session, None, NO_WIZARDS_REMAIN)
    return []


def advance(session: GameSession) -> list[GameEvent]:
    """
    Pass the turn to the next player in join order who still owns territory.

    Single pass of at most len(turn_order) steps. Eliminated and departed
    players are skipped; a player found with no territory is eliminated on the
    spot. If nobody qualifies the game ends.
    """
    if session.status != IN_PROGRESS:
        return []

    events: list[GameEvent] = []
    order = session.turn_order
    start_index = order.index(session.current_turn) if session.current_turn in order else -1

    next_player = None
    for step in range(1, len(order) + 1):
        pid = order[(start_index + step) % len(order)]
        player = session.players.get(pid)
        if player is None or player.eliminated:
            continue
        if not territories_owned_by(session, pid):
            player.eliminated = True
            logger.info("%s has no territory left and is eliminated", player.name)
            events.append(player_eliminated(pid, player.name))
            events.append(game_log(f"{player.name} has been eliminated from the game!"))
            continue
        next_player = pid
        break

    if next_player is None:
        events.extend(conclude(session, None, NO_WIZARDS_REMAIN))
        return events

    previous = session.current_turn
    session.current_turn = next_player
    logger.info(
        "Turn advanced from %s to %s",
        session.player_name(previous),
        session.player_name(next_player),
    )
    events.extend(check_win_condition(session))
    return events
