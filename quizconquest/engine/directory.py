"""
Session directory: who is connected, under which display name.
"""

import logging

from quizconquest.engine import GameRuleError
from quizconquest.engine.events import GameEvent, game_log, player_list_update
from quizconquest.engine.state import GameSession, Player

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 32


def normalize_name(name: object) -> str:
    if not isinstance(name, str) or not name.strip():
        raise GameRuleError("Please enter a name")
    return name.strip()[:MAX_NAME_LENGTH]


def require_player(session: GameSession, player_id: str | None) -> Player:
    """Look up a player or reject the request (stale or never-joined connection)."""
    player = session.players.get(player_id) if player_id else None
    if player is None:
        logger.warning("Message from unknown player %s", player_id)
        raise GameRuleError("Player not found in game state")
    return player


def join(session: GameSession, player_id: str, name: object) -> list[GameEvent]:
    """
    Add a player with an empty territory set. Joining again from the same
    connection only changes the display name.
    """
    display_name = normalize_name(name)
    existing = session.players.get(player_id)
    if existing:
        existing.name = display_name
    else:
        session.players[player_id] = Player(id=player_id, name=display_name)
    logger.info("%s joined the game", display_name)
    return [
        player_list_update(session.players_snapshot()),
        game_log(f"{display_name} joined the game"),
    ]


def leave(session: GameSession, player_id: str) -> list[GameEvent]:
    """
    Drop a player from the roster. Not an elimination and never advances the
    turn; territories they own keep their owner id.
    """
    player = session.players.pop(player_id, None)
    if player is None:
        return []
    logger.info("%s left the game", player.name)
    return [
        player_list_update(session.players_snapshot()),
        game_log(f"{player.name} left the game"),
    ]
