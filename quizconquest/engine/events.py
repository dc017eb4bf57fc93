"""
Game events for client messages and logging.
Events describe what happened during action processing. An event with no
recipients goes to every connection; otherwise only to the listed player ids.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: Any
    recipients: list[str] | None = field(default=None)

    @property
    def is_broadcast(self) -> bool:
        return self.recipients is None

    def to_message(self) -> dict[str, Any]:
        return {"event": self.type, "data": self.payload}


# ===== Event Type Constants =====

# Roster / board
PLAYER_LIST_UPDATE = "player-list-update"
GAME_STARTED = "game-started"
TERRITORY_UPDATE = "territory-update"

# Turn events
TURN_UPDATE = "turn-update"
PLAYER_ELIMINATED = "player-eliminated"
GAME_OVER = "game-over"

# Duel events
QUESTION_CHALLENGE = "question-challenge"
DUEL_STATUS_UPDATE = "duel-status-update"
DUEL_COMPLETE = "duel-complete"
DUEL_RESULT = "duel-result"

# Free text
GAME_LOG = "game-log"
INFO_MESSAGE = "info-message"
ERROR_MESSAGE = "error-message"


# ===== Event Factory Functions =====

def player_list_update(players: list[dict[str, Any]]) -> GameEvent:
    return GameEvent(PLAYER_LIST_UPDATE, players)


def game_started(
    territories: dict[str, dict[str, Any]],
    players: list[dict[str, Any]],
    current_turn: str | None,
) -> GameEvent:
    return GameEvent(GAME_STARTED, {
        "territories": territories,
        "players": players,
        "currentTurn": current_turn,
    })


def territory_update(territories: dict[str, dict[str, Any]]) -> GameEvent:
    """Full replacement snapshot, never a diff."""
    return GameEvent(TERRITORY_UPDATE, territories)


def turn_update(player_id: str | None) -> GameEvent:
    return GameEvent(TURN_UPDATE, player_id)


def player_eliminated(player_id: str, player_name: str) -> GameEvent:
    return GameEvent(PLAYER_ELIMINATED, {
        "playerId": player_id,
        "playerName": player_name,
    })


def game_over(winner: dict[str, Any] | None, reason: str) -> GameEvent:
    return GameEvent(GAME_OVER, {
        "winner": winner,
        "reason": reason,
    })


def question_challenge(
    player_id: str,
    question: dict[str, Any],
    territory_id: str,
    role: str,
) -> GameEvent:
    return GameEvent(QUESTION_CHALLENGE, {
        "question": question,
        "territoryId": territory_id,
        "isDuel": True,
        "role": role,  # "attacker" | "defender"
    }, recipients=[player_id])


def duel_status_update(
    territory_id: str,
    player_id: str,
    player_name: str,
    role: str,
    response_time: float,
) -> GameEvent:
    return GameEvent(DUEL_STATUS_UPDATE, {
        "territoryId": territory_id,
        "playerId": player_id,
        "playerName": player_name,
        "role": role,
        "responseTime": response_time,
    })


def duel_complete(territory_id: str, participants: list[str]) -> GameEvent:
    """Tells the duel participants to close their question prompt."""
    return GameEvent(DUEL_COMPLETE, {"territoryId": territory_id}, recipients=participants)


def duel_result(
    territory_id: str,
    winner: str,  # "attacker" | "defender" | "none"
    reason: str,
    attacker_id: str,
    defender_id: str | None,
    attacker_correct: bool,
    defender_correct: bool | None,
    attacker_time: float,
    defender_time: float | None,
    correct_answer: int,
    question: str,
    answer_text: str,
) -> GameEvent:
    return GameEvent(DUEL_RESULT, {
        "territoryId": territory_id,
        "winner": winner,
        "reason": reason,
        "attackerId": attacker_id,
        "defenderId": defender_id,
        "attackerCorrect": attacker_correct,
        "defenderCorrect": defender_correct,
        "attackerTime": attacker_time,
        "defenderTime": defender_time,
        "correctAnswer": correct_answer,
        "question": question,
        "answerText": answer_text,
    })


def game_log(message: str) -> GameEvent:
    return GameEvent(GAME_LOG, message)


def info_message(player_id: str, message: str) -> GameEvent:
    return GameEvent(INFO_MESSAGE, message, recipients=[player_id])


def error_message(player_id: str, message: str) -> GameEvent:
    return GameEvent(ERROR_MESSAGE, message, recipients=[player_id])
