"""
Game state representation.
The reducer never mutates the authoritative session in place; it works on copy() and
returns the copy. to_dict() produces the wire snapshots sent to clients.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

from quizconquest.engine import GRID_HEIGHT, GRID_WIDTH


# Session lifecycle
AWAITING_PLAYERS = "awaiting_players"
IN_PROGRESS = "in_progress"
CONCLUDED = "concluded"


def territory_id(x: int, y: int) -> str:
    """Territory ids are derived from grid coordinates: t-<x>-<y>."""
    return f"t-{x}-{y}"


@dataclass
class Territory:
    """A single grid cell; the unit of ownership and combat."""
    id: str
    x: int
    y: int
    value: int  # 1-3
    owner: str | None = None  # player id or None if unclaimed
    is_capital: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "value": self.value,
            "owner": self.owner,
            "isCapital": self.is_capital,
        }


@dataclass
class Player:
    """A connected player. territories/capital are filled in at game start."""
    id: str  # connection/session handle
    name: str
    territories: set[str] = field(default_factory=set)
    # Territory id of the starting capital. Kept after capture so capital-based
    # victory can still be checked; the tile itself loses is_capital.
    capital: str | None = None
    eliminated: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "territories": sorted(self.territories),
            "capital": self.capital,
            "eliminated": self.eliminated,
        }


@dataclass
class Question:
    """A trivia item. correct_answer indexes into answers."""
    id: Any
    question: str
    answers: list[str]
    correct_answer: int

    @property
    def answer_text(self) -> str:
        return self.answers[self.correct_answer]

    def to_dict(self, include_answer: bool = False) -> dict[str, Any]:
        out = {
            "id": self.id,
            "question": self.question,
            "answers": list(self.answers),
        }
        if include_answer:
            out["correctAnswer"] = self.correct_answer
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Question":
        """Strict parse; raises ValueError on anything the duel logic could trip over."""
        if not isinstance(data, dict):
            raise ValueError("question entry must be an object")
        text = data.get("question")
        answers = data.get("answers")
        correct = data.get("correctAnswer")
        if not isinstance(text, str) or not text:
            raise ValueError("question text missing")
        if not isinstance(answers, list) or not answers or not all(isinstance(a, str) for a in answers):
            raise ValueError("answers must be a non-empty list of strings")
        if isinstance(correct, bool) or not isinstance(correct, int) or not 0 <= correct < len(answers):
            raise ValueError("correctAnswer must index into answers")
        return cls(id=data.get("id"), question=text, answers=list(answers), correct_answer=correct)


@dataclass
class DuelAnswer:
    """One participant's answer to a duel question."""
    answer: int  # chosen answer index
    response_time: float  # ms, as reported by the client (not verified)
    received_at: float  # server receipt time, ms since epoch
    server_elapsed: float  # received_at - duel.created_at, ms
    timing_suspect: bool = False  # client claim disagrees with server observation

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "responseTime": self.response_time,
            "receivedAt": self.received_at,
            "serverElapsed": self.server_elapsed,
            "timingSuspect": self.timing_suspect,
        }


@dataclass
class Duel:
    """
    The trivia contest resolving an attack on one territory.
    Lives in GameSession.active_duels only while answers are outstanding or the
    settle delay is running.
    """
    territory_id: str
    attacker_id: str
    defender_id: str | None  # None only when the territory was unowned
    question: Question
    created_at: float  # ms since epoch
    answers: dict[str, DuelAnswer] = field(default_factory=dict)
    # Defender exists but could not be reached when the challenge went out.
    # Resolution then follows the no-defender rule.
    undefended: bool = False

    def required_answers(self) -> list[str]:
        """Player ids whose answers must be in before the duel can resolve."""
        if self.defender_id is None or self.undefended:
            return [self.attacker_id]
        return [self.attacker_id, self.defender_id]

    def waiting_for(self) -> list[str]:
        return [pid for pid in self.required_answers() if pid not in self.answers]

    def is_complete(self) -> bool:
        return not self.waiting_for()

    def role_of(self, player_id: str) -> str:
        return "Attacker" if player_id == self.attacker_id else "Defender"

    def to_dict(self) -> dict[str, Any]:
        return {
            "territoryId": self.territory_id,
            "attackerId": self.attacker_id,
            "defenderId": self.defender_id,
            "question": self.question.to_dict(),
            "createdAt": self.created_at,
            "answered": sorted(self.answers),
            "undefended": self.undefended,
        }


@dataclass
class GameSession:
    """Complete state of one game session."""
    players: dict[str, Player] = field(default_factory=dict)  # insertion order = join order
    territories: dict[str, Territory] = field(default_factory=dict)
    # Players taking part in the running game, in join order. Frozen at start.
    turn_order: list[str] = field(default_factory=list)
    current_turn: str | None = None
    status: str = AWAITING_PLAYERS
    active_duels: dict[str, Duel] = field(default_factory=dict)  # territory_id -> Duel
    winner_id: str | None = None
    win_reason: str | None = None
    width: int = GRID_WIDTH
    height: int = GRID_HEIGHT

    def copy(self) -> "GameSession":
        """Return a deep copy of this session."""
        return deepcopy(self)

    def player_name(self, player_id: str | None) -> str:
        player = self.players.get(player_id) if player_id else None
        return player.name if player else "Unknown"

    def players_snapshot(self) -> list[dict[str, Any]]:
        return [p.to_dict() for p in self.players.values()]

    def territories_snapshot(self) -> dict[str, dict[str, Any]]:
        return {tid: t.to_dict() for tid, t in self.territories.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "width": self.width,
            "height": self.height,
            "players": self.players_snapshot(),
            "territories": self.territories_snapshot(),
            "turnOrder": list(self.turn_order),
            "currentTurn": self.current_turn,
            "activeDuels": {tid: d.to_dict() for tid, d in self.active_duels.items()},
            "winner": self.winner_id,
            "winReason": self.win_reason,
        }
