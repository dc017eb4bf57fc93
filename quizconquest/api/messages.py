"""
Pydantic models for inbound WebSocket frames.
Frames look like {"type": "attack-territory", "data": ...}. Join and attack
also accept a bare string as data (the name or the territory id).
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

JOIN_GAME = "join-game"
START_GAME = "start-game"
ATTACK_TERRITORY = "attack-territory"
DUEL_ANSWER = "duel-answer"


class ClientFrame(BaseModel):
    type: str
    data: Any = None


class JoinRequest(BaseModel):
    name: str


class AttackRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    territory_id: str = Field(alias="territoryId")


class AnswerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    territory_id: str = Field(alias="territoryId")
    answer: int
    response_time: float = Field(alias="responseTime")


def parse_join(data: Any) -> JoinRequest:
    if isinstance(data, str):
        data = {"name": data}
    return JoinRequest.model_validate(data)


def parse_attack(data: Any) -> AttackRequest:
    if isinstance(data, str):
        data = {"territoryId": data}
    return AttackRequest.model_validate(data)


def parse_answer(data: Any) -> AnswerRequest:
    return AnswerRequest.model_validate(data)
