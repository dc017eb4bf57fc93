"""
One live game: the authoritative session plus everything around the pure engine
that needs I/O, randomness or time.

Every inbound message is applied to completion (state swap, then its events sent
in order) on the event loop. The only deferred work is the per-territory
resolution task started when a duel's last answer arrives.
"""

import asyncio
import logging
import random
import time
from copy import deepcopy
from typing import Any

from quizconquest import config
from quizconquest.api.messages import (
    ATTACK_TERRITORY,
    DUEL_ANSWER,
    JOIN_GAME,
    START_GAME,
    ClientFrame,
    parse_answer,
    parse_attack,
    parse_join,
)
from quizconquest.engine import GameRuleError
from quizconquest.engine.actions import (
    Action,
    attack_territory,
    join_game,
    leave_game,
    resolve_duel,
    start_game,
    submit_answer,
)
from quizconquest.engine.events import (
    DUEL_COMPLETE,
    GameEvent,
    error_message,
    player_list_update,
    territory_update,
    turn_update,
)
from quizconquest.engine.grid import roll_tile_values
from quizconquest.engine.questions import pick_question_index
from quizconquest.engine.reducer import apply_action
from quizconquest.engine.state import GameSession, Question

logger = logging.getLogger(__name__)


def wall_clock_ms() -> float:
    return time.time() * 1000


class GameRoom:
    def __init__(
        self,
        connections,
        questions: list[Question],
        settle_delay: float = config.SETTLE_DELAY_SECONDS,
        rng: random.Random | None = None,
        forfeit_on_disconnect: bool = config.FORFEIT_ON_DISCONNECT,
        trust_client_timing: bool = config.TRUST_CLIENT_TIMING,
        timing_tolerance: float = config.TIMING_TOLERANCE_MS,
        width: int = config.GRID_WIDTH,
        height: int = config.GRID_HEIGHT,
        clock=wall_clock_ms,
    ):
        self.connections = connections
        self.questions = questions
        self.settle_delay = settle_delay
        self.rng = rng or random.Random()
        self.forfeit_on_disconnect = forfeit_on_disconnect
        self.trust_client_timing = trust_client_timing
        self.timing_tolerance = timing_tolerance
        self.clock = clock
        self.session = GameSession(width=width, height=height)
        # territory_id -> scheduled resolution
        self.pending: dict[str, asyncio.Task] = {}

    # ===== Inbound =====

    async def on_connect(self, player_id: str) -> None:
        """Greet a new connection with its id and the current board, if any."""
        await self.connections.send(player_id, {"event": "connected", "data": {"playerId": player_id}})
        greeting = [player_list_update(self.session.players_snapshot())]
        if self.session.territories:
            greeting.append(territory_update(self.session.territories_snapshot()))
            greeting.append(turn_update(self.session.current_turn))
        for event in greeting:
            await self.connections.send(player_id, event.to_message())

    async def on_disconnect(self, player_id: str) -> None:
        self.connections.disconnect(player_id)
        await self.apply(leave_game(player_id, forfeit=self.forfeit_on_disconnect))

    async def handle_message(self, player_id: str, raw: Any) -> bool:
        """Validate one client frame and apply it. Returns True if the game state changed."""
        try:
            frame = ClientFrame.model_validate(raw)
            action = self._build_action(player_id, frame)
        except GameRuleError as e:
            await self._reject(player_id, str(e))
            return False
        except ValueError as e:
            logger.info("Malformed message from %s: %s", player_id, e)
            await self._reject(player_id, "Invalid message")
            return False
        return await self.apply(action, requester=player_id)

    def _build_action(self, player_id: str, frame: ClientFrame) -> Action:
        if frame.type == JOIN_GAME:
            return join_game(player_id, parse_join(frame.data).name)
        if frame.type == START_GAME:
            count = self.session.width * self.session.height
            return start_game(player_id, roll_tile_values(count, self.rng))
        if frame.type == ATTACK_TERRITORY:
            request = parse_attack(frame.data)
            return attack_territory(
                player_id,
                request.territory_id,
                pick_question_index(self.questions, self.rng),
                self.clock(),
            )
        if frame.type == DUEL_ANSWER:
            request = parse_answer(frame.data)
            return submit_answer(
                player_id,
                request.territory_id,
                request.answer,
                request.response_time,
                self.clock(),
            )
        raise GameRuleError(f"Unknown message type: {frame.type}")

    # ===== State transitions =====

    async def apply(self, action: Action, requester: str | None = None) -> bool:
        try:
            new_session, events = apply_action(
                self.session,
                action,
                self.questions,
                trust_client_timing=self.trust_client_timing,
                timing_tolerance=self.timing_tolerance,
            )
        except GameRuleError as e:
            logger.info("Rejected %s from %s: %s", action.type, self.session.player_name(requester), e)
            if requester:
                await self._reject(requester, str(e))
            return False

        self.session = new_session
        self._cancel_stale_resolutions()
        self._schedule_resolutions(events)
        await self.dispatch(events)
        return True

    def _schedule_resolutions(self, events: list[GameEvent]) -> None:
        for event in events:
            if event.type != DUEL_COMPLETE:
                continue
            territory_id = event.payload["territoryId"]
            snapshot = deepcopy(self.session.active_duels[territory_id])
            self.pending[territory_id] = asyncio.create_task(
                self._resolve_after_delay(territory_id, snapshot)
            )

    async def _resolve_after_delay(self, territory_id: str, snapshot) -> None:
        await asyncio.sleep(self.settle_delay)
        if self.pending.get(territory_id) is asyncio.current_task():
            del self.pending[territory_id]
        await self.apply(resolve_duel(territory_id, snapshot))

    def _cancel_stale_resolutions(self) -> None:
        """Drop scheduled resolutions whose duel no longer exists (restart, game over, forfeit)."""
        for territory_id, task in list(self.pending.items()):
            if territory_id not in self.session.active_duels:
                task.cancel()
                del self.pending[territory_id]
                logger.info("Cancelled pending resolution for %s", territory_id)

    def close(self) -> None:
        for task in self.pending.values():
            task.cancel()
        self.pending.clear()

    # ===== Outbound =====

    async def dispatch(self, events: list[GameEvent]) -> None:
        """Send events in order: broadcasts to everyone, the rest to their recipients."""
        for event in events:
            message = event.to_message()
            if event.is_broadcast:
                await self.connections.broadcast(message)
            else:
                for player_id in event.recipients:
                    await self.connections.send(player_id, message)

    async def _reject(self, player_id: str, message: str) -> None:
        await self.connections.send(player_id, error_message(player_id, message).to_message())
