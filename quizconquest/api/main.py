"""
FastAPI backend for Quiz Conquest.
The game runs over a WebSocket at /ws; a few REST endpoints expose read-only
snapshots for tooling and debugging.
"""

import json
import logging
import random

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizconquest import config
from quizconquest.api.connections import ConnectionManager
from quizconquest.api.room import GameRoom
from quizconquest.engine.queries import get_attackable_territories, get_game_summary
from quizconquest.engine.questions import load_questions
from quizconquest.engine.state import Question

logger = logging.getLogger(__name__)


def create_app(
    questions: list[Question] | None = None,
    settle_delay: float | None = None,
    seed: int | None = None,
    forfeit_on_disconnect: bool | None = None,
    trust_client_timing: bool | None = None,
) -> FastAPI:
    """Build the app around a single game room. Arguments left as None fall back to config."""
    app = FastAPI(
        title="Quiz Conquest API",
        description="Real-time territory conquest decided by trivia duels",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        """Log method and path so 500s can be traced to the failing endpoint."""
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("[500] %s %s (exception)", request.method, request.url.path)
            raise
        if response.status_code >= 500:
            logger.error("[500] %s %s", request.method, request.url.path)
        return response

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request, exc):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    connections = ConnectionManager()
    room = GameRoom(
        connections,
        questions if questions is not None else load_questions(config.QUESTIONS_PATH),
        settle_delay=config.SETTLE_DELAY_SECONDS if settle_delay is None else settle_delay,
        rng=random.Random(seed),
        forfeit_on_disconnect=(
            config.FORFEIT_ON_DISCONNECT if forfeit_on_disconnect is None else forfeit_on_disconnect
        ),
        trust_client_timing=(
            config.TRUST_CLIENT_TIMING if trust_client_timing is None else trust_client_timing
        ),
    )
    app.state.room = room

    @app.on_event("shutdown")
    def on_shutdown():
        room.close()

    # ===== API Endpoints =====

    @app.get("/")
    async def root():
        return {"message": "Quiz Conquest API", "version": "1.0.0", "questions": len(room.questions)}

    @app.get("/game")
    async def get_game_state():
        return room.session.to_dict()

    @app.get("/game/summary")
    async def get_summary():
        return get_game_summary(room.session)

    @app.get("/players/{player_id}/targets")
    async def get_targets(player_id: str):
        if player_id not in room.session.players:
            raise HTTPException(status_code=404, detail=f"Player {player_id} not found")
        return {"playerId": player_id, "targets": get_attackable_territories(room.session, player_id)}

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        player_id = await connections.connect(websocket)
        await room.on_connect(player_id)
        try:
            while True:
                text = await websocket.receive_text()
                try:
                    frame = json.loads(text)
                except json.JSONDecodeError:
                    await connections.send(player_id, {"event": "error-message", "data": "Invalid message"})
                    continue
                await room.handle_message(player_id, frame)
        except WebSocketDisconnect:
            logger.info("WebSocket closed for %s", player_id)
        finally:
            await room.on_disconnect(player_id)

    return app


app = create_app()
