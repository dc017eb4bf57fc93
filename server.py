"""
Development server for Quiz Conquest.
Serves the game WebSocket at ws://<host>:<port>/ws.
"""

import logging

import uvicorn

from quizconquest import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


if __name__ == "__main__":
    logger.info("Server running on port %d", config.PORT)
    logger.info("Connect clients to ws://localhost:%d/ws", config.PORT)
    uvicorn.run("quizconquest.api.main:app", host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())
