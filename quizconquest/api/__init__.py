"""
Transport and process surface: FastAPI app, WebSocket connections, game room.
"""
