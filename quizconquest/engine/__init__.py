"""
Quiz Conquest Turn-and-Duel Engine
Pure game rules: no web framework, no clock, no RNG inside the reducer.
"""

GRID_WIDTH = 6
GRID_HEIGHT = 6

TILE_VALUE_MIN = 1
TILE_VALUE_MAX = 3

MIN_PLAYERS = 2
MAX_PLAYERS = 8


class GameRuleError(ValueError):
    """An action broke a game rule. The message is safe to show to the requester."""
