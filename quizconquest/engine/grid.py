"""
Territory grid generator.
Builds the board at game start: one territory per cell, one capital per
player at a fixed position for the player count, then the remaining cells are
shared out by growing each player's region outward from their capital.
"""

import random

from quizconquest.engine import TILE_VALUE_MAX, TILE_VALUE_MIN
from quizconquest.engine.ledger import chebyshev_distance, manhattan_distance
from quizconquest.engine.state import GameSession, Territory, territory_id


def roll_tile_values(count: int, rng: random.Random | None = None) -> list[int]:
    """Random tile values for a board. Not security sensitive."""
    rng = rng or random
    return [rng.randint(TILE_VALUE_MIN, TILE_VALUE_MAX) for _ in range(count)]


def _perimeter(width: int, height: int) -> list[tuple[int, int]]:
    """Edge cells clockwise from the top-left corner."""
    right, bottom = width - 1, height - 1
    cells = [(x, 0) for x in range(width)]
    cells += [(right, y) for y in range(1, height)]
    cells += [(x, bottom) for x in range(right - 1, -1, -1)]
    cells += [(0, y) for y in range(bottom - 1, 0, -1)]
    return cells


def capital_positions(player_count: int, width: int, height: int) -> list[tuple[int, int]]:
    """
    Capital (x, y) for each player, in turn order.

    2 players: opposite corners
    3 players: two top corners and the centre of the bottom edge
    4 players: all corners, opposite corners first
    other: spread evenly around the board edge
    """
    right, bottom = width - 1, height - 1
    if player_count == 2:
        return [(0, 0), (right, bottom)]
    if player_count == 3:
        return [(0, 0), (right, 0), (width // 2, bottom)]
    if player_count == 4:
        return [(0, 0), (right, bottom), (right, 0), (0, bottom)]
    edge = _perimeter(width, height)
    if player_count > len(edge):
        raise ValueError(f"Board {width}x{height} cannot seat {player_count} players")
    return [edge[i * len(edge) // player_count] for i in range(player_count)]


def region_quotas(player_count: int, cell_count: int) -> list[int]:
    """Non-capital cells per player; earlier players take the remainder, one each."""
    base, extra = divmod(cell_count - player_count, player_count)
    return [base + (1 if i < extra else 0) for i in range(player_count)]


def _grow_regions(
    territories: dict[str, Territory],
    player_ids: list[str],
    capitals: dict[str, Territory],
    quotas: dict[str, int],
) -> None:
    """
    Breadth-first frontier growth, one cell per player per round.
    Each player claims the unclaimed cell bordering their region that is
    closest (Manhattan) to their capital; ties go to the lower row, then column.
    A player boxed in by neighbours takes the closest unclaimed cell anywhere.
    """
    regions = {pid: [capitals[pid]] for pid in player_ids}
    remaining = dict(quotas)

    while any(remaining.values()):
        progressed = False
        for pid in player_ids:
            if remaining[pid] <= 0:
                continue
            unclaimed = [t for t in territories.values() if t.owner is None]
            if not unclaimed:
                return
            frontier = [
                t for t in unclaimed
                if any(chebyshev_distance(t, owned) == 1 for owned in regions[pid])
            ]
            capital = capitals[pid]
            pick = min(
                frontier or unclaimed,
                key=lambda t: (manhattan_distance(capital, t), t.y, t.x),
            )
            pick.owner = pid
            regions[pid].append(pick)
            remaining[pid] -= 1
            progressed = True
        if not progressed:
            return


def generate_board(
    session: GameSession,
    player_ids: list[str],
    tile_values: list[int],
) -> None:
    """
    Replace session.territories with a fresh board and seed every player's
    territories and capital. Callers guarantee at least two players.
    """
    width, height = session.width, session.height
    if width < 2 or height < 2:
        raise ValueError(f"Board must be at least 2x2, got {width}x{height}")
    if len(tile_values) != width * height:
        raise ValueError(f"Expected {width * height} tile values, got {len(tile_values)}")
    for v in tile_values:
        if not TILE_VALUE_MIN <= v <= TILE_VALUE_MAX:
            raise ValueError(f"Tile value {v} outside {TILE_VALUE_MIN}-{TILE_VALUE_MAX}")

    territories: dict[str, Territory] = {}
    values = iter(tile_values)
    for y in range(height):
        for x in range(width):
            tid = territory_id(x, y)
            territories[tid] = Territory(id=tid, x=x, y=y, value=next(values))

    capitals: dict[str, Territory] = {}
    for pid, (x, y) in zip(player_ids, capital_positions(len(player_ids), width, height)):
        capital = territories[territory_id(x, y)]
        capital.owner = pid
        capital.is_capital = True
        capitals[pid] = capital

    quotas = dict(zip(player_ids, region_quotas(len(player_ids), width * height)))
    _grow_regions(territories, player_ids, capitals, quotas)

    session.territories = territories
    for pid in player_ids:
        player = session.players[pid]
        player.capital = capitals[pid].id
        player.territories = {tid for tid, t in territories.items() if t.owner == pid}
