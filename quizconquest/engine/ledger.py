"""
Ownership ledger.
Territory.owner is authoritative; Player.territories mirrors it and every
mutation here keeps the two in step. Unknown territory ids raise KeyError.
"""

from quizconquest.engine.state import GameSession, Territory


def chebyshev_distance(a: Territory, b: Territory) -> int:
    return max(abs(a.x - b.x), abs(a.y - b.y))


def manhattan_distance(a: Territory, b: Territory) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


def adjacent(session: GameSession, a_id: str, b_id: str) -> bool:
    """8-directional adjacency: Chebyshev distance of exactly 1. A tile is not adjacent to itself."""
    a = session.territories[a_id]
    b = session.territories[b_id]
    return chebyshev_distance(a, b) == 1


def neighbours(session: GameSession, territory_id: str) -> list[str]:
    """Ids of all territories adjacent to territory_id, in grid order."""
    t = session.territories[territory_id]
    return [
        other.id for other in session.territories.values()
        if chebyshev_distance(t, other) == 1
    ]


def territories_owned_by(session: GameSession, player_id: str) -> set[str]:
    return {tid for tid, t in session.territories.items() if t.owner == player_id}


def borders_any(session: GameSession, territory_id: str, owned: set[str]) -> bool:
    """True if territory_id is adjacent to at least one territory in owned."""
    return any(tid in owned for tid in neighbours(session, territory_id))


def transfer(
    session: GameSession,
    territory_id: str,
    from_player_id: str | None,
    to_player_id: str,
) -> bool:
    """
    Move a territory to a new owner.
    Returns True if the territory was a capital; capture downgrades it to an
    ordinary tile (capital status is never inherited).
    """
    territory = session.territories[territory_id]
    if territory.owner == to_player_id:
        # Already owned: only repair the mirror set
        new_owner = session.players.get(to_player_id)
        if new_owner:
            new_owner.territories.add(territory_id)
        return False

    for pid in {from_player_id, territory.owner} - {None, to_player_id}:
        previous = session.players.get(pid)
        if previous:
            previous.territories.discard(territory_id)

    territory.owner = to_player_id
    new_owner = session.players.get(to_player_id)
    if new_owner:
        new_owner.territories.add(territory_id)

    was_capital = territory.is_capital
    territory.is_capital = False
    return was_capital


def vacate_all(session: GameSession, player_id: str, except_territory_id: str | None = None) -> list[str]:
    """
    Release every territory player_id owns except except_territory_id.
    Used on elimination. Returns the ids that became unowned.
    """
    vacated = []
    for tid, territory in session.territories.items():
        if tid == except_territory_id or territory.owner != player_id:
            continue
        territory.owner = None
        territory.is_capital = False
        vacated.append(tid)
    player = session.players.get(player_id)
    if player:
        player.territories.clear()
    return vacated


def unowned_count(session: GameSession) -> int:
    return sum(1 for t in session.territories.values() if t.owner is None)
