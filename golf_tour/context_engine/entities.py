"""
CONTEXT ENGINE - Entities
==========================
The unit being ranked: one player, a pair, or a team.

Pairs and teams come either from an explicit member list (groups.csv / admin
screen) or from the implicit grouping helpers below when none are configured.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from golf_tour.utils.helpers import safe_int

PAIRING_MODES = ("SEQUENTIAL", "SNAKE")
TEAM_MODES = ("ROUND_ROBIN", "SNAKE_TEAMS")


@dataclass(frozen=True)
class Entity:
    entity_id: str
    label: str
    member_ids: Tuple[str, ...]
    kind: str = "individual"


def _names(players: Sequence[Any]) -> Dict[str, str]:
    return {str(p.id): str(p.name or p.id) for p in players}


def members_label(member_ids: Sequence[str], players: Sequence[Any]) -> str:
    names = _names(players)
    return " / ".join(names.get(pid, pid) for pid in member_ids)


def individual_entities(players: Sequence[Any]) -> Tuple[Entity, ...]:
    return tuple(Entity(str(p.id), str(p.name or p.id), (str(p.id),), "individual") for p in players)


def entities_from_members(
    members: Mapping[str, Sequence[str]],
    labels: Optional[Mapping[str, str]] = None,
    players: Sequence[Any] = (),
    kind: str = "pair",
) -> Tuple[Entity, ...]:
    """
    Entities from a {entity_id: [player_id, ...]} map.
    Missing labels fall back to the member names joined with " / ".
    """
    labels = labels or {}
    out = []
    for entity_id, member_ids in members.items():
        ids = tuple(str(m) for m in member_ids)
        label = labels.get(entity_id) or members_label(ids, players) or str(entity_id)
        out.append(Entity(str(entity_id), label, ids, kind))
    return tuple(out)


def make_implicit_pairs(players: Sequence[Any], mode: str = "SEQUENTIAL") -> Tuple[Entity, ...]:
    """
    SEQUENTIAL pairs neighbours (1+2, 3+4, ...).
    SNAKE pairs first with last (1+n, 2+n-1, ...).
    An odd player out plays solo.
    """
    mode = str(mode).strip().upper()
    if mode not in PAIRING_MODES:
        raise ValueError(f"Unknown pairing mode '{mode}'. Available: {list(PAIRING_MODES)}")

    queue: List[Any] = list(players)
    pairs = []
    while queue:
        a = queue.pop(0)
        b = None
        if queue:
            b = queue.pop(0) if mode == "SEQUENTIAL" else queue.pop()

        if b is None:
            label = f"{a.name} / (Solo)"
            member_ids: Tuple[str, ...] = (str(a.id),)
        else:
            label = f"{a.name} / {b.name}"
            member_ids = (str(a.id), str(b.id))

        pairs.append(Entity(f"implicit:pair:{len(pairs)}", label, member_ids, "pair"))
    return tuple(pairs)


def make_implicit_teams(
    players: Sequence[Any],
    team_count: int = 2,
    mode: str = "ROUND_ROBIN",
) -> Tuple[Entity, ...]:
    """
    ROUND_ROBIN deals players 1..k, 1..k, ...
    SNAKE_TEAMS deals 1..k, k..1, 1..k, ...
    """
    mode = str(mode).strip().upper()
    if mode not in TEAM_MODES:
        raise ValueError(f"Unknown team mode '{mode}'. Available: {list(TEAM_MODES)}")

    k = max(1, safe_int(team_count) or 1)

    buckets: List[List[str]] = [[] for _ in range(k)]
    if mode == "ROUND_ROBIN":
        for i, p in enumerate(players):
            buckets[i % k].append(str(p.id))
    else:
        t, step = 0, 1
        for p in players:
            buckets[t].append(str(p.id))
            t += step
            if t == k:
                t, step = k - 1, -1
            elif t == -1:
                t, step = 0, 1

    return tuple(
        Entity(f"implicit:team:{i}", f"Team {i + 1}", tuple(ids), "team")
        for i, ids in enumerate(buckets)
    )
