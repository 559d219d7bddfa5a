"""
COMPETITION ENGINE - Definitions
=================================
Types shared by the catalog and the engine, and the registry that holds
competition definitions for a run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Tuple

logger = logging.getLogger(__name__)

SCOPES = ("round", "tour")
KINDS = ("individual", "pair", "team")


@dataclass(frozen=True)
class Eligibility:
    only_playing: bool = True
    require_complete: bool = False


@dataclass(frozen=True)
class LeaderboardRow:
    entry_id: str
    label: str
    total: float
    stats: Mapping[str, Any] = field(default_factory=dict)
    front9: float = 0.0
    back9: float = 0.0


@dataclass(frozen=True)
class CompetitionDefinition:
    id: str
    name: str
    scope: str
    kind: str
    compute: Callable[[Any], List[LeaderboardRow]]
    eligibility: Eligibility = field(default_factory=Eligibility)
    lower_is_better: bool = False

    def __post_init__(self):
        if self.scope not in SCOPES:
            raise ValueError(f"{self.id}: unknown scope '{self.scope}'. Available: {list(SCOPES)}")
        if self.kind not in KINDS:
            raise ValueError(f"{self.id}: unknown kind '{self.kind}'. Available: {list(KINDS)}")


@dataclass(frozen=True)
class CompetitionResult:
    competition_id: str
    competition_name: str
    kind: str
    scope: str
    lower_is_better: bool
    rows: Tuple[LeaderboardRow, ...] = ()


class CompetitionRegistry:
    """Competition definitions keyed by id, in registration order."""

    def __init__(self, definitions=()):
        self._definitions: Dict[str, CompetitionDefinition] = {}
        for d in definitions:
            self.register(d)

    def register(self, definition: CompetitionDefinition) -> CompetitionDefinition:
        if definition.id in self._definitions:
            raise ValueError(f"Competition '{definition.id}' is already registered")
        self._definitions[definition.id] = definition
        return definition

    def get(self, competition_id: str) -> CompetitionDefinition:
        if competition_id not in self._definitions:
            raise ValueError(
                f"Unknown competition '{competition_id}'. Available: {list(self._definitions.keys())}"
            )
        return self._definitions[competition_id]

    def ids(self) -> List[str]:
        return list(self._definitions.keys())

    def by_scope(self, scope: str) -> List[CompetitionDefinition]:
        return [d for d in self._definitions.values() if d.scope == scope]

    def __contains__(self, competition_id: object) -> bool:
        return competition_id in self._definitions

    def __iter__(self) -> Iterator[CompetitionDefinition]:
        return iter(list(self._definitions.values()))

    def __len__(self) -> int:
        return len(self._definitions)
