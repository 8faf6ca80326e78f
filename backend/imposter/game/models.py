from __future__ import annotations

from dataclasses import dataclass, field
from threading import RLock
from typing import Literal


Phase = Literal["lobby", "active", "finished"]
Role = Literal["citizen", "imposter"]


@dataclass(frozen=True)
class WordItem:
    word: str
    imposter_hint: str


@dataclass(frozen=True)
class WordCategory:
    name: str
    items: tuple[WordItem, ...]


@dataclass
class Player:
    name: str
    connection_id: str
    is_host: bool = False
    role: Role | None = None
    word: str | None = None


@dataclass
class Room:
    code: str
    capacity: int
    host_connection_id: str
    phase: Phase = "lobby"
    players: list[Player] = field(default_factory=list)
    actual_word: str | None = None
    imposter_hint: str | None = None
    category: str | None = None
    starting_player: str | None = None
    created_at_ms: int = 0
    last_activity_ms: int = 0
    closed: bool = False
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def find_player(self, connection_id: str) -> Player | None:
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def has_name(self, name: str) -> bool:
        return any(p.name == name for p in self.players)


@dataclass
class RoleReveal:
    """What one player is told privately when a game starts."""

    connection_id: str
    role: Role
    word: str
    actual_word: str
    imposter_hint: str


@dataclass
class StartResult:
    reveals: list[RoleReveal]
    starting_player: str


@dataclass
class LeaveResult:
    room: Room
    player: Player
    closed: bool
