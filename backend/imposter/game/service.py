from __future__ import annotations

import logging
import random
import secrets
import string
import time
from threading import RLock

from ..config import Config
from .catalog import WordCatalog
from .models import LeaveResult, Player, Room, RoleReveal, StartResult

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits


def now_ms() -> int:
    return int(time.time() * 1000)


class GameError(Exception):
    """A request error reported back to the client that sent it."""

    message = "Request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        if message:
            self.message = message


class RoomNotFound(GameError):
    message = "Room not found. Check the code and try again."


class RoomFull(GameError):
    message = "The room is full."


class GameAlreadyStarted(GameError):
    message = "The game has already started."


class DuplicateName(GameError):
    message = "A player with this name is already in the room."


class InsufficientPlayers(GameError):
    message = "Not enough players to start the game."


class CatalogUnavailable(GameError):
    message = "Server: the word list could not be loaded."


class InvalidName(GameError):
    message = "Please enter a valid name."


class InvalidPlayerCount(GameError):
    message = "Player count is out of range."


class AlreadyInRoom(GameError):
    message = "You are already in a room."


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def validate_name(name: str, max_length: int | None = None) -> str:
    n = (name or "").strip()
    if not n:
        raise InvalidName()
    if len(n) > (max_length or Config.NAME_MAX_LENGTH):
        raise InvalidName("Name is too long.")
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        raise InvalidName()
    for ch in n:
        if ord(ch) < 32:
            raise InvalidName()
    return n


class RoomRegistry:
    """Owns every live room, keyed by room code."""

    def __init__(self, code_length: int | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._retired: set[str] = set()
        self.code_length = code_length or Config.ROOM_CODE_LENGTH

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def _new_code(self) -> str:
        while True:
            code = "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(self.code_length))
            if code not in self._rooms and code not in self._retired:
                return code

    def create_room(self, host_name: str, host_connection_id: str, capacity: int) -> Room:
        with self._lock:
            code = self._new_code()
            ts = now_ms()
            room = Room(
                code=code,
                capacity=capacity,
                host_connection_id=host_connection_id,
                players=[Player(name=host_name, connection_id=host_connection_id, is_host=True)],
                created_at_ms=ts,
                last_activity_ms=ts,
            )
            self._rooms[code] = room
            return room

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def delete_room(self, code: str) -> bool:
        with self._lock:
            room = self._rooms.pop(code, None)
            if room is None:
                return False
            room.closed = True
            self._retired.add(code)
            return True

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def find_by_connection(self, connection_id: str) -> Room | None:
        # Linear scan; a connection sits in at most one room.
        for room in self.list_rooms():
            with room.lock:
                if not room.closed and room.find_player(connection_id) is not None:
                    return room
        return None

    def sweep_idle(self, ttl_ms: int, now: int | None = None) -> list[Room]:
        """Close rooms with no activity for ``ttl_ms``. Returns the closed rooms."""
        if ttl_ms <= 0:
            return []
        ts = now if now is not None else now_ms()
        expired = []
        for room in self.list_rooms():
            with room.lock:
                if room.closed or ts - room.last_activity_ms < ttl_ms:
                    continue
                self.delete_room(room.code)
                expired.append(room)
        return expired


def _touch(room: Room) -> None:
    room.last_activity_ms = now_ms()


def create_game(
    registry: RoomRegistry,
    catalog: WordCatalog | None,
    connection_id: str,
    host_name: str,
    capacity,
    min_players: int | None = None,
    max_players: int | None = None,
    name_max_length: int | None = None,
) -> Room:
    if catalog is None:
        raise CatalogUnavailable()

    name = validate_name(host_name, name_max_length)

    lo = min_players or Config.MIN_PLAYERS
    hi = max_players or Config.MAX_PLAYERS
    if isinstance(capacity, bool) or not isinstance(capacity, int):
        try:
            capacity = int(str(capacity).strip())
        except ValueError:
            raise InvalidPlayerCount(f"Player count must be between {lo} and {hi}.") from None
    if capacity < lo or capacity > hi:
        raise InvalidPlayerCount(f"Player count must be between {lo} and {hi}.")

    if registry.find_by_connection(connection_id) is not None:
        raise AlreadyInRoom()

    room = registry.create_room(name, connection_id, capacity)
    logger.info("room %s created by %r (capacity %d)", room.code, name, capacity)
    return room


def join_game(
    registry: RoomRegistry,
    room_code: str,
    connection_id: str,
    player_name: str,
    name_max_length: int | None = None,
) -> tuple[Room, Player]:
    name = validate_name(player_name, name_max_length)

    if registry.find_by_connection(connection_id) is not None:
        raise AlreadyInRoom()

    room = registry.get_room(room_code)
    if room is None:
        raise RoomNotFound()

    with room.lock:
        if room.closed:
            raise RoomNotFound()
        if len(room.players) >= room.capacity:
            raise RoomFull()
        if room.phase != "lobby":
            raise GameAlreadyStarted()
        if room.has_name(name):
            raise DuplicateName()

        player = Player(name=name, connection_id=connection_id)
        room.players.append(player)
        _touch(room)

    logger.info("%r joined room %s (%d/%d)", name, room.code, len(room.players), room.capacity)
    return room, player


def _is_host(room: Room, connection_id: str) -> bool:
    return connection_id == room.host_connection_id


def pick_starting_index(
    imposter_index: int,
    player_count: int,
    r: float,
    imposter_weight: float | None = None,
) -> int:
    """Map one draw ``r`` in [0, 1) onto a player via cumulative weights.

    The imposter's share is ``imposter_weight / player_count``, each citizen gets
    ``(1 - imposter_weight) / (player_count - 1)``. The weights sum to less than one,
    so a draw past the last cumulative weight falls back to the first player.
    """
    share = Config.IMPOSTER_START_WEIGHT if imposter_weight is None else imposter_weight
    imposter_chance = share / player_count
    citizen_chance = (1 - share) / (player_count - 1)

    cumulative = 0.0
    for i in range(player_count):
        cumulative += imposter_chance if i == imposter_index else citizen_chance
        if r < cumulative:
            return i
    return 0


def start_game(
    room: Room,
    catalog: WordCatalog | None,
    requester_id: str,
    rng: random.Random | None = None,
    imposter_weight: float | None = None,
) -> StartResult | None:
    """Assign roles and words. Returns None when the request is not allowed."""
    r = rng or random.Random()
    with room.lock:
        if room.closed or catalog is None:
            return None
        if not _is_host(room, requester_id) or room.phase != "lobby":
            return None
        if len(room.players) != room.capacity:
            raise InsufficientPlayers()

        category, item = catalog.pick(r)
        room.actual_word = item.word
        room.imposter_hint = item.imposter_hint
        room.category = category.name

        count = len(room.players)
        imposter_index = int(r.random() * count)

        reveals = []
        for i, p in enumerate(room.players):
            if i == imposter_index:
                p.role = "imposter"
                p.word = room.imposter_hint
            else:
                p.role = "citizen"
                p.word = room.actual_word
            reveals.append(
                RoleReveal(
                    connection_id=p.connection_id,
                    role=p.role,
                    word=p.word,
                    actual_word=room.actual_word,
                    imposter_hint=room.imposter_hint,
                )
            )

        starting_index = pick_starting_index(imposter_index, count, r.random(), imposter_weight)
        room.starting_player = room.players[starting_index].name
        room.phase = "active"
        _touch(room)

        logger.info("room %s started: category %r, %d players", room.code, room.category, count)
        return StartResult(reveals=reveals, starting_player=room.starting_player)


def end_game(room: Room, requester_id: str) -> bool:
    with room.lock:
        if room.closed or not _is_host(room, requester_id) or room.phase != "active":
            return False
        room.phase = "finished"
        _touch(room)
    logger.info("room %s finished", room.code)
    return True


def reset_room(room: Room, requester_id: str) -> bool:
    with room.lock:
        if room.closed or not _is_host(room, requester_id):
            return False
        room.phase = "lobby"
        room.actual_word = None
        room.imposter_hint = None
        room.category = None
        room.starting_player = None
        for p in room.players:
            p.role = None
            p.word = None
        _touch(room)
    logger.info("room %s reset to lobby", room.code)
    return True


def leave_room(registry: RoomRegistry, connection_id: str) -> LeaveResult | None:
    """Drop a departing connection from its room, closing the room if needed."""
    room = registry.find_by_connection(connection_id)
    if room is None:
        return None

    with room.lock:
        player = room.find_player(connection_id)
        if player is None or room.closed:
            return None
        room.players.remove(player)
        closed = player.is_host or not room.players
        if closed:
            registry.delete_room(room.code)
        else:
            _touch(room)

    if closed:
        logger.info("room %s closed after %r left", room.code, player.name)
    else:
        logger.info("%r left room %s", player.name, room.code)
    return LeaveResult(room=room, player=player, closed=closed)


def player_state(p: Player, reveal: bool) -> dict:
    return {
        "name": p.name,
        "isHost": p.is_host,
        "socketId": p.connection_id,
        "role": p.role if reveal else None,
        "word": p.word if reveal else None,
    }


def player_list(room: Room) -> list[dict]:
    with room.lock:
        reveal = room.phase == "finished"
        return [player_state(p, reveal) for p in room.players]


def room_public_state(room: Room) -> dict:
    with room.lock:
        # Round details stay private until the big reveal.
        reveal = room.phase == "finished"
        return {
            "roomCode": room.code,
            "totalPlayers": room.capacity,
            "players": [player_state(p, reveal) for p in room.players],
            "phase": room.phase,
            "started": room.phase != "lobby",
            "finished": room.phase == "finished",
            "actualWord": room.actual_word if reveal else None,
            "imposterHint": room.imposter_hint if reveal else None,
            "category": room.category if reveal else None,
            "startingPlayer": room.starting_player if room.phase != "lobby" else None,
            "hostSocketId": room.host_connection_id,
        }


def room_summary(room: Room) -> dict:
    with room.lock:
        return {
            "roomCode": room.code,
            "phase": room.phase,
            "players": len(room.players),
            "capacity": room.capacity,
            "joinable": room.phase == "lobby" and len(room.players) < room.capacity,
        }
