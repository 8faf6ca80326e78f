from __future__ import annotations

import logging
import random
from threading import Lock
from typing import Any

from flask import current_app, request
from flask_socketio import SocketIO, emit, join_room

from ..game import service
from ..game.catalog import WordCatalog
from ..game.service import RoomRegistry
from . import events

logger = logging.getLogger(__name__)


def _room_code(data: Any) -> str:
    # Accepts the bare code or {"roomCode": ...}
    if isinstance(data, dict):
        data = data.get("roomCode", "")
    return service.normalize_code(str(data or ""))


def register_socketio_handlers(
    socketio: SocketIO,
    registry: RoomRegistry,
    catalog: WordCatalog | None,
    rng: random.Random | None = None,
) -> None:
    sweeper_lock = Lock()
    sweeper = {"running": False}

    def _close_room(room, reason: str, skip_sid: str | None = None) -> None:
        socketio.emit(events.ROOM_CLOSED, reason, to=room.code, skip_sid=skip_sid)
        socketio.close_room(room.code)

    def _broadcast_players(room) -> None:
        socketio.emit(events.PLAYER_LIST_UPDATED, service.player_list(room), to=room.code)

    def _ensure_sweeper() -> None:
        ttl_sec = current_app.config.get("ROOM_IDLE_TTL_SEC", 0)
        interval = current_app.config.get("ROOM_SWEEP_INTERVAL_SEC", 60)
        if ttl_sec <= 0:
            return

        with sweeper_lock:
            if sweeper["running"]:
                return
            sweeper["running"] = True

        def _runner() -> None:
            while True:
                socketio.sleep(interval)
                for room in registry.sweep_idle(ttl_sec * 1000):
                    logger.info("room %s closed after %ds idle", room.code, ttl_sec)
                    _close_room(room, events.IDLE_CLOSED_MESSAGE)

                with sweeper_lock:
                    if not len(registry):
                        sweeper["running"] = False
                        return

        socketio.start_background_task(_runner)

    @socketio.on(events.CREATE_GAME)
    def create_game(data):
        payload = data if isinstance(data, dict) else {}
        cfg = current_app.config

        try:
            room = service.create_game(
                registry,
                catalog,
                request.sid,
                host_name=str(payload.get("hostName") or ""),
                capacity=payload.get("playerCount"),
                min_players=cfg.get("MIN_PLAYERS"),
                max_players=cfg.get("MAX_PLAYERS"),
                name_max_length=cfg.get("NAME_MAX_LENGTH"),
            )
        except service.GameError as e:
            logger.warning("createGame rejected for %s: %s", request.sid, e.message)
            emit(events.GAME_ERROR, e.message)
            return

        join_room(room.code)
        emit(events.GAME_CREATED, {"roomCode": room.code, "gameData": service.room_public_state(room)})
        _ensure_sweeper()

    @socketio.on(events.JOIN_GAME)
    def join_game(data):
        payload = data if isinstance(data, dict) else {}

        try:
            room, _ = service.join_game(
                registry,
                _room_code(payload),
                request.sid,
                player_name=str(payload.get("playerName") or ""),
                name_max_length=current_app.config.get("NAME_MAX_LENGTH"),
            )
        except service.GameError as e:
            logger.warning("joinGame rejected for %s: %s", request.sid, e.message)
            emit(events.JOIN_ERROR, e.message)
            return

        join_room(room.code)
        emit(events.JOINED_GAME, {"roomCode": room.code, "gameData": service.room_public_state(room)})
        _broadcast_players(room)

    @socketio.on(events.START_GAME)
    def start_game(data):
        room = registry.get_room(_room_code(data))
        if not room:
            return

        try:
            result = service.start_game(
                room,
                catalog,
                request.sid,
                rng=rng,
                imposter_weight=current_app.config.get("IMPOSTER_START_WEIGHT"),
            )
        except service.GameError as e:
            logger.warning("startGame rejected in room %s: %s", room.code, e.message)
            emit(events.GAME_ERROR, e.message)
            return

        if result is None:
            return

        for reveal in result.reveals:
            socketio.emit(
                events.ROLE_ASSIGNED,
                {
                    "role": reveal.role,
                    "word": reveal.word,
                    "actualWord": reveal.actual_word,
                    "imposterHint": reveal.imposter_hint,
                },
                to=reveal.connection_id,
            )
        socketio.emit(events.GAME_STARTED, {"startingPlayer": result.starting_player}, to=room.code)

    @socketio.on(events.END_GAME)
    def end_game(data):
        room = registry.get_room(_room_code(data))
        if not room or not service.end_game(room, request.sid):
            return
        socketio.emit(events.GAME_FINISHED, service.room_public_state(room), to=room.code)

    @socketio.on(events.NEW_GAME_SAME_ROOM)
    def new_game_same_room(data):
        room = registry.get_room(_room_code(data))
        if not room or not service.reset_room(room, request.sid):
            return
        socketio.emit(events.ROOM_RESET, service.room_public_state(room), to=room.code)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        result = service.leave_room(registry, request.sid)
        if result is None:
            return

        if result.closed:
            _close_room(result.room, events.HOST_LEFT_MESSAGE, skip_sid=request.sid)
        else:
            _broadcast_players(result.room)
