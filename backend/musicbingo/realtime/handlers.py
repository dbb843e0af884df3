from __future__ import annotations

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO, emit, join_room, leave_room

from ..game.errors import BingoError, RoomNotFound
from ..game.models import Phase
from ..game.registry import SessionRegistry
from . import events

logger = logging.getLogger(__name__)


def _validate_name(name: str) -> bool:
    n = (name or "").strip()
    if not n:
        return False
    if len(n) > 24:
        return False
    # Avoid obvious HTML/script injection.
    if "<" in n or ">" in n:
        return False
    # No control characters.
    for ch in n:
        if ord(ch) < 32:
            return False
    return True


def _room_code(payload: dict) -> str:
    return str(payload.get("roomCode", "")).strip().upper()


def _reject(exc: BingoError) -> dict:
    body = exc.to_public()
    emit(events.ROOM_ERROR, body)
    return {"ok": False, **body}


def register_socketio_handlers(socketio: SocketIO, registry: SessionRegistry) -> None:
    def _broadcast_room_state(room_code: str) -> None:
        try:
            state = registry.get_room_snapshot(room_code)
        except RoomNotFound:
            return
        socketio.emit(events.ROOM_STATE, state, to=room_code)

    def _safe_broadcast_room_state(room_code: str) -> None:
        try:
            _broadcast_room_state(room_code)
        except Exception:
            logger.warning(f"Broadcast to room {room_code} failed", exc_info=True)

    def _send_cards(room_code: str) -> None:
        room = registry.find_room(room_code)
        if room is None:
            return
        for pid in list(room.players.keys()):
            try:
                socketio.emit(events.CARD_UPDATE, registry.get_player_card(room_code, pid), to=pid)
            except BingoError:
                continue

    def _on_pool_updated(room_code: str) -> None:
        room = registry.find_room(room_code)
        if room is None:
            return
        socketio.emit(
            events.CONTENT_PROGRESS,
            {"roomCode": room_code, "poolSize": len(room.content_pool), "target": room.target_pool_size},
            to=room_code,
        )
        _safe_broadcast_room_state(room_code)

    def _on_generation_progress(room_code: str, done: int, total: int) -> None:
        socketio.emit(
            events.CONTENT_PROGRESS,
            {"roomCode": room_code, "done": done, "total": total},
            to=room_code,
        )

    registry.on_pool_updated = _on_pool_updated
    registry.on_generation_progress = _on_generation_progress

    @socketio.on(events.ROOM_JOIN)
    def room_join(data):
        payload = data or {}
        room_code = _room_code(payload)
        name = str(payload.get("playerName") or payload.get("name") or "").strip()

        if not room_code or not _validate_name(name):
            emit(events.ROOM_ERROR, {"error": "invalid_payload", "message": "Room code and name are required"})
            return {"ok": False, "error": "invalid_payload"}

        try:
            player = registry.add_player(room_code, request.sid, name)
            card = registry.get_player_card(room_code, request.sid)
        except BingoError as exc:
            return _reject(exc)

        join_room(room_code)
        emit(events.CARD_ASSIGNED, card, to=request.sid)
        _safe_broadcast_room_state(room_code)
        return {"ok": True, "isHost": player.is_host}

    @socketio.on(events.ROOM_LEAVE)
    def room_leave(data):
        payload = data or {}
        room_code = _room_code(payload)
        if not room_code:
            return {"ok": False, "error": "invalid_room"}

        leave_room(room_code)
        try:
            destroyed = registry.remove_player(room_code, request.sid)
        except BingoError as exc:
            return _reject(exc)

        if not destroyed:
            _safe_broadcast_room_state(room_code)
        return {"ok": True}

    @socketio.on(events.ROOM_GET_STATE)
    def room_get_state(data):
        room_code = _room_code(data or {})
        try:
            state = registry.get_room_snapshot(room_code)
        except BingoError as exc:
            return _reject(exc)
        emit(events.ROOM_STATE, state, to=request.sid)
        return {"ok": True}

    @socketio.on(events.CARD_GET)
    def card_get(data):
        room_code = _room_code(data or {})
        try:
            card = registry.get_player_card(room_code, request.sid)
        except BingoError as exc:
            return _reject(exc)
        emit(events.CARD_ASSIGNED, card, to=request.sid)
        return {"ok": True}

    @socketio.on(events.CONTENT_GENERATE)
    def content_generate(data):
        payload = data or {}
        room_code = _room_code(payload)
        raw_config: Any = payload.get("config")

        try:
            config = registry.defaults.with_payload(raw_config if isinstance(raw_config, dict) else None)
        except ValueError as exc:
            emit(events.ROOM_ERROR, {"error": "invalid_config", "message": str(exc)})
            return {"ok": False, "error": "invalid_config"}

        try:
            registry.generate_content(room_code, config, actor_id=request.sid)
            state = registry.get_room_snapshot(room_code)
        except BingoError as exc:
            return _reject(exc)

        logger.info(f"Content ready in room {room_code}: {state['poolSize']} entries, phase={state['phase']}")
        socketio.emit(events.CONTENT_READY, state, to=room_code)
        return {"ok": True, "phase": state["phase"]}

    @socketio.on(events.GAME_START)
    def game_start(data):
        room_code = _room_code(data or {})
        try:
            registry.start_game(room_code, actor_id=request.sid)
            state = registry.get_room_snapshot(room_code)
        except BingoError as exc:
            return _reject(exc)

        socketio.emit(events.GAME_STARTED, state, to=room_code)
        return {"ok": True}

    @socketio.on(events.GAME_NEXT)
    def game_next(data):
        room_code = _room_code(data or {})
        try:
            already_ended = registry.get_room(room_code).phase == Phase.ENDED
            entry = registry.play_next_entry(room_code, actor_id=request.sid)
            if entry is None:
                if already_ended:
                    return {"ok": True, "ended": True}
                state = registry.get_room_snapshot(room_code)
                socketio.emit(
                    events.GAME_ENDED,
                    {"roomCode": room_code, "message": "Game over!", "prizes": state["prizes"]},
                    to=room_code,
                )
                _safe_broadcast_room_state(room_code)
                return {"ok": True, "ended": True}

            registry.mark_number(room_code, entry.slot_number)
            state = registry.get_room_snapshot(room_code)
        except BingoError as exc:
            return _reject(exc)

        socketio.emit(
            events.GAME_ENTRY,
            {
                "roomCode": room_code,
                "entry": entry.to_public(),
                "index": len(state["calledNumbers"]) - 1,
                "poolSize": state["poolSize"],
            },
            to=room_code,
        )
        _send_cards(room_code)
        _safe_broadcast_room_state(room_code)
        return {"ok": True, "number": entry.slot_number}

    @socketio.on(events.BINGO_CLAIM)
    def bingo_claim(data):
        room_code = _room_code(data or {})
        result = registry.handle_bingo_claim(room_code, request.sid)
        body = result.to_public()
        emit(events.BINGO_RESULT, body, to=request.sid)

        if result.valid:
            socketio.emit(
                events.BINGO_CLAIMED,
                {"roomCode": room_code, "playerName": result.player_name, "prizes": body["prizes"]},
                to=room_code,
            )
            _safe_broadcast_room_state(room_code)
        return body

    @socketio.on("disconnect")
    def on_disconnect(*args):
        for room_code, destroyed in registry.remove_connection(request.sid):
            if not destroyed:
                _safe_broadcast_room_state(room_code)
