from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify

from ..game.errors import RoomAlreadyExists, RoomNotFound
from ..game.registry import generate_room_code

logger = logging.getLogger(__name__)

bp = Blueprint("rooms", __name__)


@bp.post("/rooms")
def create_room():
    registry = current_app.extensions["musicbingo"]
    length = current_app.config.get("ROOM_CODE_LENGTH", 3)
    attempts = current_app.config.get("ROOM_CODE_ATTEMPTS", 50)

    for _ in range(attempts):
        code = generate_room_code(length, registry.rng)
        try:
            registry.create_room(code)
        except RoomAlreadyExists:
            logger.warning(f"Room code collision on {code}, regenerating")
            continue
        return jsonify({"roomCode": code, "success": True})

    return jsonify({"error": "room_codes_exhausted"}), 503


@bp.get("/rooms/<code>")
def get_room(code: str):
    registry = current_app.extensions["musicbingo"]
    try:
        return jsonify(registry.get_room_snapshot(code.upper()))
    except RoomNotFound:
        return jsonify({"error": "room_not_found"}), 404
