from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    state = current_app.extensions["imposter"]
    return jsonify(
        {
            "ok": True,
            "catalogLoaded": state["catalog"] is not None,
            "rooms": len(state["registry"]),
        }
    )
