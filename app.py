"""
Touchline: Flask JSON API.
Entry point for a UI: start a new world, read the current snapshot and
dispatch intents to the season state machine.
"""
import logging
import os
import threading

from flask import Flask, jsonify, request

from generation import WorldConfig, generate_world
from simulation import ConfigurationError, GameSession, intent_from_dict

logging.basicConfig(
    level=os.environ.get("TOUCHLINE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# One world per process; replaced wholesale by /api/new-game
_session: GameSession | None = None
_session_lock = threading.Lock()


def _current_session() -> GameSession | None:
    with _session_lock:
        return _session


def _no_game():
    return jsonify({"error": "No game in progress"}), 404


@app.route("/api/new-game", methods=["POST"])
def new_game():
    """Generate a world. Optional JSON body overrides the environment config."""
    global _session
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        return jsonify({"error": "Body must be a JSON object"}), 400
    try:
        config = WorldConfig.from_env()
        for key in ("num_divisions", "clubs_per_division", "squad_size_min", "squad_size_max", "promotion_spots"):
            if key in body:
                setattr(config, key, int(body[key]))
        if "seed" in body:
            config.seed = body["seed"]
        state = generate_world(config)
    except (ConfigurationError, TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400
    with _session_lock:
        _session = GameSession(state)
    logger.info("new game started with seed %s", state.seed)
    return jsonify(state.to_dict()), 201


@app.route("/api/state")
def api_state():
    session = _current_session()
    if session is None:
        return _no_game()
    return jsonify(session.get_state().to_dict())


@app.route("/api/dispatch", methods=["POST"])
def api_dispatch():
    """Apply one intent: {"type": "...", "payload": {...}}. Returns the new snapshot."""
    session = _current_session()
    if session is None:
        return _no_game()
    data = request.get_json(silent=True)
    if data is None:
        return jsonify({"error": "Body must be JSON"}), 400
    try:
        intent = intent_from_dict(data)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400
    state = session.dispatch(intent)
    return jsonify(state.to_dict())


@app.route("/api/divisions/<int:division_id>/table")
def api_division_table(division_id: int):
    session = _current_session()
    if session is None:
        return _no_game()
    state = session.get_state()
    division = state.divisions.get(division_id)
    if division is None:
        return jsonify({"error": "Division not found"}), 404
    rows = []
    for pos, entry in enumerate(state.league_tables.get(division_id, []), start=1):
        row = entry.to_dict()
        row["position"] = pos
        row["club_name"] = state.clubs[entry.club_id].name
        rows.append(row)
    return jsonify({"division": division.to_dict(), "season": state.season, "table": rows})


@app.route("/api/clubs/<int:club_id>/squad")
def api_club_squad(club_id: int):
    session = _current_session()
    if session is None:
        return _no_game()
    state = session.get_state()
    club = state.clubs.get(club_id)
    if club is None:
        return jsonify({"error": "Club not found"}), 404
    return jsonify({
        "club": club.to_dict(),
        "players": [p.to_dict() for p in state.squad(club_id)],
        "staff": [state.staff[sid].to_dict() for sid in club.staff_ids.values() if sid in state.staff],
    })


if __name__ == "__main__":
    app.run(debug=True, port=5000)
