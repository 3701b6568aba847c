"""Flask JSON API for single-player, in-memory game sessions."""

import argparse
import random
import threading
import uuid
from collections import OrderedDict
from typing import Optional

from flask import Flask, jsonify, request

from .algorithms import ALL_STRATEGY_CLASSES, get_strategy_by_name, random_strategy
from .engine import InvalidMoveKind, Move
from .session import TARGET_SCORE, GameOver, Session

app = Flask(__name__)
app.config.setdefault("MAX_SESSIONS", 1000)

# session id -> (Session, its lock), least recently used first;
# lives only as long as the process
_sessions: "OrderedDict[str, tuple[Session, threading.Lock]]" = OrderedDict()
_sessions_lock = threading.Lock()


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _json_body() -> Optional[dict]:
    """The request's JSON object, ``{}`` when absent, None when not an object."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def register_session(session: Session, session_id: Optional[str] = None) -> str:
    """Store ``session``, evicting the least recently used past the cap."""
    session_id = session_id or uuid.uuid4().hex
    with _sessions_lock:
        _sessions[session_id] = (session, threading.Lock())
        _sessions.move_to_end(session_id)
        while len(_sessions) > app.config["MAX_SESSIONS"]:
            evicted, _ = _sessions.popitem(last=False)
            app.logger.info("Session %s evicted", evicted)
    return session_id


def _get_session(session_id: str):
    with _sessions_lock:
        found = _sessions.get(session_id)
        if found is not None:
            _sessions.move_to_end(session_id)
        return found


def _state(session_id: str, session: Session, history: bool = False) -> dict:
    state = {"id": session_id, **session.to_dict()}
    if history:
        state["history"] = [e.to_dict() for e in session.ledger]
    return state


@app.route("/api/strategies")
def api_strategies():
    return jsonify([{"name": cls.name, "kind": cls.kind.value} for cls in ALL_STRATEGY_CLASSES])


@app.route("/api/sessions", methods=["POST"])
def api_create_session():
    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object", 400)
    opponent = data.get("opponent")
    seed = data.get("seed", None)
    target_score = data.get("target_score", TARGET_SCORE)
    name = data.get("name", "Human")

    if isinstance(target_score, bool) or not isinstance(target_score, int):
        return _error(f"target_score must be an integer, got {target_score!r}", 400)
    try:
        rng = random.Random(seed) if seed is not None else None
        strategy = get_strategy_by_name(str(opponent), rng=rng) if opponent else random_strategy(rng)
        session = Session(strategy, target_score=target_score, human_name=str(name))
    except (TypeError, ValueError) as e:
        return _error(str(e), 400)

    session.start()
    session_id = register_session(session)
    app.logger.info("Session %s started against %s", session_id, strategy.name)

    state = _state(session_id, session)
    state["welcome"] = strategy.welcome_message
    return jsonify(state), 201


@app.route("/api/sessions/<session_id>", methods=["GET"])
def api_get_session(session_id):
    found = _get_session(session_id)
    if found is None:
        return _error(f"Unknown session: {session_id}", 404)
    session, lock = found
    with lock:
        return jsonify(_state(session_id, session, history=True))


@app.route("/api/sessions/<session_id>", methods=["DELETE"])
def api_delete_session(session_id):
    with _sessions_lock:
        removed = _sessions.pop(session_id, None)
    if removed is None:
        return _error(f"Unknown session: {session_id}", 404)
    app.logger.info("Session %s deleted", session_id)
    return "", 204


@app.route("/api/sessions/<session_id>/moves", methods=["POST"])
def api_play_move(session_id):
    found = _get_session(session_id)
    if found is None:
        return _error(f"Unknown session: {session_id}", 404)

    data = _json_body()
    if data is None:
        return _error("Request body must be a JSON object", 400)
    try:
        human_move = Move.from_symbol(data.get("move"))
    except InvalidMoveKind as e:
        return _error(str(e), 400)

    session, lock = found
    with lock:
        try:
            entry = session.play_round(human_move)
        except GameOver as e:
            return _error(str(e), 409)
        state = _state(session_id, session)

    return jsonify({"round": entry.to_dict(), "session": state})


@app.route("/api/sessions/<session_id>/reset", methods=["POST"])
def api_reset_session(session_id):
    found = _get_session(session_id)
    if found is None:
        return _error(f"Unknown session: {session_id}", 404)
    session, lock = found
    with lock:
        session.start()
        return jsonify(_state(session_id, session, history=True))


def main(argv=None):
    parser = argparse.ArgumentParser(prog="rpsls_playground.web")
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--max-sessions", type=int, default=app.config["MAX_SESSIONS"],
                        help="Sessions kept in memory before the oldest is dropped")
    args = parser.parse_args(argv)
    app.config["MAX_SESSIONS"] = args.max_sessions

    print("\n🎮 RPSLS Playground API")
    print(f"  → http://localhost:{args.port}\n")
    app.run(debug=args.debug, port=args.port)


if __name__ == "__main__":
    main()
