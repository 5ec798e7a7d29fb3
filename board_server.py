#!/usr/bin/env python3
"""
Task Board Server
-----------------
JSON API over a TaskBoard backed by the SQLite board store.

Usage:
    python board_server.py --port 3000 --db ~/.local/share/taskboard/board.db

API:
    GET    /api/board                     → rendered board + filters
    GET    /api/columns                   → all columns with visibility
    PUT    /api/tasks                     → replace task list  { tasks: [...] }
    POST   /api/drag/start                → { task_id }
    POST   /api/drag/over                 → { active_id, over_id }
    POST   /api/drag/end                  → { active_id, over_id }
    POST   /api/drag/cancel
    POST   /api/columns                   → { title }
    PATCH  /api/columns/<id>              → { title }
    DELETE /api/columns/<id>
    POST   /api/columns/<id>/visibility   → { visible }
    POST   /api/filters/priority          → { priority, enabled }
    POST   /api/tasks/clear-completed
    GET    /health

Mutating endpoints need an X-API-Key header matching TASKBOARD_API_SECRET.
"""

import hmac
import logging
import os
import sys
from functools import wraps

from flask import Flask, jsonify, request

from taskboard.board import TaskBoard
from taskboard.config import BoardConfig
from taskboard.schema import OccupiedError, Task, ValidationError
from taskboard.store import BoardStore

logger = logging.getLogger("board_server")

app = Flask(__name__)

# ── Auth ─────────────────────────────────────────────────────────────────────

API_SECRET = os.environ.get("TASKBOARD_API_SECRET", "")


def require_api_key(f):
    """Decorator: reject requests without a valid X-API-Key header."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not API_SECRET:
            return jsonify({"error": "API_SECRET not set"}), 503
        provided = request.headers.get("X-API-Key", "").strip()
        if not hmac.compare_digest(provided, API_SECRET):
            code = 401 if not provided else 403
            return jsonify({"error": "Unauthorized"}), code
        return f(*args, **kwargs)
    return decorated


# ── Board ────────────────────────────────────────────────────────────────────

def get_board() -> TaskBoard:
    """The process-wide board, loaded from storage on first use."""
    board = app.config.get("BOARD")
    if board is None:
        cfg = BoardConfig.load(app.config.get("CONFIG_PATH"))
        board = TaskBoard.load(BoardStore(cfg.db_path))
        app.config["BOARD"] = board
    return board


def _json_body() -> dict:
    return request.get_json(force=True, silent=True) or {}


def _transition_response(board: TaskBoard, transition):
    return jsonify({
        "mutation": transition.mutation.value,
        "active_task_id": board.session.active_task_id,
        "board": board.to_dict(),
    })


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({"error": str(e)}), 400


@app.errorhandler(OccupiedError)
def handle_occupied_error(e):
    return jsonify({
        "error": str(e),
        "column_id": e.column_id,
        "task_count": e.task_count,
    }), 409


# ── Routes ───────────────────────────────────────────────────────────────────

@app.route("/api/board")
def api_board():
    return jsonify(get_board().to_dict())


@app.route("/api/columns", methods=["GET"])
def api_columns():
    registry = get_board().registry
    return jsonify({
        "columns": [
            dict(c.to_dict(), visible=registry.is_visible(c.id))
            for c in registry.all_columns()
        ],
    })


@app.route("/api/tasks", methods=["PUT"])
@require_api_key
def api_replace_tasks():
    """Take a full task list from the task API."""
    data = _json_body()
    raw_tasks = data.get("tasks")
    if not isinstance(raw_tasks, list):
        return jsonify({"error": "tasks must be a list"}), 400
    try:
        tasks = [Task.from_dict(t) for t in raw_tasks]
    except (KeyError, TypeError, AttributeError) as e:
        return jsonify({"error": f"Invalid task payload: {e}"}), 400
    board = get_board()
    board.replace_tasks(tasks)
    return jsonify(board.to_dict())


@app.route("/api/tasks/clear-completed", methods=["POST"])
@require_api_key
def api_clear_completed():
    removed = get_board().clear_completed()
    return jsonify({"removed": removed, "count": len(removed)})


# Drag endpoints never fail on unknown ids; they report mutation "none"

@app.route("/api/drag/start", methods=["POST"])
@require_api_key
def api_drag_start():
    board = get_board()
    transition = board.drag_start(str(_json_body().get("task_id", "")))
    return _transition_response(board, transition)


@app.route("/api/drag/over", methods=["POST"])
@require_api_key
def api_drag_over():
    data = _json_body()
    board = get_board()
    transition = board.drag_over(str(data.get("active_id", "")), data.get("over_id"))
    return _transition_response(board, transition)


@app.route("/api/drag/end", methods=["POST"])
@require_api_key
def api_drag_end():
    data = _json_body()
    board = get_board()
    transition = board.drag_end(str(data.get("active_id", "")), data.get("over_id"))
    return _transition_response(board, transition)


@app.route("/api/drag/cancel", methods=["POST"])
@require_api_key
def api_drag_cancel():
    board = get_board()
    return _transition_response(board, board.drag_cancel())


@app.route("/api/columns", methods=["POST"])
@require_api_key
def api_add_column():
    column = get_board().add_custom_column(_json_body().get("title", ""))
    return jsonify({"column": column.to_dict()}), 201


@app.route("/api/columns/<column_id>", methods=["PATCH"])
@require_api_key
def api_rename_column(column_id):
    if not get_board().rename_custom_column(column_id, _json_body().get("title", "")):
        return jsonify({"error": "Custom column not found"}), 404
    return jsonify({"column": get_board().registry.get_custom(column_id).to_dict()})


@app.route("/api/columns/<column_id>", methods=["DELETE"])
@require_api_key
def api_delete_column(column_id):
    if not get_board().delete_custom_column(column_id):
        return jsonify({"error": "Custom column not found"}), 404
    return jsonify({"deleted": column_id})


@app.route("/api/columns/<column_id>/visibility", methods=["POST"])
@require_api_key
def api_column_visibility(column_id):
    visible = bool(_json_body().get("visible", True))
    if not get_board().set_column_visible(column_id, visible):
        return jsonify({"error": f"Not a predefined column: {column_id}"}), 400
    return jsonify({"column_id": column_id, "visible": visible})


@app.route("/api/filters/priority", methods=["POST"])
@require_api_key
def api_priority_filter():
    data = _json_body()
    board = get_board()
    board.set_priority_filter(str(data.get("priority", "")), bool(data.get("enabled", True)))
    return jsonify({"priority_filter": board.priority_filter})


@app.route("/health")
def health():
    board = get_board()
    status = "ok" if board.persist_failures == 0 else "degraded"
    return jsonify({
        "status": status,
        "db": board.store.db_path if board.store else None,
        "persist_failures": board.persist_failures,
    })


# ── Main ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Task Board Server")
    parser.add_argument("--config", help="Path to taskboard.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to board.db (overrides TASKBOARD_DB env var)")
    args = parser.parse_args()

    if args.db:
        os.environ["TASKBOARD_DB"] = args.db

    cfg = BoardConfig.load(args.config)
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s [board_server] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if not API_SECRET:
        logger.warning("TASKBOARD_API_SECRET not set; mutating endpoints will return 503")

    app.config["CONFIG_PATH"] = args.config
    host = args.host or cfg.host
    port = args.port or cfg.port
    logger.info(f"Serving board from {cfg.db_path} on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, threaded=False)
