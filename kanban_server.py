#!/usr/bin/env python3
"""
Kanban State Server
-------------------
Serves the whole kanban document as JSON, backed by a single state file.
The editor loads it in one GET and overwrites it in one POST.

Usage:
    python kanban_server.py
    python kanban_server.py --port 3000 --state ./data/state.json

API:
    GET  /api/state   → the full document (seeded on first access)
    POST /api/state   → JSON body: full document
                        Returns: { success, savedAt }
    GET  /api/health  → { ok, now }

Environment:
    KANBAN_STATE_FILE  path of the state file (overrides config.yaml)
    KANBAN_CONFIG      path of an alternative config.yaml
"""

import logging
import os
import sys
from pathlib import Path

from flask import Flask, jsonify, request

from kanban_sync.config import Config
from kanban_sync.errors import InvalidRequestBody, PersistFailure
from kanban_sync.schema import utc_now
from kanban_sync.store import DocumentStore

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = Config().max_body_bytes


# ── Config ───────────────────────────────────────────────────────────────────

def get_config() -> Config:
    return Config.load(os.environ.get("KANBAN_CONFIG"))


def get_state_path() -> Path:
    env = os.environ.get("KANBAN_STATE_FILE")
    if env:
        return Path(env)
    return Path(get_config().state_file)


def get_store() -> DocumentStore:
    return DocumentStore(get_state_path())


def parse_state_body(data) -> dict:
    """A save body must be a JSON object (not a primitive, array or null)."""
    if not isinstance(data, dict):
        raise InvalidRequestBody(f"expected an object, got {type(data).__name__}")
    return data


# ── Routes ───────────────────────────────────────────────────────────────────

@app.route("/api/state", methods=["GET"])
def api_state_get():
    return jsonify(get_store().load())


@app.route("/api/state", methods=["POST"])
def api_state_save():
    try:
        state = parse_state_body(request.get_json(force=True, silent=True))
    except InvalidRequestBody as e:
        app.logger.warning(f"Rejected state save: {e}")
        return jsonify({"error": "Invalid state"}), 400

    try:
        saved_at = get_store().save(state)
    except PersistFailure as e:
        app.logger.error(f"State save failed: {e}")
        return jsonify({"error": "Save failed"}), 500
    return jsonify({"success": True, "savedAt": saved_at})


@app.route("/api/health")
def api_health():
    return jsonify({"ok": True, "now": utc_now()})


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    import argparse

    parser = argparse.ArgumentParser(description="Kanban State Server")
    parser.add_argument("--config", help="Path to config.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--state", help="Path to state.json (overrides KANBAN_STATE_FILE)")
    args = parser.parse_args(argv)

    if args.config:
        os.environ["KANBAN_CONFIG"] = args.config
    if args.state:
        os.environ["KANBAN_STATE_FILE"] = args.state

    cfg = get_config()
    host = args.host or cfg.host
    port = args.port or cfg.port
    app.config["MAX_CONTENT_LENGTH"] = cfg.max_body_bytes

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [kanban-server] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    logging.getLogger(__name__).info(
        f"Kanban server listening on http://{host}:{port} (state: {get_state_path()})"
    )
    app.run(host=host, port=port, debug=False, threaded=True)


if __name__ == "__main__":
    main()
