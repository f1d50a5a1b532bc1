#!/usr/bin/env python3
"""
laneboard gesture server
------------------------
Exposes one board over a small JSON API so a browser-side drag layer can
drive the reconciler and re-render from the returned snapshots.

Usage:
    python -m laneboard.server --config board.yaml
    laneboard-server --host 0.0.0.0 --port 3000

API:
    GET    /api/board              → board snapshot + live drag state
    POST   /api/drag/start         → { active_id }
    POST   /api/drag/move          → { rect, candidates }         → { over_id }
    POST   /api/drag/end           → { over_id, delta: {x, y} }  → { committed, board }
    POST   /api/drag/cancel
    POST   /api/lanes              → { id }
    DELETE /api/lanes/<lane_id>
    GET    /health

Mutating endpoints require an X-API-Key header when LANEBOARD_API_SECRET is set.
"""

import hmac
import logging
import os
import sys
import threading
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request

from .config import BoardConfig
from .events import GesturePayloadError
from .scheduler import Scheduler
from .schema import BoardConfigError

logger = logging.getLogger(__name__)

API_SECRET_ENV = "LANEBOARD_API_SECRET"


def _lane_id_from_path(raw: str, scheduler: Scheduler):
    """Path segments are strings; match integer lane ids too."""
    if scheduler.store.is_lane(raw):
        return raw
    try:
        as_int = int(raw)
    except ValueError:
        return raw
    return as_int if scheduler.store.is_lane(as_int) else raw


def create_app(scheduler: Scheduler, api_secret: Optional[str] = None) -> Flask:
    """Build the Flask app around a single Scheduler."""
    app = Flask(__name__)
    secret = api_secret if api_secret is not None else os.environ.get(API_SECRET_ENV, "")
    # Flask's server is threaded; gestures must still be handled one at a time.
    lock = threading.Lock()

    # ── Auth ─────────────────────────────────────────────────────────────────

    def require_api_key(f):
        """Decorator: reject requests without a valid X-API-Key header."""
        @wraps(f)
        def decorated(*args, **kwargs):
            if not secret:
                return f(*args, **kwargs)
            provided = request.headers.get("X-API-Key", "").strip()
            if not hmac.compare_digest(provided, secret):
                code = 401 if not provided else 403
                return jsonify({"error": "Unauthorized"}), code
            return f(*args, **kwargs)
        return decorated

    @app.errorhandler(GesturePayloadError)
    def bad_payload(e):
        return jsonify({"error": str(e)}), 400

    # ── Routes ───────────────────────────────────────────────────────────────

    @app.route("/api/board")
    def api_board():
        with lock:
            return jsonify(scheduler.to_dict())

    @app.route("/api/drag/start", methods=["POST"])
    @require_api_key
    def api_drag_start():
        data = request.get_json(force=True, silent=True) or {}
        with lock:
            started = scheduler.events.start(data)
            if not started:
                return jsonify({"started": False, "board": scheduler.to_dict()}), 409
            return jsonify({"started": True, "board": scheduler.to_dict()})

    @app.route("/api/drag/move", methods=["POST"])
    @require_api_key
    def api_drag_move():
        data = request.get_json(force=True, silent=True) or {}
        with lock:
            over_id = scheduler.events.move(data)
            return jsonify({"over_id": over_id})

    @app.route("/api/drag/end", methods=["POST"])
    @require_api_key
    def api_drag_end():
        data = request.get_json(force=True, silent=True) or {}
        with lock:
            committed = scheduler.events.end(data)
            return jsonify({"committed": committed, "board": scheduler.to_dict()})

    @app.route("/api/drag/cancel", methods=["POST"])
    @require_api_key
    def api_drag_cancel():
        with lock:
            scheduler.events.cancel()
            return jsonify({"board": scheduler.to_dict()})

    @app.route("/api/lanes", methods=["POST"])
    @require_api_key
    def api_add_lane():
        data = request.get_json(force=True, silent=True) or {}
        lane_id = data.get("id")
        if lane_id is None or lane_id == "":
            return jsonify({"error": "id is required"}), 400
        with lock:
            if not scheduler.add_lane(lane_id):
                return jsonify({"error": f"Cannot add lane {lane_id!r}"}), 409
            return jsonify({"board": scheduler.to_dict()}), 201

    @app.route("/api/lanes/<lane_id>", methods=["DELETE"])
    @require_api_key
    def api_remove_lane(lane_id):
        with lock:
            resolved = _lane_id_from_path(lane_id, scheduler)
            if not scheduler.store.is_lane(resolved):
                return jsonify({"error": "Lane not found"}), 404
            if not scheduler.remove_lane(resolved):
                return jsonify({"error": "Lane cannot be removed during a drag"}), 409
            return jsonify({"board": scheduler.to_dict()})

    @app.route("/health")
    def health():
        with lock:
            snapshot = scheduler.snapshot()
            return jsonify({
                "status": "ok",
                "lanes": len(snapshot.lanes),
                "items": len(snapshot.items),
                "dragging": scheduler.reconciler.is_dragging,
            })

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None) -> int:
    import argparse

    parser = argparse.ArgumentParser(description="laneboard gesture server")
    parser.add_argument("--host", default="127.0.0.1",
                        help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int, default=3000)
    parser.add_argument("--config", help="Path to board.yaml (overrides LANEBOARD_CONFIG)")
    parser.add_argument("--debug", action="store_true", help="Log discarded drops")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    try:
        cfg = BoardConfig.load(args.config)
        scheduler = cfg.build_scheduler()
    except BoardConfigError as e:
        logger.error(f"Invalid board configuration: {e}")
        return 2

    snapshot = scheduler.snapshot()
    print(f"""
╔═══════════════════════════════════════╗
║  laneboard gesture server             ║
╠═══════════════════════════════════════╣
║  URL:   http://{args.host}:{args.port:<19}║
║  Lanes: {len(snapshot.lanes):<30}║
║  Items: {len(snapshot.items):<30}║
║  Step:  {snapshot.step_size:<30}║
╚═══════════════════════════════════════╝
""")

    app = create_app(scheduler)
    app.run(host=args.host, port=args.port, debug=False, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
