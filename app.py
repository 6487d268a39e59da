import os
import logging
import traceback
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify, request

from database import db
from database.models import Match as DBMatch
from engine.errors import ScoringError
from routes.match_routes import register_match_routes
from utils.helpers import PROJECT_ROOT, load_config


def _setup_logging(app, config):
    app_config = config.get("app", {}) or {}
    log_dir = app_config.get("log_dir") or "logs"
    if not os.path.isabs(log_dir):
        log_dir = os.path.join(PROJECT_ROOT, log_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, "execution.log")

    level_name = str(app_config.get("log_level") or "DEBUG").upper()
    level = getattr(logging, level_name, logging.DEBUG)

    # Clear existing handlers to avoid duplicates
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    # File handler for persistent logging
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)

    # Console handler for terminal visibility
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=[file_handler, console_handler])

    app.logger = logging.getLogger("CreaseScore")
    app.logger.setLevel(level)


def create_app():
    # --- Flask setup ---
    app = Flask(__name__)
    config = load_config()

    # --- Secret key setup ---
    secret = (config.get("app", {}) or {}).get("secret_key")
    if not secret or not isinstance(secret, str):
        secret = os.getenv("FLASK_SECRET_KEY", None)
        if not secret:
            secret = os.urandom(24).hex()
            print("[WARN] Using random Flask SECRET_KEY; sessions won't persist across restarts")
    app.config["SECRET_KEY"] = secret

    # --- Logging setup (logs to file + terminal) ---
    _setup_logging(app, config)

    # --- Database setup ---
    db_uri = os.getenv("CREASESCORE_DB_URI") or (config.get("database", {}) or {}).get("uri")
    if not db_uri:
        db_uri = f"sqlite:///{os.path.join(PROJECT_ROOT, 'creasescore.db')}"
    app.config["SQLALCHEMY_DATABASE_URI"] = db_uri
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    db.init_app(app)

    with app.app_context():
        db.create_all()

    match_defaults = config.get("match", {}) or {}

    # --- Request logging ---
    @app.before_request
    def log_request():
        app.logger.info(f"{request.remote_addr} {request.method} {request.path}")

    # --- Error handling ---
    @app.errorhandler(ScoringError)
    def handle_scoring_error(e):
        app.logger.warning(f"[Scoring] {request.method} {request.path} rejected: {e.__class__.__name__}: {e}")
        payload = e.to_dict()
        payload["retryable"] = e.retryable
        return jsonify(payload), e.status_code

    @app.errorhandler(500)
    def handle_internal_error(e):
        app.logger.error(f"[Server] Unhandled error on {request.path}: {e}", exc_info=True)
        return jsonify({"error": "InternalError", "message": "Internal server error"}), 500

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"}), 200

    register_match_routes(
        app,
        db=db,
        DBMatch=DBMatch,
        match_defaults=match_defaults,
    )

    app.logger.info(f"CreaseScore ready (database: {db_uri.split('://', 1)[0]})")
    return app


# ────── Run Server ──────
if __name__ == "__main__":
    try:
        app = create_app()

        HOST = "127.0.0.1"
        PORT = 7860

        print("✅ CreaseScore is up and running!")
        print(f"🌐 API at: http://{HOST}:{PORT}/api/matches")
        print("🔐 Press Ctrl+C to stop the server.\n")

        app.run(host=HOST, port=PORT, debug=True, use_reloader=False)

    except Exception:
        print("❌ Failed to start CreaseScore:")
        traceback.print_exc()
