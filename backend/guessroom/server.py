from __future__ import annotations

import logging
import sys

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .errors import GameError
from .game.questions import SampleQuestionProvider, build_question_provider
from .game.service import GameService
from .game.store import MemoryRoomStore, RoomStore
from .realtime.handlers import make_room_broadcaster, register_socketio_handlers
from .routes.health import bp as health_bp
from .routes.questions import bp as questions_bp
from .routes.rooms import bp as rooms_bp


def _pick_async_mode(configured: str) -> str:
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config_class=Config, store: RoomStore | None = None) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)
    logging.getLogger(__name__.rsplit(".", 1)[0]).setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_pick_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", "")),
    )

    service = GameService(
        store=store or MemoryRoomStore(),
        questions=build_question_provider(app.config),
        fallback=SampleQuestionProvider(),
        notify=make_room_broadcaster(socketio),
        fallback_on_error=app.config.get("QUESTION_FALLBACK_ON_ERROR", True),
        code_length=int(app.config.get("ROOM_CODE_LENGTH", 6)),
    )
    app.extensions["guessroom"] = service

    @app.errorhandler(GameError)
    def handle_game_error(e: GameError):
        app.logger.info(f"[command-failed] error={e.code} message={e.message}")
        return jsonify(e.to_dict()), e.status

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(questions_bp, url_prefix="/api")

    register_socketio_handlers(socketio, service)

    return app, socketio
