"""
Status HTTP surface for the notification worker
"""
import logging
import threading
from typing import Optional

from flask import Flask
from werkzeug.serving import make_server

from .errors import register_error_handlers
from .routes import status_bp

logger = logging.getLogger(__name__)


def create_app(db_manager, worker=None) -> Flask:
    """Build the Flask app exposing health and worker status."""
    app = Flask(__name__)
    app.db_manager = db_manager
    app.worker = worker
    app.register_blueprint(status_bp)
    register_error_handlers(app)
    return app


class StatusServer:
    """Serves the status app from a daemon thread next to the worker's event loop."""

    def __init__(self, app: Flask, host: str, port: int):
        self._server = make_server(host, port, app, threaded=True)
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self._server.server_port

    def start(self) -> None:
        self._thread = threading.Thread(target=self._server.serve_forever, name="status-http", daemon=True)
        self._thread.start()
        logger.info(f"Status endpoint listening on port {self.port}")

    def stop(self) -> None:
        self._server.shutdown()
        if self._thread is not None:
            self._thread.join(timeout=5)
