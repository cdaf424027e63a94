"""Status blueprint: health, worker status and notification enqueue."""

from flask import Blueprint, Response, current_app, jsonify

from ..exceptions import StoreNotInitializedError
from ..utils.timeutil import parse_timestamp
from .helpers import api_error, api_success, validate_json
from .validators import NotificationInput

status_bp = Blueprint("status", __name__)


@status_bp.route("/health")
def health() -> Response:
    return jsonify({"status": "ok", "database": current_app.db_manager.initialized})


@status_bp.route("/api/worker/status")
def worker_status() -> Response:
    """Worker state, timers, recent passes and backlog size."""
    worker = current_app.worker
    status = worker.get_status() if worker is not None else {"state": "detached", "running": False}
    try:
        status["pending_notifications"] = current_app.db_manager.notifications.count_pending()
    except StoreNotInitializedError:
        status["pending_notifications"] = None
    return jsonify(status)


@status_bp.route("/api/notifications", methods=["POST"])
def enqueue_notification() -> tuple[Response, int]:
    """Insert a notification for the poller to deliver."""
    body, err = validate_json(NotificationInput)
    if err:
        return err
    try:
        notification = current_app.db_manager.notifications.create(
            body.user_id,
            body.notification_type,
            body.title,
            body.message,
            metadata=body.metadata,
            scheduled_for=parse_timestamp(body.scheduled_for),
        )
    except StoreNotInitializedError:
        return api_error("Database not initialized", 503)
    return api_success({"notification": notification.to_dict()}, 201)
