"""HTTP entrypoint exposing search, prospect tracking and outreach."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from leadscout.core.config import Settings, get_settings
from leadscout.core.pipeline import MAX_RADIUS_KM, MIN_RADIUS_KM, IngestionPipeline, build_pipeline
from leadscout.core.store import ProspectStore, create_store
from leadscout.etl.export import businesses_to_csv
from leadscout.models import ContactStatus
from leadscout.outreach.dispatcher import OutreachDispatcher, build_dispatcher
from leadscout.outreach.notifications import send_interest_notification
from leadscout.outreach.templates import template_keys

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

api = Blueprint("api", __name__)


@dataclass
class Services:
    settings: Settings
    store: ProspectStore
    pipeline: IngestionPipeline
    dispatcher: OutreachDispatcher


class RequestError(ValueError):
    """Malformed request body or query string (400)."""


def _services() -> Services:
    return current_app.extensions["leadscout"]


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise RequestError("request body must be a JSON object")
    return payload


def _require_str(payload: Dict[str, Any], name: str) -> str:
    value = payload.get(name)
    if not isinstance(value, str) or not value.strip():
        raise RequestError(f"{name} is required")
    return value.strip()


def _optional_str(payload: Dict[str, Any], name: str) -> Optional[str]:
    value = payload.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise RequestError(f"{name} must be a string")
    return value


def _parse_radius(raw: Any) -> int:
    if isinstance(raw, bool) or raw is None:
        raise RequestError("radius is required")
    try:
        radius = int(raw)
    except (TypeError, ValueError):
        raise RequestError("radius must be an integer") from None
    if isinstance(raw, float) and raw != radius:
        raise RequestError("radius must be an integer")
    if not MIN_RADIUS_KM <= radius <= MAX_RADIUS_KM:
        raise RequestError(f"radius must be between {MIN_RADIUS_KM} and {MAX_RADIUS_KM}")
    return radius


def _parse_status(raw: Any) -> str:
    if raw not in ContactStatus.ALL:
        raise RequestError(f"contactStatus must be one of: {', '.join(ContactStatus.ALL)}")
    return raw


@api.errorhandler(RequestError)
def handle_request_error(exc: RequestError):
    return _error(str(exc), 400)


@api.errorhandler(Exception)
def handle_unexpected(exc: Exception):
    if isinstance(exc, HTTPException):
        return exc
    logger.exception("Unhandled error on %s %s: %s", request.method, request.path, exc)
    return _error("Internal server error", 500)


@api.post("/search")
def search() -> Any:
    """Required JSON fields: location, radius (1..50 km). Optional: category."""
    payload = _json_body()
    location = _require_str(payload, "location")
    radius = _parse_radius(payload.get("radius"))
    category = (_optional_str(payload, "category") or "").strip()
    if category.lower() == "all":
        category = ""

    result = _services().pipeline.ingest(location, category or None, radius)
    logger.info("Search %s: %d found, %d without website", location, result.total_found, result.no_website_count)
    return jsonify(result.to_dict()), 200


@api.get("/businesses")
def list_businesses() -> Any:
    store = _services().store
    if request.args.get("noWebsiteOnly") == "true":
        businesses = store.list_without_website()
    else:
        contact_status = request.args.get("contactStatus") or None
        if contact_status is not None:
            _parse_status(contact_status)
        businesses = store.list(contact_status=contact_status, category=request.args.get("category") or None)
    return jsonify([business.to_dict() for business in businesses]), 200


@api.get("/businesses/<int:business_id>")
def get_business(business_id: int) -> Any:
    business = _services().store.get(business_id)
    if business is None:
        return _error("Business not found", 404)
    return jsonify(business.to_dict()), 200


@api.patch("/businesses/<int:business_id>/contact")
def update_contact(business_id: int) -> Any:
    payload = _json_body()
    patch: Dict[str, Any] = {"contact_status": _parse_status(payload.get("contactStatus"))}
    if "notes" in payload:
        patch["notes"] = _optional_str(payload, "notes") or None

    services = _services()
    business = services.store.update(business_id, patch)
    if business is None:
        return _error("Business not found", 404)

    notification_email = payload.get("notificationEmail")
    if business.contact_status == ContactStatus.INTERESTED and notification_email:
        send_interest_notification(services.settings, business, str(notification_email))

    return jsonify(business.to_dict()), 200


@api.get("/stats")
def stats() -> Any:
    return jsonify(_services().store.stats()), 200


@api.get("/search-history")
def search_history() -> Any:
    return jsonify([entry.to_dict() for entry in _services().store.search_history()]), 200


@api.get("/templates")
def templates() -> Any:
    return jsonify({"templates": list(template_keys())}), 200


@api.post("/send-bulk-email")
def send_bulk_email() -> Any:
    """Multi-channel outreach to the given businesses, one at a time."""
    payload = _json_body()
    business_ids = payload.get("businessIds")
    if not isinstance(business_ids, list) or not all(
        isinstance(item, int) and not isinstance(item, bool) for item in business_ids
    ):
        raise RequestError("businessIds must be a list of integers")
    template = payload.get("template")
    if not isinstance(template, str):
        raise RequestError("template is required")
    subject = _require_str(payload, "subject")
    message = _require_str(payload, "message")
    sender_email = _require_str(payload, "senderEmail")
    if not EMAIL_REGEX.match(sender_email):
        raise RequestError("senderEmail must be a valid email address")
    sender_name = _require_str(payload, "senderName")

    services = _services()
    if not any(services.store.get(business_id) for business_id in business_ids):
        return _error("No valid businesses found for the provided IDs", 400)

    report = services.dispatcher.dispatch(
        business_ids,
        template,
        sender_name=sender_name,
        sender_email=sender_email,
        subject=subject,
        message=message,
    )
    return jsonify(report.to_dict()), 200


@api.get("/export")
def export_csv() -> Any:
    content = businesses_to_csv(_services().store.list_without_website())
    return Response(
        content,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=business-leads.csv"},
    )


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[ProspectStore] = None,
    pipeline: Optional[IngestionPipeline] = None,
    dispatcher: Optional[OutreachDispatcher] = None,
) -> Flask:
    """Build the Flask app; collaborators not supplied are built from ``settings``."""
    settings = settings or get_settings()
    store = store or create_store(settings)
    services = Services(
        settings=settings,
        store=store,
        pipeline=pipeline or build_pipeline(settings, store),
        dispatcher=dispatcher or build_dispatcher(settings, store),
    )

    app = Flask(__name__)
    app.extensions["leadscout"] = services
    app.register_blueprint(api, url_prefix=settings.api_prefix or None)

    @app.get("/")
    def root() -> Any:
        return "ok", 200

    @app.get("/healthz")
    def healthcheck() -> Any:
        return (
            jsonify(
                {
                    "status": "ok",
                    "store": type(services.store).__name__,
                    "sources": [source.name for source in services.pipeline.sources],
                }
            ),
            200,
        )

    return app


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    settings = get_settings()
    app = create_app(settings)
    logger.info("[BOOT] Binding on 0.0.0.0:%d", settings.port)
    app.run(host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
