from __future__ import annotations
import json, logging
from datetime import datetime, UTC

from flask import g, jsonify, request
from flask_wtf.csrf import CSRFError, generate_csrf
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers.response import Response

from errors import ServiceError
from extensions import db
from . import bp, api_bp

log = logging.getLogger(__name__)

_EXTRA_KEYS = ("event", "path", "method", "status", "duration_ms", "user_id", "entity_id", "code")

class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key in _EXTRA_KEYS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)

def _setup_structured_logging(app):
    root = logging.getLogger()
    has_json = any(
        isinstance(h, logging.StreamHandler)
        and isinstance(getattr(h, "formatter", None), JSONFormatter)
        for h in root.handlers
    )
    if not has_json:
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
    root.setLevel(app.config.get("LOG_LEVEL", "INFO"))

def _is_api() -> bool:
    return request.path.startswith("/api/")

# ---------- errors ----------
@bp.app_errorhandler(ServiceError)
def _service_error(e: ServiceError):
    db.session.rollback()
    log.info("request failed", extra={"event": "service_error", "code": e.code, "status": e.status})
    return jsonify(e.to_dict()), e.status

@bp.app_errorhandler(IntegrityError)
def _integrity_error(e: IntegrityError):
    db.session.rollback()
    # Нормализуем в 409 CONFLICT
    return jsonify({"error": "unique_constraint", "message": "Unique constraint violation"}), 409

@bp.app_errorhandler(CSRFError)
def _csrf_error(e: CSRFError):
    return jsonify({"error": "csrf_failed", "message": e.description}), 400

@bp.app_errorhandler(HTTPException)
def _http_error(e: HTTPException):
    if not _is_api() or e.code is None or e.code < 400:
        return e
    code = (e.name or "error").lower().replace(" ", "_")
    return jsonify({"error": code, "message": e.description}), e.code

# ---------- request log ----------
@bp.before_app_request
def _start_timer():
    g._req_start = datetime.now(UTC)

@bp.after_app_request
def _log_request(response: Response):
    try:
        duration_ms = int((datetime.now(UTC) - g._req_start).total_seconds() * 1000)
    except AttributeError:
        duration_ms = None
    extra = {
        "event": "http_request",
        "path": request.path,
        "method": request.method,
        "status": response.status_code,
        "duration_ms": duration_ms,
    }
    log.info("request handled", extra=extra)
    return response

@bp.record_once
def _on_register(state):
    _setup_structured_logging(state.app)

# ---------- endpoints ----------
@api_bp.get("/csrf")
def get_csrf():
    token = generate_csrf()
    resp = jsonify({"csrf": token})
    resp.set_cookie("csrf_token", token, samesite="Lax")
    return resp

@bp.get("/health")
def health():
    return jsonify({
        "status": "ok",
        "ts": datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z"),
    })
