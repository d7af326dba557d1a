# blueprints/auth/routes.py
from __future__ import annotations
import time
from functools import wraps
from typing import Callable, Optional

from flask import Blueprint, request, jsonify, abort, current_app
from flask_login import login_user, logout_user, login_required, current_user

from extensions import db, login_manager
from models import Role, User
from repositories import UserRepository

api_bp = Blueprint("auth_api", __name__)

# ---- безопасные значения по умолчанию
DEFAULT_RL_MAX = 5
DEFAULT_RL_WIN = 300  # 5 минут

@login_manager.user_loader
def load_user(uid: str) -> Optional[User]:
    try:
        return db.session.get(User, int(uid))
    except (TypeError, ValueError):
        return None

@login_manager.unauthorized_handler
def _unauth():
    return jsonify({"error": "unauthorized", "message": "Login required"}), 401

def current_user_id() -> int | None:
    """id пользователя, выполняющего запрос; None для анонимного."""
    if getattr(current_user, "is_authenticated", False):
        return current_user.id
    return None

# ---------- rate limit (только неудачные попытки) ----------
def _attempts() -> dict[str, list[float]]:
    return current_app.extensions.setdefault("login_attempts", {})

def _rl_key(email: str) -> str:
    ip = request.headers.get("X-Forwarded-For", request.remote_addr or "0.0.0.0").split(",")[0].strip()
    return f"{ip}|{(email or '').lower()}"

def _rl_bucket(email: str) -> list[float]:
    win = current_app.config.get("AUTH_RL_WINDOW", DEFAULT_RL_WIN)
    bucket = _attempts().setdefault(_rl_key(email), [])
    # purge старых
    cutoff = time.time() - win
    while bucket and bucket[0] < cutoff:
        bucket.pop(0)
    return bucket

def _rl_blocked(email: str) -> bool:
    mx = current_app.config.get("AUTH_RL_MAX", DEFAULT_RL_MAX)
    return len(_rl_bucket(email)) >= mx

def _rl_hit(email: str) -> None:
    _rl_bucket(email).append(time.time())

# ---------- декораторы ролей ----------
def admin_required(fn: Callable):
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        if getattr(current_user, "role", None) != Role.ADMIN.value:
            abort(403)
        return fn(*args, **kwargs)
    return wrapper

def staff_required(fn: Callable):
    @wraps(fn)
    @login_required
    def wrapper(*args, **kwargs):
        # преподаватель или админ
        if getattr(current_user, "role", None) not in (Role.TEACHER.value, Role.ADMIN.value):
            abort(403)
        return fn(*args, **kwargs)
    return wrapper

def _user_json(user: User) -> dict:
    return {"id": user.id, "email": user.email, "role": user.role}

# ---------- API ----------
@api_bp.post("/auth/login")
def api_login():
    payload = request.get_json(silent=True) or request.form or {}
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password") or ""

    if not email or not password:
        return jsonify({"error": "missing_credentials"}), 400

    if _rl_blocked(email):
        return jsonify({"error": "too_many_attempts"}), 429

    user: Optional[User] = UserRepository().get_by_email(email)
    if not user or not user.check_password(password):
        _rl_hit(email)
        return jsonify({"error": "invalid_credentials"}), 401

    if not user.is_active:
        return jsonify({"error": "inactive"}), 403

    login_user(user, remember=True)
    return jsonify({"ok": True, "user": _user_json(user)})

@api_bp.post("/auth/logout")
@login_required
def api_logout():
    logout_user()
    return jsonify({"ok": True})

@api_bp.get("/auth/me")
@login_required
def api_me():
    return jsonify(_user_json(current_user))
