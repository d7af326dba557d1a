# blueprints/grades/routes.py
from __future__ import annotations

from flask import Blueprint, url_for
from flask_login import login_required

from blueprints.auth.routes import admin_required, current_user_id, staff_required
from blueprints.core.api import created, json_payload, ok, page_options, query_args
from blueprints.core.validation import require_valid
from . import services as svc
from .schemas import GradeChangeIn, GradeIn, GradeQuery

api_bp = Blueprint("grades_api", __name__)

@api_bp.get("/grades")
@login_required
def api_grades_list():
    args = query_args()
    options = page_options(args)
    q = require_valid(GradeQuery, {k: args[k] for k in ("student_id", "course_id") if k in args})
    return ok(svc.list_grades(options, student_id=q.student_id, course_id=q.course_id))

@api_bp.post("/grades")
@staff_required
def api_grades_create():
    data = require_valid(GradeIn, json_payload())
    out = svc.create_grade(data)
    return created(url_for("grades_api.api_grades_get", id=out["id"]), out)

@api_bp.get("/grades/<int:id>")
@login_required
def api_grades_get(id: int):
    return ok(svc.get_grade(id))

@api_bp.put("/grades/<int:id>")
@staff_required
def api_grades_change(id: int):
    data = require_valid(GradeChangeIn, json_payload())
    return ok(svc.change_grade(id, data, user_id=current_user_id()))

@api_bp.delete("/grades/<int:id>")
@admin_required
def api_grades_delete(id: int):
    svc.delete_grade(id)
    return "", 204
