# blueprints/grades_history/routes.py
from __future__ import annotations

from flask import Blueprint, url_for
from flask_login import login_required

from blueprints.auth.routes import staff_required
from blueprints.core.api import created, json_payload, ok, page_options, query_args
from blueprints.core.validation import require_valid
from . import services as svc
from .schemas import GradeHistoryIn, GradeHistoryQuery

api_bp = Blueprint("grades_history_api", __name__)

@api_bp.post("/grades-history")
@staff_required
def api_grades_history_create():
    data = require_valid(GradeHistoryIn, json_payload())
    out = svc.record_grade_change(data)
    return created(url_for("grades_history_api.api_grades_history_get", id=out["id"]), out)

@api_bp.get("/grades-history")
@login_required
def api_grades_history_list():
    args = query_args()
    options = page_options(args)
    q = require_valid(GradeHistoryQuery, {k: args[k] for k in ("student_id", "course_id") if k in args})
    return ok(svc.list_entries(options, student_id=q.student_id, course_id=q.course_id))

@api_bp.get("/grades-history/<int:id>")
@login_required
def api_grades_history_get(id: int):
    return ok(svc.get_entry(id))
