from __future__ import annotations
import logging
from typing import Any

from flask import url_for
from flask_login import login_required
from sqlalchemy import or_

from . import bp
from .schemas import CourseIn, CourseOut, GroupIn, GroupOut, StudentIn, StudentOut
from blueprints.auth.routes import admin_required
from blueprints.core.api import created, json_payload, ok, page_options, paginate, query_args
from blueprints.core.validation import require_valid
from errors import ConflictError, NotFoundError
from extensions import db
from models import Course, Group, Student
from repositories import CourseRepository, GroupRepository, StudentRepository, UserRepository

log = logging.getLogger(__name__)

# ----------------------- Helpers -----------------------
def _search_filter(model, q: str):
    # Поля для поиска
    fields_map = {
        Group: [Group.name],
        Course: [Course.name],
        Student: [Student.edebo_id, Student.order_number],
    }
    cols = fields_map.get(model, [])
    term = str(q).strip()
    conds = [col.like(f"%{term}%") for col in cols]
    return or_(*conds) if conds else None

def _get_or_404(repo, obj_id: int, label: str):
    obj = repo.get(obj_id)
    if obj is None:
        raise NotFoundError(f"{label} with id: {obj_id} not found")
    return obj

def _list(repo, model, order_col, serializer):
    args = query_args()
    options = page_options(args)
    s = repo.query()
    q = args.get("q")
    if q:
        cond = _search_filter(model, q)
        if cond is not None:
            s = s.filter(cond)
    return ok(paginate(s.order_by(order_col.asc()), options, serializer))

def _ensure_group_name_free(name: str, exclude_id: int | None = None) -> None:
    q = GroupRepository().query().filter(Group.name == name)
    if exclude_id is not None:
        q = q.filter(Group.id != exclude_id)
    if q.first() is not None:
        raise ConflictError(f"Group with name '{name}' already exists")

def _group_out(g: Group) -> dict[str, Any]:
    return GroupOut.model_validate(g).model_dump(mode="json")

def _course_out(c: Course) -> dict[str, Any]:
    return CourseOut.model_validate(c).model_dump(mode="json")

def _student_out(s: Student) -> dict[str, Any]:
    out = StudentOut.model_validate(s).model_copy(update={"course_ids": [c.id for c in s.courses]})
    return out.model_dump(mode="json")

# ---- Groups ----
@bp.get("/groups")
@login_required
def api_groups_list():
    return _list(GroupRepository(), Group, Group.name, _group_out)

@bp.post("/groups")
@admin_required
def api_groups_create():
    parsed = require_valid(GroupIn, json_payload())
    _ensure_group_name_free(parsed.name)
    g = GroupRepository().add(Group(name=parsed.name))
    db.session.commit()
    return created(url_for("directory.api_groups_get", id=g.id), _group_out(g))

@bp.get("/groups/<int:id>")
@login_required
def api_groups_get(id: int):
    return ok(_group_out(_get_or_404(GroupRepository(), id, "Group")))

@bp.put("/groups/<int:id>")
@admin_required
def api_groups_update(id: int):
    parsed = require_valid(GroupIn, json_payload())
    g = _get_or_404(GroupRepository(), id, "Group")
    _ensure_group_name_free(parsed.name, exclude_id=g.id)
    g.name = parsed.name
    db.session.commit()
    return ok(_group_out(g))

@bp.delete("/groups/<int:id>")
@admin_required
def api_groups_delete(id: int):
    repo = GroupRepository()
    g = _get_or_404(repo, id, "Group")
    repo.delete(g)
    db.session.commit()
    log.info("group deleted", extra={"event": "group_deleted", "entity_id": id})
    return "", 204

# ---- Courses ----
@bp.get("/courses")
@login_required
def api_courses_list():
    return _list(CourseRepository(), Course, Course.name, _course_out)

@bp.post("/courses")
@admin_required
def api_courses_create():
    parsed = require_valid(CourseIn, json_payload())
    c = CourseRepository().add(Course(name=parsed.name))
    db.session.commit()
    return created(url_for("directory.api_courses_get", id=c.id), _course_out(c))

@bp.get("/courses/<int:id>")
@login_required
def api_courses_get(id: int):
    return ok(_course_out(_get_or_404(CourseRepository(), id, "Course")))

@bp.put("/courses/<int:id>")
@admin_required
def api_courses_update(id: int):
    parsed = require_valid(CourseIn, json_payload())
    c = _get_or_404(CourseRepository(), id, "Course")
    c.name = parsed.name
    db.session.commit()
    return ok(_course_out(c))

@bp.delete("/courses/<int:id>")
@admin_required
def api_courses_delete(id: int):
    repo = CourseRepository()
    repo.delete(_get_or_404(repo, id, "Course"))
    db.session.commit()
    return "", 204

# ---- Students ----
def _apply_student(s: Student, parsed: StudentIn) -> Student:
    _get_or_404(GroupRepository(), parsed.group_id, "Group")
    if parsed.user_id is not None:
        _get_or_404(UserRepository(), parsed.user_id, "User")
    courses = CourseRepository().find_by_ids(parsed.course_ids)
    if len(courses) != len(parsed.course_ids):
        ids = ", ".join(str(i) for i in parsed.course_ids)
        raise NotFoundError(f"Course(s) with id: {ids} not found", code="course_not_found")
    s.date_of_birth = parsed.date_of_birth
    s.order_number = parsed.order_number
    s.edebo_id = parsed.edebo_id
    s.is_full_time = parsed.is_full_time
    s.group_id = parsed.group_id
    s.user_id = parsed.user_id
    s.courses = courses
    return s

@bp.get("/students")
@login_required
def api_students_list():
    args = query_args()
    repo = StudentRepository()
    options = page_options(args)
    s = repo.query()
    group_id = args.get("group_id")
    if group_id and str(group_id).isdigit():
        s = s.filter(Student.group_id == int(group_id))
    q = args.get("q")
    if q:
        s = s.filter(_search_filter(Student, q))
    return ok(paginate(s.order_by(Student.id.asc()), options, _student_out))

@bp.post("/students")
@admin_required
def api_students_create():
    parsed = require_valid(StudentIn, json_payload())
    s = StudentRepository().add(_apply_student(Student(), parsed))
    db.session.commit()
    return created(url_for("directory.api_students_get", id=s.id), _student_out(s))

@bp.get("/students/<int:id>")
@login_required
def api_students_get(id: int):
    return ok(_student_out(_get_or_404(StudentRepository(), id, "Student")))

@bp.put("/students/<int:id>")
@admin_required
def api_students_update(id: int):
    parsed = require_valid(StudentIn, json_payload())
    s = _apply_student(_get_or_404(StudentRepository(), id, "Student"), parsed)
    db.session.commit()
    return ok(_student_out(s))

@bp.delete("/students/<int:id>")
@admin_required
def api_students_delete(id: int):
    repo = StudentRepository()
    repo.delete(_get_or_404(repo, id, "Student"))
    db.session.commit()
    return "", 204
