# blueprints/grades_history/services.py
from __future__ import annotations
import logging
from typing import Any, Optional

from errors import NotFoundError
from extensions import db
from models import GradeHistory
from repositories import (
    CourseRepository, GradeHistoryRepository, StudentRepository, UserRepository,
)
from blueprints.core.api import PageOptions, paginate
from .schemas import GradeHistoryIn, GradeHistoryOut

log = logging.getLogger(__name__)


def _out(entry: GradeHistory) -> dict[str, Any]:
    return GradeHistoryOut.model_validate(entry).model_dump(mode="json")


def append_entry(*, student_id: int, course_id: int, grade: int, reason_of_change: str,
                 user_changed_id: Optional[int]) -> GradeHistory:
    """Добавить запись в журнал изменений оценок (без commit)."""
    entry = GradeHistory(
        student_id=student_id,
        course_id=course_id,
        user_changed_id=user_changed_id,
        grade=grade,
        reason_of_change=reason_of_change,
    )
    return GradeHistoryRepository().add(entry)


def record_grade_change(data: GradeHistoryIn) -> dict[str, Any]:
    if StudentRepository().get(data.student_id) is None:
        raise NotFoundError(f"Student with id: {data.student_id} not found", code="student_not_found")
    if CourseRepository().get(data.course_id) is None:
        raise NotFoundError(f"Course with id: {data.course_id} not found", code="course_not_found")
    if UserRepository().get(data.user_changed_id) is None:
        raise NotFoundError(f"User with id: {data.user_changed_id} not found", code="user_not_found")

    entry = append_entry(
        student_id=data.student_id,
        course_id=data.course_id,
        grade=data.grade,
        reason_of_change=data.reason_of_change,
        user_changed_id=data.user_changed_id,
    )
    db.session.commit()
    log.info("grade change recorded", extra={"event": "grade_history_recorded",
                                             "entity_id": entry.id, "user_id": data.user_changed_id})
    return _out(entry)


def list_entries(options: PageOptions, *, student_id: int | None = None,
                 course_id: int | None = None) -> dict[str, Any]:
    q = GradeHistoryRepository().query()
    if student_id is not None:
        q = q.filter(GradeHistory.student_id == student_id)
    if course_id is not None:
        q = q.filter(GradeHistory.course_id == course_id)
    q = q.order_by(GradeHistory.id.desc())
    return paginate(q, options, _out)


def get_entry(entry_id: int) -> dict[str, Any]:
    entry = GradeHistoryRepository().get(entry_id)
    if entry is None:
        raise NotFoundError(f"Grade history entry with id: {entry_id} not found")
    return _out(entry)
