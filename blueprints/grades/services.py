# blueprints/grades/services.py
from __future__ import annotations
import logging
from typing import Any, Optional

from errors import NotFoundError
from extensions import db
from models import Grade
from repositories import CourseRepository, GradeRepository, StudentRepository
from blueprints.core.api import PageOptions, paginate
from blueprints.grades_history.services import append_entry
from .schemas import GradeChangeIn, GradeIn, GradeOut

log = logging.getLogger(__name__)


def _out(grade: Grade) -> dict[str, Any]:
    return GradeOut.model_validate(grade).model_dump(mode="json")


def _get(grade_id: int) -> Grade:
    grade = GradeRepository().get(grade_id)
    if grade is None:
        raise NotFoundError(f"Grade with id: {grade_id} not found", code="grade_not_found")
    return grade


def list_grades(options: PageOptions, *, student_id: int | None = None,
                course_id: int | None = None) -> dict[str, Any]:
    q = GradeRepository().query()
    if student_id is not None:
        q = q.filter(Grade.student_id == student_id)
    if course_id is not None:
        q = q.filter(Grade.course_id == course_id)
    return paginate(q.order_by(Grade.id.asc()), options, _out)


def get_grade(grade_id: int) -> dict[str, Any]:
    return _out(_get(grade_id))


def create_grade(data: GradeIn) -> dict[str, Any]:
    if StudentRepository().get(data.student_id) is None:
        raise NotFoundError(f"Student with id: {data.student_id} not found", code="student_not_found")
    if CourseRepository().get(data.course_id) is None:
        raise NotFoundError(f"Course with id: {data.course_id} not found", code="course_not_found")
    grade = GradeRepository().add(Grade(student_id=data.student_id, course_id=data.course_id, grade=data.grade))
    db.session.commit()
    return _out(grade)


def change_grade(grade_id: int, data: GradeChangeIn, user_id: Optional[int] = None) -> dict[str, Any]:
    """Изменить оценку и записать изменение в журнал (кто, на что, почему)."""
    grade = _get(grade_id)
    previous = grade.grade
    grade.grade = data.grade
    append_entry(
        student_id=grade.student_id,
        course_id=grade.course_id,
        grade=data.grade,
        reason_of_change=data.reason_of_change,
        user_changed_id=user_id,
    )
    db.session.commit()
    log.info("grade changed", extra={"event": "grade_changed", "entity_id": grade.id, "user_id": user_id})
    out = _out(grade)
    out["previous_grade"] = previous
    return out


def delete_grade(grade_id: int) -> None:
    GradeRepository().delete(_get(grade_id))
    db.session.commit()
