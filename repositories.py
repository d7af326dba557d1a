"""Repository classes encapsulating database access.

Each repository is small and focused on a single aggregate. Repositories
add, load and delete objects in the current session but never commit:
the calling service owns the unit of work.

Cascades are spelled out here rather than left to the database, so that
deleting a group, student, course or user behaves the same on every
backend (SQLite does not enforce foreign keys by default).
"""
from __future__ import annotations
from typing import Generic, Iterable, List, Optional, TypeVar

from sqlalchemy.orm import Query, Session

from extensions import db
from models import (
    Course, Grade, GradeHistory, Group, Student, User, Vote, AuditLog,
)

M = TypeVar("M")


class Repository(Generic[M]):
    model: type

    def __init__(self, session: Session | None = None):
        self.session = session if session is not None else db.session

    def query(self) -> Query:
        return self.session.query(self.model)

    def get(self, obj_id: int) -> Optional[M]:
        return self.session.get(self.model, obj_id)

    def find_by_ids(self, ids: Iterable[int]) -> List[M]:
        """Return the rows whose id is in `ids`.

        Duplicated ids are not collapsed in the input, so callers can
        compare ``len(result)`` with ``len(ids)`` to detect missing rows.
        """
        ids = list(ids)
        if not ids:
            return []
        return self.query().filter(self.model.id.in_(ids)).order_by(self.model.id).all()

    def add(self, obj: M) -> M:
        self.session.add(obj)
        self.session.flush()
        return obj

    def delete(self, obj: M) -> None:
        self.session.delete(obj)
        self.session.flush()


class GroupRepository(Repository[Group]):
    model = Group

    def delete(self, group: Group) -> None:
        """Delete a group together with its students."""
        students = StudentRepository(self.session)
        for student in list(group.students):
            students.delete(student)
        self.session.expire(group, ["students"])
        super().delete(group)


class CourseRepository(Repository[Course]):
    model = Course

    def delete(self, course: Course) -> None:
        """Delete a course, its grades and its grade history."""
        for grade in self.session.query(Grade).filter(Grade.course_id == course.id).all():
            self.session.delete(grade)
        for entry in self.session.query(GradeHistory).filter(GradeHistory.course_id == course.id).all():
            self.session.delete(entry)
        super().delete(course)


class StudentRepository(Repository[Student]):
    model = Student

    def delete(self, student: Student) -> None:
        """Delete a student, its grades and its grade history."""
        for grade in list(student.grades):
            self.session.delete(grade)
        for entry in list(student.grades_histories):
            self.session.delete(entry)
        super().delete(student)


class UserRepository(Repository[User]):
    model = User

    def get_by_email(self, email: str) -> Optional[User]:
        return self.query().filter(User.email == email.strip().lower()).first()

    def delete(self, user: User) -> None:
        """Delete a user and the linked student; audit references are set to null."""
        student = self.session.query(Student).filter(Student.user_id == user.id).first()
        if student is not None:
            StudentRepository(self.session).delete(student)
            self.session.expire(user, ["student"])
        (self.session.query(GradeHistory)
         .filter(GradeHistory.user_changed_id == user.id)
         .update({GradeHistory.user_changed_id: None}, synchronize_session="fetch"))
        (self.session.query(Vote)
         .filter(Vote.created_by_user_id == user.id)
         .update({Vote.created_by_user_id: None}, synchronize_session="fetch"))
        super().delete(user)


class GradeRepository(Repository[Grade]):
    model = Grade


class GradeHistoryRepository(Repository[GradeHistory]):
    model = GradeHistory


class VoteRepository(Repository[Vote]):
    model = Vote


class AuditLogRepository(Repository[AuditLog]):
    model = AuditLog

    def record(self, *, user_id: int | None, action: str, entity: str,
               entity_id: int | None, payload: dict | None = None) -> AuditLog:
        entry = AuditLog(user_id=user_id, action=action, entity=entity,
                         entity_id=entity_id, payload=payload or {})
        self.session.add(entry)
        return entry
