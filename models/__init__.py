from datetime import datetime, date, UTC
from enum import Enum as PyEnum

from flask_login import UserMixin
from sqlalchemy import (
    ForeignKey, Index, Boolean, Date, DateTime,
    Integer, String, Text, JSON
)
from sqlalchemy.orm import relationship, backref, Mapped, mapped_column
from werkzeug.security import generate_password_hash, check_password_hash

from extensions import db


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


# ---------- Enums ----------
class Role(str, PyEnum):
    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


# ---------- Association Tables ----------
student_courses = db.Table(
    "student_courses",
    db.Column("student_id", db.Integer, db.ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
    db.Column("course_id", db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
)

student_votes = db.Table(
    "student_votes",
    db.Column("student_id", db.Integer, db.ForeignKey("students.id", ondelete="CASCADE"), primary_key=True),
    db.Column("vote_id", db.Integer, db.ForeignKey("votes.id", ondelete="CASCADE"), primary_key=True),
)

vote_groups = db.Table(
    "vote_groups",
    db.Column("vote_id", db.Integer, db.ForeignKey("votes.id", ondelete="CASCADE"), primary_key=True),
    db.Column("group_id", db.Integer, db.ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
)

vote_required_courses = db.Table(
    "vote_required_courses",
    db.Column("vote_id", db.Integer, db.ForeignKey("votes.id", ondelete="CASCADE"), primary_key=True),
    db.Column("course_id", db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
)

vote_not_required_courses = db.Table(
    "vote_not_required_courses",
    db.Column("vote_id", db.Integer, db.ForeignKey("votes.id", ondelete="CASCADE"), primary_key=True),
    db.Column("course_id", db.Integer, db.ForeignKey("courses.id", ondelete="CASCADE"), primary_key=True),
)


# ---------- Core Entities ----------
class User(UserMixin, db.Model):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # строковое поле, чтобы не зависеть от конкретного типа БД
    role: Mapped[str] = mapped_column(String(16), index=True, nullable=False, default=Role.TEACHER.value)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    def set_password(self, raw: str):
        self.password_hash = generate_password_hash(raw)

    def check_password(self, raw: str) -> bool:
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    def __repr__(self):
        return f"<User {self.email}>"


class Group(db.Model):
    __tablename__ = "groups"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    students = relationship("Student", back_populates="group", order_by="Student.id")
    votes = relationship("Vote", secondary=vote_groups, back_populates="groups")

    def __repr__(self):
        return f"<Group {self.name}>"


class Course(db.Model):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    students = relationship("Student", secondary=student_courses, back_populates="courses")
    required_in_votes = relationship("Vote", secondary=vote_required_courses, back_populates="required_courses")
    not_required_in_votes = relationship("Vote", secondary=vote_not_required_courses,
                                         back_populates="not_required_courses")

    def __repr__(self):
        return f"<Course {self.name}>"


class Student(db.Model):
    __tablename__ = "students"

    id: Mapped[int] = mapped_column(primary_key=True)
    date_of_birth: Mapped[str] = mapped_column(String(10), nullable=False)
    order_number: Mapped[str] = mapped_column(String(20), nullable=False)
    edebo_id: Mapped[str] = mapped_column(String(8), nullable=False)
    is_full_time: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    group_id: Mapped[int] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True)

    group = relationship("Group", back_populates="students")
    user = relationship("User", backref=backref("student", uselist=False))
    courses = relationship("Course", secondary=student_courses, back_populates="students", order_by="Course.id")
    grades = relationship("Grade", back_populates="student")
    grades_histories = relationship("GradeHistory", back_populates="student")
    votes = relationship("Vote", secondary=student_votes, back_populates="students")

    def __repr__(self):
        return f"<Student {self.edebo_id}>"


class Grade(db.Model):
    __tablename__ = "grades"

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    # диапазон 0..100 проверяется только на входе API
    grade: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    student = relationship("Student", back_populates="grades")
    course = relationship("Course")

    __table_args__ = (
        Index("ix_grades_student_course", "student_id", "course_id"),
    )


class GradeHistory(db.Model):
    __tablename__ = "grades_history"

    id: Mapped[int] = mapped_column(primary_key=True)
    student_id: Mapped[int] = mapped_column(ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    user_changed_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    grade: Mapped[int] = mapped_column(Integer, nullable=False)
    reason_of_change: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)

    student = relationship("Student", back_populates="grades_histories")
    course = relationship("Course")
    user_changed = relationship("User")


class Vote(db.Model):
    __tablename__ = "votes"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    groups = relationship("Group", secondary=vote_groups, back_populates="votes", order_by="Group.id")
    required_courses = relationship("Course", secondary=vote_required_courses,
                                    back_populates="required_in_votes", order_by="Course.id")
    not_required_courses = relationship("Course", secondary=vote_not_required_courses,
                                        back_populates="not_required_in_votes", order_by="Course.id")
    students = relationship("Student", secondary=student_votes, back_populates="votes")
    created_by = relationship("User")

    def __repr__(self):
        return f"<Vote {self.name}>"


class AuditLog(db.Model):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(Integer)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[int | None] = mapped_column(Integer)
    payload: Mapped[dict | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, nullable=False)
