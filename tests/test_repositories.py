from __future__ import annotations
from datetime import date
import pytest
from sqlalchemy import func, select

from extensions import db
from models import Course, Grade, GradeHistory, Group, Student, User, Vote, student_courses, vote_groups
from repositories import CourseRepository, GroupRepository, StudentRepository, UserRepository


@pytest.fixture()
def world(app):
    teacher = User.query.filter_by(email="teacher@example.com").one()
    student_user = User.query.filter_by(email="student@example.com").one()
    g = Group(name="КН-51")
    c1, c2 = Course(name="Логіка"), Course(name="Статистика")
    db.session.add_all([g, c1, c2])
    db.session.flush()
    s = Student(date_of_birth="2005-01-01", order_number="A-1", edebo_id="11112222",
                is_full_time=True, group_id=g.id, user_id=student_user.id, courses=[c1, c2])
    db.session.add(s)
    db.session.flush()
    db.session.add_all([
        Grade(student_id=s.id, course_id=c1.id, grade=70),
        Grade(student_id=s.id, course_id=c2.id, grade=80),
        GradeHistory(student_id=s.id, course_id=c1.id, grade=70, reason_of_change="exam",
                     user_changed_id=teacher.id),
        GradeHistory(student_id=s.id, course_id=c2.id, grade=80, reason_of_change="exam",
                     user_changed_id=teacher.id),
    ])
    v = Vote(name="Вибір", start_date=date(2024, 1, 1), end_date=date(2024, 1, 2),
             created_by_user_id=teacher.id, groups=[g], required_courses=[c1], not_required_courses=[c2])
    db.session.add(v)
    db.session.commit()
    return {"group": g.id, "c1": c1.id, "c2": c2.id, "student": s.id, "vote": v.id,
            "teacher": teacher.id, "student_user": student_user.id}


def _count(table):
    return db.session.execute(select(func.count()).select_from(table)).scalar_one()


def test_find_by_ids_reports_missing(world):
    repo = CourseRepository()
    assert [c.id for c in repo.find_by_ids([world["c2"], world["c1"]])] == [world["c1"], world["c2"]]
    assert len(repo.find_by_ids([world["c1"], 999])) == 1
    assert repo.find_by_ids([]) == []


def test_delete_course_removes_grades_and_history(world):
    repo = CourseRepository()
    repo.delete(repo.get(world["c1"]))
    db.session.commit()
    assert {g.course_id for g in Grade.query.all()} == {world["c2"]}
    assert {h.course_id for h in GradeHistory.query.all()} == {world["c2"]}
    assert _count(student_courses) == 1
    vote = db.session.get(Vote, world["vote"])
    assert vote.required_courses == []
    assert [c.id for c in vote.not_required_courses] == [world["c2"]]


def test_delete_student_removes_grades_and_history(world):
    repo = StudentRepository()
    repo.delete(repo.get(world["student"]))
    db.session.commit()
    assert Grade.query.count() == 0
    assert GradeHistory.query.count() == 0
    assert _count(student_courses) == 0
    assert Course.query.count() == 2


def test_delete_group_removes_students_and_vote_links(world):
    repo = GroupRepository()
    repo.delete(repo.get(world["group"]))
    db.session.commit()
    assert Student.query.count() == 0
    assert Grade.query.count() == 0
    assert _count(vote_groups) == 0
    # само голосование остаётся
    assert db.session.get(Vote, world["vote"]) is not None


def test_delete_user_nulls_audit_references(world):
    repo = UserRepository()
    repo.delete(repo.get(world["teacher"]))
    db.session.commit()
    assert {h.user_changed_id for h in GradeHistory.query.all()} == {None}
    assert db.session.get(Vote, world["vote"]).created_by_user_id is None
    assert GradeHistory.query.count() == 2


def test_delete_user_removes_linked_student(world):
    repo = UserRepository()
    repo.delete(repo.get(world["student_user"]))
    db.session.commit()
    assert db.session.get(Student, world["student"]) is None
    assert GradeHistory.query.count() == 0


def test_get_by_email_is_case_insensitive(world):
    assert UserRepository().get_by_email(" Teacher@Example.com ").id == world["teacher"]
