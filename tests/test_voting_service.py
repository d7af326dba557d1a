from __future__ import annotations
from datetime import date
import pytest

from extensions import db
from errors import InvalidInputError, NotFoundError
from models import AuditLog, Course, Group, Student, User, Vote
from blueprints.core.api import PageOptions
from blueprints.voting import services as svc
from blueprints.voting.query import VoteFilters
from blueprints.voting.schemas import VoteCreateIn, VoteUpdateIn


@pytest.fixture()
def directory(app):
    g1 = Group(name="КН-21")
    g2 = Group(name="КН-22")
    g3 = Group(name="ІПЗ-21")
    c = [Course(name=f"Course {i}") for i in range(1, 6)]
    db.session.add_all([g1, g2, g3, *c])
    db.session.flush()
    # 3 студента в g1, 2 в g2, 0 в g3
    for i, g in enumerate([g1, g1, g1, g2, g2]):
        db.session.add(Student(date_of_birth="2004-01-01", order_number=f"O-{i}",
                               edebo_id=f"{i:08d}", is_full_time=True, group_id=g.id))
    db.session.commit()
    return {"groups": [g1, g2, g3], "courses": c}


def _payload(**over):
    data = {
        "name": "Midterm Pick",
        "start_date": "2024-01-01",
        "end_date": "2024-01-10",
        "groups": [1],
        "required_courses": [1],
        "not_required_courses": [2],
    }
    data.update(over)
    return VoteCreateIn.model_validate(data)


def _admin_id():
    return User.query.filter_by(email="admin@example.com").one().id


# ---------- create ----------
def test_create_vote_persists_associations(directory):
    out = svc.create(_payload(groups=[1, 2], required_courses=[1, 2], not_required_courses=[3]),
                     user_id=_admin_id())
    assert out["name"] == "Midterm Pick"
    assert [g["id"] for g in out["groups"]] == [1, 2]
    assert [c["id"] for c in out["required_courses"]] == [1, 2]
    assert [c["id"] for c in out["not_required_courses"]] == [3]
    assert out["start_date"] == "2024-01-01"
    assert "created_at" not in out

    vote = db.session.get(Vote, out["id"])
    assert vote.created_by_user_id == _admin_id()
    assert {g.id for g in vote.groups} == {1, 2}
    audit = AuditLog.query.filter_by(entity="vote", entity_id=vote.id).one()
    assert audit.action == "create" and audit.user_id == _admin_id()


def test_create_vote_accepts_scalar_ids(directory):
    data = VoteCreateIn.model_validate({
        "name": "Scalar", "start_date": "2024-01-01", "end_date": "2024-01-01",
        "groups": 1, "required_courses": "1", "not_required_courses": 2,
    })
    assert data.groups == [1] and data.required_courses == [1]
    out = svc.create(data)
    assert [g["id"] for g in out["groups"]] == [1]


def test_create_vote_anonymous_user(directory):
    out = svc.create(_payload())
    assert out["created_by_user_id"] is None
    assert AuditLog.query.one().user_id is None


def test_create_vote_bad_date_range_writes_nothing(directory):
    with pytest.raises(InvalidInputError) as ei:
        svc.create(_payload(end_date="2023-12-31"))
    assert ei.value.code == "invalid_date_range"
    assert Vote.query.count() == 0


def test_create_vote_unknown_group(directory):
    with pytest.raises(NotFoundError) as ei:
        svc.create(_payload(groups=[1, 999]))
    assert ei.value.code == "group_not_found"
    assert Vote.query.count() == 0
    assert AuditLog.query.count() == 0


def test_create_vote_duplicate_group_ids_not_collapsed(directory):
    with pytest.raises(NotFoundError):
        svc.create(_payload(groups=[1, 1]))


def test_create_vote_group_checked_before_dates(directory):
    with pytest.raises(NotFoundError):
        svc.create(_payload(groups=[999], end_date="2023-12-31"))


def test_create_vote_empty_course_lists(directory):
    with pytest.raises(InvalidInputError) as ei:
        svc.create(_payload(required_courses=[]))
    assert ei.value.code == "empty_courses"
    with pytest.raises(InvalidInputError):
        svc.create(_payload(not_required_courses=[]))


def test_create_vote_unknown_required_course(directory):
    with pytest.raises(NotFoundError) as ei:
        svc.create(_payload(required_courses=[1, 42]))
    assert ei.value.code == "course_not_found"


def test_create_vote_unknown_not_required_course(directory):
    # required существует, not-required нет
    with pytest.raises(NotFoundError):
        svc.create(_payload(required_courses=[1], not_required_courses=[77]))
    assert Vote.query.count() == 0


def test_create_vote_not_required_checked_by_own_ids(directory):
    out = svc.create(_payload(required_courses=[1], not_required_courses=[2, 3, 4]))
    assert [c["id"] for c in out["not_required_courses"]] == [2, 3, 4]


# ---------- find_all ----------
@pytest.fixture()
def votes(directory):
    svc.create(_payload(name="A", groups=[1], required_courses=[1], not_required_courses=[2]))
    svc.create(_payload(name="B", groups=[1, 2], required_courses=[2], not_required_courses=[3],
                        start_date="2024-02-01", end_date="2024-02-10"))
    svc.create(_payload(name="C", groups=[3], required_courses=[3], not_required_courses=[4, 5],
                        start_date="2024-03-01", end_date="2024-03-10"))
    return directory


def test_find_all_without_filters(votes):
    page = svc.find_all(PageOptions(page=1, per_page=20))
    assert page["meta"] == {"page": 1, "per_page": 20, "total": 3}
    by_name = {item["name"]: item for item in page["items"]}
    assert by_name["A"]["all_students"] == 3
    assert by_name["B"]["all_students"] == 5
    assert by_name["C"]["all_students"] == 0
    assert all(item["all_students"] >= 0 for item in page["items"])
    assert [g["id"] for g in by_name["B"]["groups"]] == [1, 2]
    assert [c["id"] for c in by_name["C"]["not_required_courses"]] == [4, 5]


def test_find_all_default_order_is_id_asc(votes):
    page = svc.find_all(PageOptions())
    assert [i["id"] for i in page["items"]] == [1, 2, 3]


def test_find_all_order_desc_by_start_date(votes):
    page = svc.find_all(PageOptions(), order_by_column="start_date", order_by="desc")
    assert [i["name"] for i in page["items"]] == ["C", "B", "A"]


def test_find_all_unknown_order_column_fails_before_query(votes, monkeypatch):
    def _boom(*a, **kw):
        raise AssertionError("query must not be built")
    monkeypatch.setattr(svc, "build_votes_query", _boom)
    with pytest.raises(InvalidInputError) as ei:
        svc.find_all(PageOptions(), order_by_column="password_hash")
    assert ei.value.code == "invalid_order_column"


def test_find_all_unknown_order_direction(votes):
    with pytest.raises(InvalidInputError):
        svc.find_all(PageOptions(), order_by="SIDEWAYS")


def test_find_all_group_filter_scalar_equals_list(votes):
    one = svc.find_all(PageOptions(), VoteFilters(groups=[1]))
    assert sorted(i["name"] for i in one["items"]) == ["A", "B"]
    two = svc.find_all(PageOptions(), VoteFilters(groups=[2, 3]))
    assert sorted(i["name"] for i in two["items"]) == ["B", "C"]


def test_find_all_course_filters(votes):
    req = svc.find_all(PageOptions(), VoteFilters(required_courses=[2]))
    assert [i["name"] for i in req["items"]] == ["B"]
    not_req = svc.find_all(PageOptions(), VoteFilters(not_required_courses=[5]))
    assert [i["name"] for i in not_req["items"]] == ["C"]


def test_find_all_scalar_filters_are_anded(votes):
    page = svc.find_all(PageOptions(), VoteFilters(name="B", start_date=date(2024, 2, 1)))
    assert [i["name"] for i in page["items"]] == ["B"]
    empty = svc.find_all(PageOptions(), VoteFilters(name="B", end_date=date(2024, 1, 10)))
    assert empty["items"] == [] and empty["meta"]["total"] == 0


def test_find_all_pagination(votes):
    page = svc.find_all(PageOptions(page=2, per_page=2))
    assert page["meta"]["total"] == 3
    assert [i["name"] for i in page["items"]] == ["C"]


# ---------- find_one / update / remove ----------
def test_find_one(votes):
    out = svc.find_one(2)
    assert out["name"] == "B"
    assert [g["name"] for g in out["groups"]] == ["КН-21", "КН-22"]


def test_find_one_not_found(votes):
    with pytest.raises(NotFoundError) as ei:
        svc.find_one(404)
    assert ei.value.code == "vote_not_found"


def test_update_vote(votes):
    out = svc.update(1, VoteUpdateIn(name="A2", groups=[2, 3], end_date=date(2024, 1, 20)))
    assert out["name"] == "A2"
    assert [g["id"] for g in out["groups"]] == [2, 3]
    assert out["end_date"] == "2024-01-20"
    assert [c["id"] for c in out["required_courses"]] == [1]


def test_update_vote_invalid_range_leaves_vote_untouched(votes):
    with pytest.raises(InvalidInputError):
        svc.update(1, VoteUpdateIn(groups=[3], start_date=date(2025, 1, 1)))
    db.session.rollback()
    vote = db.session.get(Vote, 1)
    assert [g.id for g in vote.groups] == [1]
    assert vote.start_date == date(2024, 1, 1)


def test_remove_vote(votes):
    svc.remove(1)
    assert db.session.get(Vote, 1) is None
    assert Group.query.count() == 3
    with pytest.raises(NotFoundError):
        svc.remove(1)
