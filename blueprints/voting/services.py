# blueprints/voting/services.py
from __future__ import annotations
import logging
from datetime import date
from typing import Any, List, Sequence

from errors import InvalidInputError, NotFoundError
from extensions import db
from models import Course, Group, Vote
from repositories import AuditLogRepository, CourseRepository, GroupRepository, VoteRepository
from blueprints.core.api import PageOptions, paginate
from .query import VoteFilters, build_votes_query, resolve_order, vote_by_id_query
from .schemas import VoteCreateIn, VoteListItemOut, VoteOut, VoteUpdateIn

log = logging.getLogger(__name__)


def _ids_str(ids: Sequence[int]) -> str:
    return ", ".join(str(i) for i in ids)


def _resolve_groups(ids: List[int]) -> List[Group]:
    groups = GroupRepository().find_by_ids(ids)
    if not groups or len(groups) != len(ids):
        raise NotFoundError(f"Group(s) with id: {_ids_str(ids)} not found", code="group_not_found")
    return groups


def _resolve_courses(ids: List[int]) -> List[Course]:
    courses = CourseRepository().find_by_ids(ids)
    if not courses or len(courses) != len(ids):
        raise NotFoundError(f"Course(s) with id: {_ids_str(ids)} not found", code="course_not_found")
    return courses


def _check_date_range(start: date, end: date) -> None:
    if start > end:
        raise InvalidInputError(
            "Vote start date cannot be later than its end date",
            code="invalid_date_range",
        )


def _check_course_lists(required: List[int] | None, not_required: List[int] | None) -> None:
    if (required is not None and len(required) == 0) or (not_required is not None and len(not_required) == 0):
        raise InvalidInputError(
            "Required and not-required course lists must not be empty",
            code="empty_courses",
        )


def _audit(user_id: int | None, action: str, vote_id: int | None, payload: dict | None = None) -> None:
    AuditLogRepository().record(user_id=user_id, action=action, entity="vote",
                                entity_id=vote_id, payload=payload)


def _out(vote: Vote) -> dict[str, Any]:
    return VoteOut.model_validate(vote).model_dump(mode="json")


def create(data: VoteCreateIn, user_id: int | None = None) -> dict[str, Any]:
    """Создать голосование: проверки существования групп/предметов и диапазона дат."""
    groups = _resolve_groups(data.groups)
    _check_date_range(data.start_date, data.end_date)
    _check_course_lists(data.required_courses, data.not_required_courses)
    required_courses = _resolve_courses(data.required_courses)
    # необязательные предметы проверяются по своим собственным id
    not_required_courses = _resolve_courses(data.not_required_courses)

    vote = Vote(
        name=data.name,
        start_date=data.start_date,
        end_date=data.end_date,
        created_by_user_id=user_id,
        groups=groups,
        required_courses=required_courses,
        not_required_courses=not_required_courses,
    )
    VoteRepository().add(vote)
    _audit(user_id, "create", vote.id, {"name": vote.name})
    db.session.commit()
    log.info("vote created", extra={"event": "vote_created", "entity_id": vote.id, "user_id": user_id})
    return _out(vote)


def find_all(
    options: PageOptions,
    filters: VoteFilters | None = None,
    order_by_column: str | None = None,
    order_by: str | None = None,
) -> dict[str, Any]:
    column, direction = resolve_order(order_by_column, order_by)
    query = build_votes_query(filters or VoteFilters(), column, direction)

    def _row(row) -> dict[str, Any]:
        vote, all_students = row
        item = VoteListItemOut.model_validate(vote).model_copy(update={"all_students": int(all_students or 0)})
        return item.model_dump(mode="json")

    return paginate(query, options, _row)


def get_vote(vote_id: int) -> Vote:
    vote = vote_by_id_query(vote_id).one_or_none()
    if vote is None:
        raise NotFoundError(f"Vote with id: {vote_id} not found", code="vote_not_found")
    return vote


def find_one(vote_id: int) -> dict[str, Any]:
    return _out(get_vote(vote_id))


def update(vote_id: int, data: VoteUpdateIn, user_id: int | None = None) -> dict[str, Any]:
    vote = get_vote(vote_id)
    changes = data.model_dump(exclude_unset=True)

    # сначала все проверки, потом изменения сущности
    groups = _resolve_groups(data.groups) if data.groups is not None else None
    start = data.start_date or vote.start_date
    end = data.end_date or vote.end_date
    _check_date_range(start, end)
    _check_course_lists(data.required_courses, data.not_required_courses)
    required = _resolve_courses(data.required_courses) if data.required_courses is not None else None
    not_required = _resolve_courses(data.not_required_courses) if data.not_required_courses is not None else None

    if groups is not None:
        vote.groups = groups
    if required is not None:
        vote.required_courses = required
    if not_required is not None:
        vote.not_required_courses = not_required
    if data.name is not None:
        vote.name = data.name
    vote.start_date = start
    vote.end_date = end

    _audit(user_id, "update", vote.id, {"fields": sorted(changes)})
    db.session.commit()
    log.info("vote updated", extra={"event": "vote_updated", "entity_id": vote.id, "user_id": user_id})
    return _out(vote)


def remove(vote_id: int, user_id: int | None = None) -> None:
    vote = get_vote(vote_id)
    VoteRepository().delete(vote)
    _audit(user_id, "delete", vote_id)
    db.session.commit()
    log.info("vote removed", extra={"event": "vote_removed", "entity_id": vote_id, "user_id": user_id})
