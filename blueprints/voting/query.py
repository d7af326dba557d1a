# blueprints/voting/query.py
"""Read-query construction for votes: filters, ordering and the student count."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Query, selectinload

from errors import InvalidInputError
from extensions import db
from models import Course, Group, Student, Vote, vote_groups


class VotingColumns(str, Enum):
    ID = "id"
    NAME = "name"
    START_DATE = "start_date"
    END_DATE = "end_date"


VOTING_COLUMN_LIST = [c.value for c in VotingColumns]
ORDER_DIRECTIONS = ("ASC", "DESC")

_ORDER_COLUMNS = {
    VotingColumns.ID: Vote.id,
    VotingColumns.NAME: Vote.name,
    VotingColumns.START_DATE: Vote.start_date,
    VotingColumns.END_DATE: Vote.end_date,
}


@dataclass
class VoteFilters:
    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    groups: Optional[List[int]] = None
    required_courses: Optional[List[int]] = None
    not_required_courses: Optional[List[int]] = None


def check_column_exist(allowed: Iterable[str], column: str) -> None:
    allowed = list(allowed)
    if column not in allowed:
        raise InvalidInputError(
            f"Unknown order column '{column}'. Allowed: {', '.join(allowed)}",
            code="invalid_order_column",
        )


def resolve_order(order_by_column: str | None, order_by: str | None) -> tuple[VotingColumns, str]:
    column = order_by_column or VotingColumns.ID.value
    direction = (order_by or "ASC").upper()
    check_column_exist(VOTING_COLUMN_LIST, column)
    if direction not in ORDER_DIRECTIONS:
        raise InvalidInputError(
            f"Unknown order direction '{order_by}'. Allowed: ASC, DESC",
            code="invalid_order_direction",
        )
    return VotingColumns(column), direction


def all_students_count():
    """Количество студентов во всех группах голосования (коррелированный подзапрос)."""
    return (
        select(func.count(Student.id))
        .select_from(Student)
        .join(vote_groups, vote_groups.c.group_id == Student.group_id)
        .where(vote_groups.c.vote_id == Vote.id)
        .correlate(Vote)
        .scalar_subquery()
    )


def _eager(query: Query) -> Query:
    return query.options(
        selectinload(Vote.groups),
        selectinload(Vote.required_courses),
        selectinload(Vote.not_required_courses),
    )


def build_votes_query(filters: VoteFilters, column: VotingColumns, direction: str) -> Query:
    query = _eager(db.session.query(Vote, all_students_count().label("all_students")))

    if filters.name:
        query = query.filter(Vote.name == filters.name)
    if filters.start_date:
        query = query.filter(Vote.start_date == filters.start_date)
    if filters.end_date:
        query = query.filter(Vote.end_date == filters.end_date)
    if filters.groups:
        query = query.filter(Vote.groups.any(Group.id.in_(filters.groups)))
    if filters.required_courses:
        query = query.filter(Vote.required_courses.any(Course.id.in_(filters.required_courses)))
    if filters.not_required_courses:
        query = query.filter(Vote.not_required_courses.any(Course.id.in_(filters.not_required_courses)))

    order_col = _ORDER_COLUMNS[column]
    order_col = order_col.desc() if direction == "DESC" else order_col.asc()
    # стабильный порядок для пагинации при одинаковых значениях
    return query.order_by(order_col, Vote.id.asc())


def vote_by_id_query(vote_id: int) -> Query:
    return _eager(db.session.query(Vote)).filter(Vote.id == vote_id)
