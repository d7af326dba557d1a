from __future__ import annotations
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from blueprints.core.validation import OneOrMany, OptionalOneOrMany, non_blank

# ---------- Input ----------
class VoteCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    start_date: date
    end_date: date
    groups: OneOrMany
    required_courses: OneOrMany
    not_required_courses: OneOrMany

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str):
        return non_blank(v)

class VoteUpdateIn(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    groups: OptionalOneOrMany = None
    required_courses: OptionalOneOrMany = None
    not_required_courses: OptionalOneOrMany = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: Optional[str]):
        return None if v is None else non_blank(v)

class VoteListQuery(BaseModel):
    order_by_column: Optional[str] = None
    order_by: Optional[str] = None
    name: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    groups: OptionalOneOrMany = None
    required_courses: OptionalOneOrMany = None
    not_required_courses: OptionalOneOrMany = None

# ---------- Output ----------
class GroupBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str

class CourseBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str

class VoteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str
    start_date: date
    end_date: date
    created_by_user_id: Optional[int] = None
    groups: List[GroupBrief]
    required_courses: List[CourseBrief]
    not_required_courses: List[CourseBrief]

class VoteListItemOut(VoteOut):
    all_students: int = 0
