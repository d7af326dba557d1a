from __future__ import annotations
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictInt, field_validator

from blueprints.core.validation import non_blank
from .validators import ensure_iso_date

# ---------- Groups ----------
class GroupIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str):
        return non_blank(v)

class GroupOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str

# ---------- Courses ----------
class CourseIn(BaseModel):
    name: str = Field(min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str):
        return non_blank(v)

class CourseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    name: str

# ---------- Students ----------
class StudentIn(BaseModel):
    date_of_birth: str = Field(min_length=10, max_length=10)
    order_number: str = Field(min_length=1, max_length=20)
    edebo_id: str = Field(min_length=8, max_length=8)
    is_full_time: StrictBool
    group_id: StrictInt
    user_id: Optional[StrictInt] = None
    course_ids: List[StrictInt] = Field(default_factory=list)

    @field_validator("date_of_birth")
    @classmethod
    def _iso_date(cls, v: str):
        return ensure_iso_date(v)

    @field_validator("order_number")
    @classmethod
    def _order_number_not_blank(cls, v: str):
        return non_blank(v)

class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    date_of_birth: str
    order_number: str
    edebo_id: str
    is_full_time: bool
    group_id: int
    user_id: Optional[int] = None
    course_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
