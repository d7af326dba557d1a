from __future__ import annotations
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

class GradeHistoryIn(BaseModel):
    student_id: StrictInt
    course_id: StrictInt
    user_changed_id: StrictInt
    grade: StrictInt = Field(ge=0, le=100)
    reason_of_change: str

    @field_validator("reason_of_change")
    @classmethod
    def _non_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("reason_required")
        if len(v) > 2000:
            raise ValueError("too_long")
        return v.strip()

class GradeHistoryQuery(BaseModel):
    student_id: Optional[int] = None
    course_id: Optional[int] = None

class GradeHistoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    student_id: int
    course_id: int
    user_changed_id: Optional[int] = None
    grade: int
    reason_of_change: str
    created_at: datetime
