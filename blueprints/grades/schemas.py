from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

class GradeIn(BaseModel):
    student_id: StrictInt
    course_id: StrictInt
    grade: StrictInt = Field(0, ge=0, le=100)

class GradeChangeIn(BaseModel):
    grade: StrictInt = Field(ge=0, le=100)
    reason_of_change: str

    @field_validator("reason_of_change")
    @classmethod
    def _non_empty(cls, v: str):
        if not v or not v.strip():
            raise ValueError("reason_required")
        return v.strip()

class GradeQuery(BaseModel):
    student_id: Optional[int] = None
    course_id: Optional[int] = None

class GradeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    student_id: int
    course_id: int
    grade: int
