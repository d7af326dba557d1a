from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, StrictInt, ValidationError

from errors import RequestValidationError

T = TypeVar("T", bound=BaseModel)


_INT_RE = re.compile(r"[+-]?\d+")


def non_blank(value: str) -> str:
    """Обрезает пробелы; пустая строка после обрезки считается ошибкой."""
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value


def _as_int(item: Any) -> Any:
    if isinstance(item, str) and _INT_RE.fullmatch(item):
        return int(item)
    return item


def as_id_list(value: Any) -> Any:
    """Приводит «один или много» к списку id: 3, "3", "1,2", [1, "2"] -> [int, ...]."""
    if value is None:
        return None
    if isinstance(value, (list, tuple, set)):
        items = list(value)
    else:
        items = [value]
    out: list[Any] = []
    for item in items:
        if isinstance(item, str):
            out.extend(_as_int(part.strip()) for part in item.split(",") if part.strip())
        else:
            out.append(item)
    return out


# StrictInt: true/false и 1.0 не считаются id
OneOrMany = Annotated[list[StrictInt], BeforeValidator(as_id_list)]
OptionalOneOrMany = Annotated[Optional[list[StrictInt]], BeforeValidator(as_id_list)]


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: list[dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _field_errors(ve: ValidationError) -> list[dict[str, Any]]:
    out = []
    for e in ve.errors(include_url=False):
        loc = ".".join(str(p) for p in e.get("loc", ())) or "__root__"
        out.append({"field": loc, "message": e.get("msg", ""), "type": e.get("type", "")})
    return out


def validate(schema: type[T], payload: Any) -> ValidationResult[T]:
    try:
        return ValidationResult(value=schema.model_validate(payload))
    except ValidationError as ve:
        return ValidationResult(errors=_field_errors(ve))


def require_valid(schema: type[T], payload: Any) -> T:
    result = validate(schema, payload)
    if not result.ok:
        raise RequestValidationError(result.errors)
    return result.value
