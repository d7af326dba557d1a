from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from flask import current_app, jsonify, request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Query

from .validation import require_valid


def ok(data: Any, status: int = 200):
    return jsonify(data), status

def created(location: str, data: Any):
    resp = jsonify(data)
    resp.status_code = 201
    resp.headers["Location"] = location
    return resp

def json_payload() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}

def query_args(multi: Iterable[str] = ()) -> dict[str, Any]:
    """request.args -> dict; ключи из `multi` всегда списком (?groups=1&groups=2)."""
    multi = set(multi)
    out: dict[str, Any] = {}
    for key in request.args.keys():
        if key in multi:
            out[key] = request.args.getlist(key)
        else:
            out[key] = request.args.get(key)
    return out


class PageQuery(BaseModel):
    page: int = Field(1, ge=1)
    per_page: int | None = Field(None, ge=1)


@dataclass
class PageOptions:
    page: int = 1
    per_page: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page


def page_options(args: dict[str, Any]) -> PageOptions:
    parsed = require_valid(PageQuery, {k: args[k] for k in ("page", "per_page") if k in args})
    default = int(current_app.config.get("PER_PAGE_DEFAULT", 20))
    limit = int(current_app.config.get("PER_PAGE_MAX", 100))
    per_page = min(limit, parsed.per_page or default)
    return PageOptions(page=parsed.page, per_page=per_page)


def paginate(query: Query, options: PageOptions, serializer: Callable[[Any], dict]) -> dict:
    total = query.order_by(None).count()
    rows = query.offset(options.offset).limit(options.per_page).all()
    return {
        "items": [serializer(r) for r in rows],
        "meta": {"page": options.page, "per_page": options.per_page, "total": total},
    }
