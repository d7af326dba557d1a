# blueprints/voting/routes.py
from __future__ import annotations

from flask import url_for
from flask_login import login_required

from blueprints.auth.routes import admin_required, current_user_id
from blueprints.core.api import created, json_payload, ok, page_options, query_args
from blueprints.core.validation import require_valid
from . import api_bp
from . import services as svc
from .query import VoteFilters
from .schemas import VoteCreateIn, VoteListQuery, VoteUpdateIn

_MULTI = ("groups", "required_courses", "not_required_courses")

@api_bp.get("/votes")
@login_required
def api_votes_list():
    args = query_args(multi=_MULTI)
    options = page_options(args)
    q = require_valid(VoteListQuery, {k: v for k, v in args.items() if k not in ("page", "per_page")})
    filters = VoteFilters(
        name=q.name,
        start_date=q.start_date,
        end_date=q.end_date,
        groups=q.groups,
        required_courses=q.required_courses,
        not_required_courses=q.not_required_courses,
    )
    data = svc.find_all(options, filters, order_by_column=q.order_by_column, order_by=q.order_by)
    return ok(data)

@api_bp.post("/votes")
@admin_required
def api_votes_create():
    data = require_valid(VoteCreateIn, json_payload())
    out = svc.create(data, user_id=current_user_id())
    return created(url_for("voting_api.api_votes_get", id=out["id"]), out)

@api_bp.get("/votes/<int:id>")
@login_required
def api_votes_get(id: int):
    return ok(svc.find_one(id))

@api_bp.patch("/votes/<int:id>")
@admin_required
def api_votes_update(id: int):
    data = require_valid(VoteUpdateIn, json_payload())
    return ok(svc.update(id, data, user_id=current_user_id()))

@api_bp.delete("/votes/<int:id>")
@admin_required
def api_votes_delete(id: int):
    svc.remove(id, user_id=current_user_id())
    return "", 204
