from flask import Blueprint

# Не задаём url_prefix здесь, он задаётся в app.register_blueprint(..., url_prefix="/api/v1")
api_bp = Blueprint("voting_api", __name__)

from . import routes  # noqa: E402,F401
