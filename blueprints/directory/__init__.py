from flask import Blueprint

# url_prefix задаётся при регистрации ("/api/v1")
bp = Blueprint("directory", __name__)
from . import routes  # noqa
