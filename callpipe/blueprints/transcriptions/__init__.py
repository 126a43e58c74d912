from flask import Blueprint

bp = Blueprint("transcriptions", __name__)

from . import routes  # noqa: E402,F401
