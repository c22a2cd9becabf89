"""Admin blueprint for quiz authoring, responses and event registrations."""
from flask import Blueprint
from eventquiz.config import config

admin_bp = Blueprint('admin', __name__, url_prefix=config.ADMIN_URL_PREFIX)

from eventquiz.admin import routes, event_routes  # noqa: E402,F401
