"""Manager reports routes."""
from flask import Blueprint

reports_bp = Blueprint('reports', __name__)

from blueprints.reports import analytics, exports
analytics.register_routes(reports_bp)
exports.register_routes(reports_bp)
