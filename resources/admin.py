'''
----------------------------
Admin dashboard (read only)
ADMIN INTERACTIONS
----------------------------
'''

import logging
from collections import Counter
from datetime import datetime, timezone
from functools import wraps

from flask.views import MethodView
from flask_smorest import Blueprint, abort
from flask_jwt_extended import jwt_required, get_jwt
from sqlalchemy.exc import SQLAlchemyError

from models import ProjectModel, UserModel
from schemas import AdminDashboardSchema
from services import catalog

logger = logging.getLogger(__name__)

blp = Blueprint("admin", __name__, description = "Aggregated submissions and engagement for admins")


def admin_required(fn):
    # The claim is issued at sign-in from the stored email, never from client input
    @wraps(fn)
    @jwt_required()
    def wrapper(*args, **kwargs):
        if not get_jwt().get("is_admin"):
            abort(403, message = "Admin privilege required")
        return fn(*args, **kwargs)
    return wrapper


def _same_month(moment, now):
    if moment is None:
        return False
    if moment.tzinfo is None:
        # SQLite drops the timezone, values are stored in UTC
        moment = moment.replace(tzinfo = timezone.utc)
    return (moment.year, moment.month) == (now.year, now.month)


def build_dashboard():
    projects = ProjectModel.query.order_by(ProjectModel.id.asc()).all()
    summaries = catalog.sort_summaries(catalog.summarize(projects), catalog.SORT_NEWEST)
    now = datetime.now(timezone.utc)

    dashboard = {
        "total_projects": len(projects),
        "total_students": UserModel.query.count(),
        "this_month_uploads": sum(1 for project in projects if _same_month(project.created_at, now)),
        "departments": dict(Counter(project.department for project in projects)),
        "projects": summaries,
    }
    dashboard.update(catalog.overall_stats())
    return dashboard


@blp.route("/admin/dashboard")
class AdminDashboard(MethodView):
    @admin_required
    @blp.response(200, AdminDashboardSchema)
    def get(self):
        try:
            return build_dashboard()
        except SQLAlchemyError:
            logger.exception("Building the admin dashboard failed")
            abort(500, message = "Error, a problem occured building the dashboard")
