'''
----------------------------
Profile actions (own profile only)
USER INTERACTIONS
----------------------------
'''

import logging

from flask.views import MethodView
from flask_smorest import Blueprint, abort
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from db import db
from models import ProfileModel
from schemas import ProfileSchema, ProjectSummarySchema
from services.catalog import projects_of
from services.identity import current_principal

logger = logging.getLogger(__name__)

blp = Blueprint("profiles", __name__, description = "Operations on the signed-in user's profile")

PROFILE_FIELDS = ("full_name", "major", "department", "student_id")


@blp.route("/profile")
class Profile(MethodView):
    @jwt_required()
    @blp.response(200, ProfileSchema)
    def get(self):
        user = current_principal()
        profile = ProfileModel.query.filter_by(user_id = user.id).first()
        # No profile yet is not an error
        if profile is None:
            return {"user_id": user.id}
        return profile

    # Created on first save
    @jwt_required()
    @blp.arguments(ProfileSchema)
    @blp.response(200, ProfileSchema)
    def put(self, profile_data):
        user = current_principal()
        profile = ProfileModel.query.filter_by(user_id = user.id).first()
        if profile is None:
            profile = ProfileModel(user_id = user.id)

        for field in PROFILE_FIELDS:
            if field in profile_data:
                value = profile_data[field]
                setattr(profile, field, value.strip() if isinstance(value, str) else value)

        try:
            db.session.add(profile)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Saving profile of user %s failed", user.id)
            abort(500, message = "An error occurred while updating the profile")

        return profile


@blp.route("/profile/projects")
class ProfileProjects(MethodView):
    @jwt_required()
    @blp.response(200, ProjectSummarySchema(many = True))
    def get(self):
        user = current_principal()
        try:
            return projects_of(user.id)
        except SQLAlchemyError:
            logger.exception("Listing projects of user %s failed", user.id)
            abort(500, message = "Error, a problem occured retrieving projects")
