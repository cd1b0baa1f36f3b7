'''
----------------------------
Project actions: catalog, detail, upload, edit
USER INTERACTIONS
----------------------------
'''

import logging

from flask import request
from flask.views import MethodView
from flask_smorest import Blueprint, abort
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from db import db
from models import ProjectModel
from schemas import (
    CatalogQuerySchema,
    PlainProjectSchema,
    ProjectDetailSchema,
    ProjectFormSchema,
    ProjectStatsSchema,
    ProjectSummarySchema,
    OverallStatsSchema,
)
from services import catalog, collaboration, engagement, submission
from services.errors import SubmissionError
from services.identity import current_principal, optional_principal

logger = logging.getLogger(__name__)

# Define the Blueprint for projects
blp = Blueprint("projects", __name__, description = "Operations on projects")


def _uploaded_files():
    # Browsers send an empty part when nothing was picked
    image = request.files.get("image")
    if image is not None and not image.filename:
        image = None
    files = [file for file in request.files.getlist("files") if file.filename]
    return image, files


# Catalog and submission
@blp.route("/projects")
class ProjectListAndCreate(MethodView):
    # Public catalog, no login needed
    @blp.arguments(CatalogQuerySchema, location = "query")
    @blp.response(200, ProjectSummarySchema(many = True))
    def get(self, query_args):
        try:
            return catalog.list_projects(**query_args)
        except SQLAlchemyError:
            logger.exception("Listing the catalog failed")
            abort(500, message = "Error, a problem occured retrieving projects")

    @jwt_required()
    @blp.arguments(ProjectFormSchema, location = "form")
    @blp.response(201, PlainProjectSchema)
    def post(self, project_data):
        owner = current_principal()
        image, files = _uploaded_files()

        try:
            return submission.create_project(owner, project_data, image = image, files = files)
        except SubmissionError as e:
            abort(e.status_code, message = e.message)
        except ConnectionError as e:
            abort(500, message = str(e))
        except SQLAlchemyError:
            abort(500, message = "An error occurred while creating the project")


# Endpoint related to a specific project
@blp.route("/projects/<int:project_id>")
class ProjectResource(MethodView):
    @jwt_required(optional = True)
    @blp.response(200, ProjectDetailSchema)
    def get(self, project_id):
        project = ProjectModel.query.filter_by(id = project_id).first_or_404(description = "Project not found")
        viewer = optional_principal()
        try:
            detail = catalog.summarize([project])[0]
            detail["collaborators"] = collaboration.list_collaborators(project_id)
        except SQLAlchemyError:
            logger.exception("Loading project %s failed", project_id)
            abort(500, message = "Error, a problem occured retrieving the project")
        detail["is_owner"] = viewer is not None and viewer.id == project.user_id
        return detail

    # Partial update, owner only
    @jwt_required()
    @blp.arguments(ProjectFormSchema, location = "form")
    @blp.response(200, PlainProjectSchema)
    def patch(self, project_data, project_id):
        owner = current_principal()
        project = ProjectModel.query.filter_by(id = project_id, user_id = owner.id).first_or_404(
            description = "Project not found or permission denied"
        )
        image, files = _uploaded_files()

        try:
            return submission.update_project(project, project_data, image = image, files = files)
        except SubmissionError as e:
            abort(e.status_code, message = e.message)
        except ConnectionError as e:
            abort(500, message = str(e))
        except SQLAlchemyError:
            abort(500, message = "An error occurred while updating the project")

    @jwt_required()
    def delete(self, project_id):
        owner = current_principal()
        project = ProjectModel.query.filter_by(id = project_id, user_id = owner.id).first_or_404(
            description = "Project not found or permission denied"
        )

        try:
            db.session.delete(project)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Deleting project %s failed", project_id)
            abort(500, message = "An error occurred while deleting the project")

        logger.info("Owner %s deleted project %s", owner.id, project_id)
        return {"message": "Project deleted successfully"}


@blp.route("/projects/<int:project_id>/stats")
class ProjectStats(MethodView):
    @blp.response(200, ProjectStatsSchema)
    def get(self, project_id):
        try:
            return engagement.project_stats(project_id)
        except SQLAlchemyError:
            logger.exception("Loading stats of project %s failed", project_id)
            abort(500, message = "Error, a problem occured retrieving project stats")


@blp.route("/stats/top")
class TopProjects(MethodView):
    @blp.response(200, ProjectSummarySchema(many = True))
    def get(self):
        try:
            return catalog.top_projects()
        except SQLAlchemyError:
            logger.exception("Loading top projects failed")
            abort(500, message = "Error, a problem occured retrieving top projects")


@blp.route("/stats/overall")
class OverallStats(MethodView):
    @blp.response(200, OverallStatsSchema)
    def get(self):
        try:
            return catalog.overall_stats()
        except SQLAlchemyError:
            logger.exception("Loading overall stats failed")
            abort(500, message = "Error, a problem occured retrieving stats")
