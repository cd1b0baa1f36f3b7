'''
----------------------------
Collaborators and collaboration invites
USER INTERACTIONS
----------------------------
'''

from flask.views import MethodView
from flask_smorest import Blueprint, abort
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from schemas import CollaboratorSchema, InviteCreateSchema, InviteSchema
from services import collaboration
from services.errors import ShowcaseError
from services.identity import current_principal

blp = Blueprint("collaboration", __name__, description = "Project collaborators and invites")


def _run(operation, *args):
    try:
        return operation(*args)
    except ShowcaseError as e:
        abort(e.status_code, message = e.message)
    except SQLAlchemyError:
        abort(500, message = "There was an error processing your request")


@blp.route("/projects/<int:project_id>/collaborators")
class ProjectCollaborators(MethodView):
    @blp.response(200, CollaboratorSchema(many = True))
    def get(self, project_id):
        return _run(collaboration.list_collaborators, project_id)


@blp.route("/projects/<int:project_id>/collaborators/<int:collaborator_id>")
class ProjectCollaborator(MethodView):
    # Owner removes a collaborator
    @jwt_required()
    def delete(self, project_id, collaborator_id):
        _run(collaboration.remove_collaborator, project_id, current_principal(), collaborator_id)
        return {"message": "Collaborator removed successfully"}


@blp.route("/projects/<int:project_id>/invites")
class ProjectInvites(MethodView):
    # Pending invites, owner only
    @jwt_required()
    @blp.response(200, InviteSchema(many = True))
    def get(self, project_id):
        return _run(collaboration.list_project_invites, project_id, current_principal())

    @jwt_required()
    @blp.arguments(InviteCreateSchema)
    @blp.response(201, InviteSchema)
    def post(self, invite_data, project_id):
        return _run(collaboration.create_invite, project_id, current_principal(), invite_data["email"])


@blp.route("/invites")
class MyInvites(MethodView):
    # Pending invites addressed to the caller's email
    @jwt_required()
    @blp.response(200, InviteSchema(many = True))
    def get(self):
        return _run(collaboration.list_my_invites, current_principal())


@blp.route("/invites/<int:invite_id>")
class InviteResource(MethodView):
    # Owner cancels a pending invite
    @jwt_required()
    def delete(self, invite_id):
        _run(collaboration.cancel_invite, invite_id, current_principal())
        return {"message": "Invite cancelled successfully"}


@blp.route("/invites/<int:invite_id>/accept")
class InviteAccept(MethodView):
    @jwt_required()
    @blp.response(200, InviteSchema)
    def post(self, invite_id):
        return _run(collaboration.accept_invite, invite_id, current_principal())


@blp.route("/invites/<int:invite_id>/decline")
class InviteDecline(MethodView):
    @jwt_required()
    @blp.response(200, InviteSchema)
    def post(self, invite_id):
        return _run(collaboration.decline_invite, invite_id, current_principal())
