'''
----------------------------
Collaboration invites and collaborators

Invite lifecycle:
    pending -> accepted   (adds a collaborator row, same transaction)
    pending -> declined   (by the invitee)
    pending -> deleted    (cancelled by the project owner)
accepted and declined are final.
----------------------------
'''

import logging
import re

from sqlalchemy.exc import SQLAlchemyError

from db import db
from models import ProjectModel, CollaboratorModel, InviteModel, UserModel
from models.collaborator import ROLE_OWNER, ROLE_COLLABORATOR
from models.invite import STATUS_PENDING, STATUS_ACCEPTED, STATUS_DECLINED
from services.errors import InviteStateError, PermissionDeniedError, SubmissionError

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email):
    return (email or "").strip().lower()


def _owned_project_or_404(project_id, owner):
    # Non-owners see the same 404 as a missing project
    return ProjectModel.query.filter_by(id = project_id, user_id = owner.id).first_or_404(
        description = "Project not found or permission denied"
    )


def _commit(action, **context):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to %s (%s)", action, context)
        raise


# --- Collaborators ---

def list_collaborators(project_id):
    ProjectModel.query.filter_by(id = project_id).first_or_404(description = "Project not found")
    return (
        CollaboratorModel.query.filter_by(project_id = project_id)
        .order_by(CollaboratorModel.created_at.asc(), CollaboratorModel.id.asc())
        .all()
    )


def remove_collaborator(project_id, owner, collaborator_id):
    _owned_project_or_404(project_id, owner)
    collaborator = CollaboratorModel.query.filter_by(id = collaborator_id, project_id = project_id).first_or_404(
        description = "Collaborator not found"
    )
    if collaborator.role == ROLE_OWNER:
        raise PermissionDeniedError("The project owner cannot be removed")

    db.session.delete(collaborator)
    _commit("remove collaborator", project_id = project_id, collaborator_id = collaborator_id)
    logger.info("Owner %s removed collaborator %s from project %s", owner.id, collaborator_id, project_id)


# --- Invites, owner side ---

def create_invite(project_id, owner, email):
    project = _owned_project_or_404(project_id, owner)
    email = normalize_email(email)
    if not EMAIL_PATTERN.match(email):
        raise SubmissionError("Please enter a valid email address")

    duplicate = InviteModel.query.filter_by(
        project_id = project.id, invitee_email = email, status = STATUS_PENDING
    ).first()
    if duplicate:
        raise InviteStateError("This address already has a pending invite")

    existing_member = (
        db.session.query(CollaboratorModel)
        .join(UserModel, CollaboratorModel.user_id == UserModel.id)
        .filter(CollaboratorModel.project_id == project.id, UserModel.email == email)
        .first()
    )
    if existing_member:
        raise InviteStateError("This user is already a collaborator")

    invite = InviteModel(project_id = project.id, inviter_id = owner.id, invitee_email = email)
    db.session.add(invite)
    _commit("create invite", project_id = project.id, email = email)
    logger.info("Owner %s invited %s to project %s", owner.id, email, project.id)
    return invite


def list_project_invites(project_id, owner):
    project = _owned_project_or_404(project_id, owner)
    return (
        InviteModel.query.filter_by(project_id = project.id, status = STATUS_PENDING)
        .order_by(InviteModel.created_at.desc(), InviteModel.id.desc())
        .all()
    )


def cancel_invite(invite_id, owner):
    # Non-owners see the same 404 as a missing invite
    invite = InviteModel.query.filter(
        InviteModel.id == invite_id, InviteModel.project.has(user_id = owner.id)
    ).first_or_404(description = "Invite not found")
    if invite.status != STATUS_PENDING:
        raise InviteStateError(f"Invite is already {invite.status}")

    db.session.delete(invite)
    _commit("cancel invite", invite_id = invite_id)
    logger.info("Owner %s cancelled invite %s", owner.id, invite_id)


# --- Invites, invitee side ---

def list_my_invites(principal):
    return (
        InviteModel.query.filter_by(invitee_email = normalize_email(principal.email), status = STATUS_PENDING)
        .order_by(InviteModel.created_at.desc(), InviteModel.id.desc())
        .all()
    )


def _invite_for_invitee(invite_id, principal, lock = False):
    query = InviteModel.query.filter_by(id = invite_id)
    if lock:
        query = query.with_for_update()
    invite = query.first_or_404(description = "Invite not found")
    if invite.invitee_email != normalize_email(principal.email):
        raise PermissionDeniedError("This invite is addressed to someone else")
    if invite.status != STATUS_PENDING:
        raise InviteStateError(f"Invite is already {invite.status}")
    return invite


def accept_invite(invite_id, principal):
    '''
    Status change and collaborator row are written in a single transaction.
    The invite row is locked first, so two concurrent accepts cannot both
    see it as pending where the database supports row locks.
    '''
    try:
        invite = _invite_for_invitee(invite_id, principal, lock = True)
        invite.status = STATUS_ACCEPTED

        already_member = CollaboratorModel.query.filter_by(
            project_id = invite.project_id, user_id = principal.id
        ).first()
        if already_member is None:
            db.session.add(CollaboratorModel(
                project_id = invite.project_id,
                user_id = principal.id,
                role = ROLE_COLLABORATOR
            ))
    except Exception:
        # Release the lock and drop partial changes
        db.session.rollback()
        raise

    _commit("accept invite", invite_id = invite_id, user_id = principal.id)
    logger.info("User %s accepted invite %s to project %s", principal.id, invite_id, invite.project_id)
    return invite


def decline_invite(invite_id, principal):
    invite = _invite_for_invitee(invite_id, principal)
    invite.status = STATUS_DECLINED
    _commit("decline invite", invite_id = invite_id, user_id = principal.id)
    logger.info("User %s declined invite %s", principal.id, invite_id)
    return invite
