from datetime import datetime, timezone

from db import db

ROLE_OWNER = "owner"
ROLE_COLLABORATOR = "collaborator"

class CollaboratorModel(db.Model):
    __tablename__ = "project_collaborators"
    __table_args__ = (
        db.UniqueConstraint("project_id", "user_id", name = "uq_collaborator_project_user"),
    )

    id = db.Column(db.Integer, primary_key = True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable = False, index = True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = False)
    # "owner" for the creator, "collaborator" for accepted invites
    role = db.Column(db.String(20), nullable = False, default = ROLE_COLLABORATOR)
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    project = db.relationship("ProjectModel", back_populates = "collaborators")
    user = db.relationship("UserModel")
