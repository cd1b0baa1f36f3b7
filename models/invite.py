from datetime import datetime, timezone

from db import db

STATUS_PENDING = "pending"
STATUS_ACCEPTED = "accepted"
STATUS_DECLINED = "declined"

class InviteModel(db.Model):
    __tablename__ = "collaboration_invites"

    id = db.Column(db.Integer, primary_key = True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable = False, index = True)
    inviter_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = False)
    # Invitee does not need an account yet
    invitee_email = db.Column(db.String(255), nullable = False, index = True)
    status = db.Column(db.String(20), nullable = False, default = STATUS_PENDING, index = True)
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    project = db.relationship("ProjectModel", back_populates = "invites")
    inviter = db.relationship("UserModel")
