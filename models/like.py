from datetime import datetime, timezone

from db import db

class LikeModel(db.Model):
    __tablename__ = "project_likes"
    __table_args__ = (
        db.UniqueConstraint("project_id", "user_id", name = "uq_like_project_user"),
    )

    id = db.Column(db.Integer, primary_key = True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable = False, index = True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = False)
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    project = db.relationship("ProjectModel", back_populates = "likes")
