from datetime import datetime, timezone

from db import db

class ReviewModel(db.Model):
    __tablename__ = "project_reviews"
    # A user reviews a project at most once, edits replace the comment
    __table_args__ = (
        db.UniqueConstraint("project_id", "user_id", name = "uq_review_project_user"),
    )

    id = db.Column(db.Integer, primary_key = True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable = False, index = True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = False)
    comment = db.Column(db.Text, nullable = False)
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )
    updated_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    project = db.relationship("ProjectModel", back_populates = "reviews")
    user = db.relationship("UserModel")
