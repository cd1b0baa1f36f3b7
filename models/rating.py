from datetime import datetime, timezone

from db import db

class RatingModel(db.Model):
    __tablename__ = "project_ratings"
    # One rating per user per project
    __table_args__ = (
        db.UniqueConstraint("project_id", "user_id", name = "uq_rating_project_user"),
    )

    id = db.Column(db.Integer, primary_key = True)
    project_id = db.Column(db.Integer, db.ForeignKey("projects.id"), nullable = False, index = True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = False)
    # 1-5 stars
    rating = db.Column(db.Integer, nullable = False)
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

    project = db.relationship("ProjectModel", back_populates = "ratings")
