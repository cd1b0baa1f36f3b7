from datetime import datetime, timezone

from db import db

class ProjectModel(db.Model):
    __tablename__ = "projects"

    # Project id
    id = db.Column(db.Integer, primary_key = True)
    title = db.Column(db.String(200), nullable = False)
    description = db.Column(db.Text, nullable = False)
    # Department / major the project belongs to
    department = db.Column(db.String(120), nullable = False, index = True)
    # Academic level, 0-5
    level = db.Column(db.Integer, nullable = False, default = 0)
    # Denormalized at submission time
    creator_name = db.Column(db.String(120))
    # Primary asset, kept for single-image consumers
    file_url = db.Column(db.String(1024))
    # Every asset URL, file_url included
    files_urls = db.Column(db.JSON, nullable = False, default = list)
    video_url = db.Column(db.String(1024))
    github_url = db.Column(db.String(1024))
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    # Owner of the project
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = False)
    # User-project relationship
    user = db.relationship("UserModel", back_populates = "projects")
    # Engagement rows go with the project
    ratings = db.relationship("RatingModel", back_populates = "project", lazy = "dynamic", cascade = "all, delete-orphan")
    likes = db.relationship("LikeModel", back_populates = "project", lazy = "dynamic", cascade = "all, delete-orphan")
    reviews = db.relationship("ReviewModel", back_populates = "project", lazy = "dynamic", cascade = "all, delete-orphan")
    collaborators = db.relationship("CollaboratorModel", back_populates = "project", lazy = "dynamic", cascade = "all, delete-orphan")
    invites = db.relationship("InviteModel", back_populates = "project", lazy = "dynamic", cascade = "all, delete-orphan")
