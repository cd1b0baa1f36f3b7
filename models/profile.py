from datetime import datetime, timezone

from db import db

class ProfileModel(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.Integer, primary_key = True)
    # One profile per user, created lazily on first save
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), unique = True, nullable = False)
    full_name = db.Column(db.String(120))
    major = db.Column(db.String(120))
    department = db.Column(db.String(120))
    student_id = db.Column(db.String(40))
    updated_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        onupdate = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    user = db.relationship("UserModel", back_populates = "profile")
