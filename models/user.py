from datetime import datetime, timezone

from db import db

class UserModel(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key = True)
    # Institutional email, stored lower-cased
    email = db.Column(db.String(255), unique = True, nullable = False, index = True)
    # Make sure password isn't unique, or else people will know someone has that password
    password = db.Column(db.String(256), nullable = False)
    full_name = db.Column(db.String(120), nullable = False)
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )

    profile = db.relationship("ProfileModel", back_populates = "user", uselist = False, cascade = "all, delete-orphan")
    # One user can have many projects
    # Projects delete if account is deleted
    projects = db.relationship("ProjectModel", back_populates = "user", lazy = "dynamic", cascade = "all, delete-orphan")

    @property
    def display_name(self):
        if self.profile and self.profile.full_name:
            return self.profile.full_name
        return self.full_name
