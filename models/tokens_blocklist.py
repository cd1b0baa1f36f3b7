from datetime import datetime, timezone

from db import db

class TokenBlocklist(db.Model):
    __tablename__ = "token_blocklist"

    id = db.Column(db.Integer, primary_key = True)
    # JWT id of a signed-out session
    jti = db.Column(db.String(100), unique = True, nullable = False, index = True)
    # Principal that signed out, kept for auditing
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable = True)
    created_at = db.Column(
        db.DateTime(timezone = True),
        default = lambda: datetime.now(timezone.utc),
        nullable = False
    )
