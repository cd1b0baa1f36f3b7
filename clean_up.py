from datetime import datetime, timezone, timedelta

from flask import current_app

from db import db
from models import TokenBlocklist

# Blocklist entries outlive their token by at most one lifetime
def cleanup_revoked_tokens(now = None):
    expires_delta = current_app.config.get("JWT_ACCESS_TOKEN_EXPIRES", timedelta(hours = 3))
    cutoff = (now or datetime.now(timezone.utc)) - expires_delta

    # Delete multiple tokens at once, returns how many went
    removed = TokenBlocklist.query.filter(TokenBlocklist.created_at < cutoff).delete(synchronize_session = False)
    db.session.commit()
    return removed
