'''
----------------------------
Scheduled maintenance
NOT BY USER INTERACTION
----------------------------
'''

import logging

from flask.views import MethodView
from flask_smorest import Blueprint, abort
from flask import current_app, request

# Imports for OIDC token verification
from google.oauth2 import id_token
from google.auth.transport import requests

from clean_up import cleanup_revoked_tokens

logger = logging.getLogger(__name__)

blp = Blueprint("tasks", __name__, description = "Endpoints for scheduled tasks")


def verify_scheduler_token():
    # Only the scheduler's Google-signed OIDC token is accepted
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        logger.warning("Missing or invalid Authorization header on task endpoint")
        abort(401, message = "Missing bearer token")

    token = auth_header.split(" ", 1)[1]
    audience = current_app.config.get("CLOUD_RUN_SERVICE_URL")
    try:
        id_token.verify_oauth2_token(token, requests.Request(), audience = audience)
    except ValueError as e:
        logger.warning("Task token verification failed: %s", e)
        abort(401, message = "Invalid scheduler token")


@blp.route("/tasks/cleanup-revoked-tokens")
class CleanupTask(MethodView):
    def post(self):
        verify_scheduler_token()

        # Proceed with cleanup once verified
        removed = cleanup_revoked_tokens()
        logger.info("Removed %d expired blocklist entries", removed)
        return {"message": "Cleanup of revoked tokens completed", "removed": removed}, 200
