'''
----------------------------
Current principal for a request
----------------------------
'''

from flask import current_app
from flask_jwt_extended import get_jwt_identity
from flask_smorest import abort

from db import db
from models import UserModel


def current_principal():
    # Resolve the signed-in user from the JWT identity
    # Call only inside a jwt_required() view
    identity = get_jwt_identity()
    user = db.session.get(UserModel, int(identity)) if identity else None
    if user is None:
        abort(401, message = "Account no longer exists")
    return user


def optional_principal():
    # Same as current_principal, but anonymous callers get None
    # Use with jwt_required(optional = True)
    identity = get_jwt_identity()
    if not identity:
        return None
    return db.session.get(UserModel, int(identity))


def is_admin_email(email):
    admin_email = current_app.config.get("ADMIN_EMAIL")
    if not admin_email or not email:
        return False
    return email.strip().lower() == admin_email.strip().lower()
