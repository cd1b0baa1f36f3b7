'''
----------------------------
User/account actions
USER INTERACTIONS
----------------------------
'''

import logging

from flask.views import MethodView
# Blueprint divides APIs into smaller segments
from flask_smorest import Blueprint, abort
# Hashes the password that the user enters
# and saves the scrambled password into the database
from passlib.hash import pbkdf2_sha256
from flask_jwt_extended import create_access_token, jwt_required, get_jwt
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from db import db
from schemas import RegisterSchema, LoginSchema, MeSchema
from models import UserModel, ProfileModel, TokenBlocklist
from services.identity import current_principal

logger = logging.getLogger(__name__)

blp = Blueprint("users", __name__, description = "Sign-up, sign-in and sign-out")

@blp.route("/register")
class UserRegister(MethodView):
    @blp.arguments(RegisterSchema)
    def post(self, user_data):
        email = user_data["email"].strip().lower()
        if UserModel.query.filter(UserModel.email == email).first():
            abort(409, message = "A user with that email already exists")

        user = UserModel(
            email = email,
            password = pbkdf2_sha256.hash(user_data["password"]),
            full_name = user_data["full_name"].strip()
        )
        # Profile starts from what was entered on the sign-up form
        user.profile = ProfileModel(
            full_name = user.full_name,
            major = user_data.get("major"),
            department = user_data.get("major"),
            student_id = user_data.get("student_id")
        )

        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            abort(409, message = "A user with that email already exists")
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Registration failed for %s", email)
            abort(500, message = "An error occurred while creating the account")

        logger.info("Registered user %s", user.id)
        return {"message": "User created successfully."}, 201

@blp.route("/login")
class UserLogin(MethodView):
    @blp.arguments(LoginSchema)
    def post(self, user_data):
        user = UserModel.query.filter(
            UserModel.email == user_data["email"].strip().lower()
        ).first()

        # user must not be null, and verify must return True
        if user and pbkdf2_sha256.verify(user_data["password"], user.password):
            # Admin claim is added by the additional_claims_loader in app.py
            access_token = create_access_token(identity = str(user.id))
            return {"access_token": access_token}

        logger.info("Failed sign-in attempt")
        abort(401, message = "Invalid email or password")


@blp.route("/logout")
class UserLogout(MethodView):
    @jwt_required()
    def post(self):
        jwt = get_jwt()
        if not TokenBlocklist.query.filter_by(jti = jwt["jti"]).first():
            db.session.add(TokenBlocklist(jti = jwt["jti"], user_id = int(jwt["sub"])))
            db.session.commit()
        return {"message": "Logged out successfully"}

@blp.route("/me")
class CurrentUser(MethodView):
    @jwt_required()
    @blp.response(200, MeSchema)
    def get(self):
        user = current_principal()
        return {
            "id": user.id,
            "email": user.email,
            "full_name": user.display_name,
            # Same source as the admin gate, the claim issued at sign-in
            "is_admin": bool(get_jwt().get("is_admin"))
        }
