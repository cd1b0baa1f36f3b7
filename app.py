import logging
import os

from flask import Flask, jsonify
from flask_smorest import Api
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate

from db import db
from models import TokenBlocklist, UserModel
from services.identity import is_admin_email

from resources.user import blp as UserBlueprint
from resources.profile import blp as ProfileBlueprint
from resources.project import blp as ProjectBlueprint
from resources.engagement import blp as EngagementBlueprint
from resources.collaboration import blp as CollaborationBlueprint
from resources.admin import blp as AdminBlueprint
from resources.contact import blp as ContactBlueprint
from resources.task import blp as TaskBlueprint

from datetime import timedelta
from flask_cors import CORS


def configure_logging():
    level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level = level,
        format = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


def create_app(db_url = None):
    configure_logging()
    app = Flask(__name__)


    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:8080")

    CORS(
        app,
        resources={r"/*": {
            "origins": [FRONTEND_URL],
            "supports_credentials": True,
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "Accept"],
            "expose_headers": ["Content-Type", "Authorization"],
            "max_age": 86400
        }},
    )


    app.config["PROPAGATE_EXCEPTIONS"] = True
    app.config["API_TITLE"] = "Student Project Showcase"
    app.config["API_VERSION"] = "v1"
    app.config["OPENAPI_VERSION"] = "3.0.3"
    app.config["OPENAPI_URL_PREFIX"] = "/"
    app.config["OPENAPI_SWAGGER_UI_PATH"] = "/swagger-ui"
    app.config["OPENAPI_SWAGGER_UI_URL"] = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"
    # Secrets and deployment specifics come from the environment
    app.config["SQLALCHEMY_DATABASE_URI"] = db_url or os.getenv("DATABASE_URL", "sqlite:///data.db")
    app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
    # Legacy single-image bucket and multi-file bucket
    app.config["GCS_IMAGES_BUCKET_NAME"] = os.getenv("GCS_IMAGES_BUCKET_NAME", "project-images")
    app.config["GCS_FILES_BUCKET_NAME"] = os.getenv("GCS_FILES_BUCKET_NAME", "project-files")
    app.config["GCS_PUBLIC_URL_BASE"] = os.getenv("GCS_PUBLIC_URL_BASE", "https://storage.googleapis.com")
    # Only addresses on this domain can register
    app.config["INSTITUTION_EMAIL_DOMAIN"] = os.getenv("INSTITUTION_EMAIL_DOMAIN", "horus.edu.eg")
    app.config["ADMIN_EMAIL"] = os.getenv("ADMIN_EMAIL")
    app.config["CLOUD_RUN_SERVICE_URL"] = os.getenv("CLOUD_RUN_SERVICE_URL")
    # Set a secret key used for signing the JWT
    # Prevents tampering with JWTs from others
    app.config["JWT_SECRET_KEY"] = os.getenv("JWT_SECRET_KEY")
    # Expiry for full access tokens
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours = 3)
    # Connects Flask app to SQLAlchemy
    db.init_app(app)
    api = Api(app)

    # Initialize flask migrate
    migrate = Migrate(app, db)

    # Create instance
    jwt = JWTManager(app)

    # Admin privileges, decided from the stored email of the identity
    @jwt.additional_claims_loader
    def add_claims_to_jwt(identity):
        user = db.session.get(UserModel, int(identity))
        return {"is_admin": bool(user and is_admin_email(user.email))}

    # Whenever we receive a JWT, this function checks if it is inside blocklist
    # If returns True, the request is terminated (access is revoked)
    @jwt.token_in_blocklist_loader
    def check_if_token_in_blocklist(jwt_header, jwt_payload):
        jti = jwt_payload["jti"]
        return bool(TokenBlocklist.query.filter_by(jti=jti).first())

    @jwt.revoked_token_loader
    def revoked_token_callback(jwt_header, jwt_payload):
        return (
            jsonify(
                {"description": "Token has been revoked", "error": "token_revoked"}
            ),
            401
        )

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return (jsonify({"message": "Token has expired", "error": "token_expired"}), 401)

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return (jsonify({"message": "Signature verification failed", "error": "invalid_token"}), 401)

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return (
            jsonify(
                {
                    "description": "Request does not contain access token",
                    "error": "authorization_required"
                }
            ),
            401
        )

    # No create_all here, the schema comes from "flask db init", "flask db migrate" and "flask db upgrade"

    api.register_blueprint(UserBlueprint)
    api.register_blueprint(ProfileBlueprint)
    api.register_blueprint(ProjectBlueprint)
    api.register_blueprint(EngagementBlueprint)
    api.register_blueprint(CollaborationBlueprint)
    api.register_blueprint(AdminBlueprint)
    api.register_blueprint(ContactBlueprint)
    api.register_blueprint(TaskBlueprint)

    return app
