import io
from unittest.mock import patch

import pytest
from passlib.hash import pbkdf2_sha256
from werkzeug.datastructures import FileStorage

from app import create_app
from db import db
from models import UserModel, ProfileModel, ProjectModel, CollaboratorModel
from models.collaborator import ROLE_OWNER

ADMIN_EMAIL = "admin1@horus.edu.eg"
PASSWORD = "secret123"


@pytest.fixture
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
    monkeypatch.setenv("ADMIN_EMAIL", ADMIN_EMAIL)
    monkeypatch.setenv("GCS_IMAGES_BUCKET_NAME", "test-images")
    monkeypatch.setenv("GCS_FILES_BUCKET_NAME", "test-files")
    app = create_app(f"sqlite:///{tmp_path / 'showcase.db'}")
    app.config["TESTING"] = True

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gcs():
    # Storage client double, records buckets and object paths
    with patch("services.storage.storage.Client") as client_cls:
        yield client_cls


@pytest.fixture
def make_user(app):
    def _make_user(email, full_name = "Student", password = PASSWORD):
        user = UserModel(email = email, password = pbkdf2_sha256.hash(password), full_name = full_name)
        user.profile = ProfileModel(full_name = full_name)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def make_project(app):
    def _make_project(owner, title = "Project", department = "Engineering", **fields):
        project = ProjectModel(
            user_id = owner.id,
            title = title,
            description = fields.pop("description", "A student project"),
            department = department,
            creator_name = fields.pop("creator_name", owner.display_name),
            file_url = fields.pop("file_url", "https://storage.googleapis.com/test-images/x.png"),
            files_urls = fields.pop("files_urls", ["https://storage.googleapis.com/test-images/x.png"]),
            **fields
        )
        db.session.add(project)
        db.session.flush()
        db.session.add(CollaboratorModel(project_id = project.id, user_id = owner.id, role = ROLE_OWNER))
        db.session.commit()
        return project
    return _make_project


@pytest.fixture
def login(client):
    # Returns Authorization headers for an existing user
    def _login(email, password = PASSWORD):
        response = client.post("/login", json = {"email": email, "password": password})
        assert response.status_code == 200, response.get_json()
        return {"Authorization": f"Bearer {response.get_json()['access_token']}"}
    return _login


def make_file(name, content_type, size = 16):
    return FileStorage(stream = io.BytesIO(b"x" * size), filename = name, content_type = content_type)
