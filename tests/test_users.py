from datetime import datetime, timedelta, timezone
from unittest.mock import patch

from conftest import ADMIN_EMAIL
from clean_up import cleanup_revoked_tokens
from db import db
from models import ProfileModel, TokenBlocklist, UserModel

SIGNUP = {
    "email": "8241106@horus.edu.eg",
    "password": "secret123",
    "confirm_password": "secret123",
    "full_name": "Youssef Adel",
    "major": "Computer Science",
    "student_id": "8241106",
}


def test_register_creates_user_and_profile(client):
    response = client.post("/register", json = SIGNUP)
    assert response.status_code == 201

    user = UserModel.query.filter_by(email = "8241106@horus.edu.eg").one()
    assert user.password != "secret123"
    assert user.profile.major == "Computer Science"
    assert user.profile.student_id == "8241106"


def test_register_requires_institutional_email(client):
    response = client.post("/register", json = dict(SIGNUP, email = "someone@gmail.com"))
    assert response.status_code == 422
    assert "email" in response.get_json()["errors"]["json"]


def test_register_rejects_password_mismatch_and_short_passwords(client):
    mismatch = client.post("/register", json = dict(SIGNUP, confirm_password = "other123"))
    assert mismatch.status_code == 422

    short = client.post("/register", json = dict(SIGNUP, password = "abc", confirm_password = "abc"))
    assert short.status_code == 422
    assert UserModel.query.count() == 0


def test_register_twice_is_a_conflict(client):
    client.post("/register", json = SIGNUP)
    response = client.post("/register", json = dict(SIGNUP, email = "8241106@HORUS.edu.eg"))
    assert response.status_code == 409


def test_login_me_and_logout(client):
    client.post("/register", json = SIGNUP)

    bad = client.post("/login", json = {"email": SIGNUP["email"], "password": "wrong-pass"})
    assert bad.status_code == 401

    token = client.post("/login", json = {"email": SIGNUP["email"], "password": "secret123"}).get_json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    me = client.get("/me", headers = headers).get_json()
    assert me["email"] == SIGNUP["email"]
    assert me["full_name"] == "Youssef Adel"
    assert me["is_admin"] is False

    assert client.post("/logout", headers = headers).status_code == 200
    revoked = client.get("/me", headers = headers)
    assert revoked.status_code == 401
    assert revoked.get_json()["error"] == "token_revoked"


def test_cleanup_removes_only_expired_blocklist_entries(app):
    old = datetime.now(timezone.utc) - timedelta(hours = 4)
    db.session.add(TokenBlocklist(jti = "old", created_at = old))
    db.session.add(TokenBlocklist(jti = "fresh"))
    db.session.commit()

    assert cleanup_revoked_tokens() == 1
    assert [row.jti for row in TokenBlocklist.query.all()] == ["fresh"]


def test_cleanup_task_requires_scheduler_token(client):
    assert client.post("/tasks/cleanup-revoked-tokens").status_code == 401

    with patch("resources.task.id_token.verify_oauth2_token", side_effect = ValueError("bad token")):
        response = client.post("/tasks/cleanup-revoked-tokens", headers = {"Authorization": "Bearer nope"})
    assert response.status_code == 401

    with patch("resources.task.id_token.verify_oauth2_token", return_value = {"email": "scheduler"}):
        response = client.post("/tasks/cleanup-revoked-tokens", headers = {"Authorization": "Bearer ok"})
    assert response.status_code == 200
    assert response.get_json()["removed"] == 0


# --- Profile ---

def test_missing_profile_is_empty_not_an_error(client, make_user, login):
    user = make_user("6001@horus.edu.eg", "No Profile")
    db.session.delete(user.profile)
    db.session.commit()

    response = client.get("/profile", headers = login("6001@horus.edu.eg"))
    assert response.status_code == 200
    assert response.get_json() == {"user_id": user.id}


def test_profile_upsert(client, make_user, login):
    user = make_user("6002@horus.edu.eg", "Old Name")
    db.session.delete(user.profile)
    db.session.commit()
    headers = login("6002@horus.edu.eg")

    first = client.put("/profile", json = {"full_name": "New Name", "major": "Arts"}, headers = headers)
    assert first.status_code == 200
    second = client.put("/profile", json = {"student_id": "6002"}, headers = headers)
    body = second.get_json()

    assert body["full_name"] == "New Name"
    assert body["major"] == "Arts"
    assert body["student_id"] == "6002"
    assert ProfileModel.query.filter_by(user_id = user.id).count() == 1


def test_profile_projects_are_newest_first(client, make_user, make_project, login):
    user = make_user("6003@horus.edu.eg", "Maker")
    other = make_user("6004@horus.edu.eg", "Other")
    make_project(user, title = "First")
    make_project(user, title = "Second")
    make_project(other, title = "Not mine")

    body = client.get("/profile/projects", headers = login("6003@horus.edu.eg")).get_json()
    assert [entry["project"]["title"] for entry in body] == ["Second", "First"]


# --- Admin ---

def test_admin_dashboard_requires_admin_claim(client, make_user, login):
    make_user("6005@horus.edu.eg", "Regular")
    assert client.get("/admin/dashboard").status_code == 401
    assert client.get("/admin/dashboard", headers = login("6005@horus.edu.eg")).status_code == 403


def test_admin_dashboard_aggregates(client, make_user, make_project, login):
    make_user(ADMIN_EMAIL, "Admin")
    student = make_user("6006@horus.edu.eg", "Student")
    make_project(student, department = "Engineering")
    make_project(student, department = "Engineering")
    make_project(student, department = "Arts")
    headers = login(ADMIN_EMAIL)

    assert client.get("/me", headers = headers).get_json()["is_admin"] is True
    response = client.get("/admin/dashboard", headers = headers)
    assert response.status_code == 200
    body = response.get_json()
    assert body["total_projects"] == 3
    assert body["total_students"] == 2
    assert body["this_month_uploads"] == 3
    assert body["departments"] == {"Engineering": 2, "Arts": 1}
    assert body["total_ratings"] == 0
    assert len(body["projects"]) == 3


# --- Contact ---

def test_contact_form(client):
    message = {"name": "Visitor", "email": "visitor@example.com", "subject": "Hello", "message": "Question"}
    assert client.post("/contact", json = message).status_code == 202
    assert client.post("/contact", json = dict(message, email = "not-an-email")).status_code == 422


def test_me_reports_the_same_admin_flag_as_the_dashboard_gate(app, client, make_user, login):
    make_user(ADMIN_EMAIL, "Admin")
    headers = login(ADMIN_EMAIL)

    # The flag travels in the token, a later config change does not split the two
    app.config["ADMIN_EMAIL"] = "someone-else@horus.edu.eg"
    assert client.get("/me", headers = headers).get_json()["is_admin"] is True
    assert client.get("/admin/dashboard", headers = headers).status_code == 200


def test_migrate_extension_is_registered(app):
    assert "migrate" in app.extensions
