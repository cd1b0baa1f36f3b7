import pytest

from db import db
from models import RatingModel, LikeModel, ReviewModel
from services import engagement
from services.errors import SelfInteractionError, SubmissionError


@pytest.fixture
def people(make_user):
    return {
        "owner": make_user("1001@horus.edu.eg", "Alice Owner"),
        "rater": make_user("1002@horus.edu.eg", "Bob Rater"),
        "reviewer": make_user("1003@horus.edu.eg", "Carol Reviewer"),
    }


@pytest.fixture
def project(people, make_project):
    return make_project(people["owner"], title = "Solar Car")


def test_average_of_no_ratings_is_zero():
    assert engagement.average([]) == 0.0


def test_average_is_arithmetic_mean():
    assert engagement.average([5, 4, 3, 4]) == 4.0
    assert engagement.average(iter([1, 2])) == 1.5


def test_rating_aggregate_without_rows(project, people):
    aggregate = engagement.rating_aggregate(project.id, people["rater"].id)
    assert aggregate == {"count": 0, "average": 0.0, "mine": None}


def test_rating_twice_keeps_one_row_with_latest_value(project, people):
    engagement.submit_rating(project.id, people["rater"], 4)
    aggregate = engagement.submit_rating(project.id, people["rater"], 2)

    rows = RatingModel.query.filter_by(project_id = project.id, user_id = people["rater"].id).all()
    assert len(rows) == 1
    assert rows[0].rating == 2
    assert aggregate["count"] == 1
    assert aggregate["average"] == 2.0
    assert aggregate["mine"] == 2


def test_new_rating_has_matching_timestamps(project, people):
    engagement.submit_rating(project.id, people["rater"], 4)
    row = RatingModel.query.filter_by(project_id = project.id, user_id = people["rater"].id).one()
    assert row.updated_at == row.created_at

    engagement.submit_rating(project.id, people["rater"], 5)
    row = RatingModel.query.filter_by(project_id = project.id, user_id = people["rater"].id).one()
    assert row.updated_at > row.created_at


def test_average_over_several_raters(project, people):
    engagement.submit_rating(project.id, people["rater"], 5)
    aggregate = engagement.submit_rating(project.id, people["reviewer"], 2)

    assert aggregate["count"] == 2
    assert aggregate["average"] == 3.5
    assert engagement.rating_aggregate(project.id)["mine"] is None


def test_rating_out_of_range_is_rejected(project, people):
    with pytest.raises(SubmissionError):
        engagement.submit_rating(project.id, people["rater"], 6)


def test_like_toggled_twice_leaves_no_row(project, people):
    liked = engagement.toggle_like(project.id, people["rater"])
    assert liked == {"count": 1, "mine": True}

    unliked = engagement.toggle_like(project.id, people["rater"])
    assert unliked == {"count": 0, "mine": False}
    assert LikeModel.query.filter_by(project_id = project.id).count() == 0


def test_remove_like_without_row_is_noop(project, people):
    assert engagement.remove_like(project.id, people["rater"]) == {"count": 0, "mine": False}


@pytest.mark.parametrize("operation, args", [
    (engagement.submit_rating, (5,)),
    (engagement.toggle_like, ()),
    (engagement.submit_review, ("Nice",)),
])
def test_owner_cannot_engage_with_own_project(project, people, operation, args):
    with pytest.raises(SelfInteractionError):
        operation(project.id, people["owner"], *args)

    assert engagement.rating_aggregate(project.id)["count"] == 0
    assert engagement.like_aggregate(project.id)["count"] == 0
    assert engagement.review_aggregate(project.id)["count"] == 0


def test_review_edit_keeps_count_and_moves_updated_at(project, people):
    created = engagement.submit_review(project.id, people["reviewer"], "Great work")
    assert created["count"] == 1
    fresh = created["mine"]
    # A review that was never edited is not shown as edited
    assert fresh.updated_at == fresh.created_at

    edited = engagement.submit_review(project.id, people["reviewer"], "  Even better ")
    assert edited["count"] == 1
    review = edited["mine"]
    assert review.comment == "Even better"
    assert review.updated_at != review.created_at


def test_blank_review_is_rejected(project, people):
    with pytest.raises(SubmissionError):
        engagement.submit_review(project.id, people["reviewer"], "   ")


def test_remove_review(project, people):
    engagement.submit_review(project.id, people["reviewer"], "Great work")
    aggregate = engagement.remove_review(project.id, people["reviewer"])

    assert aggregate["count"] == 0
    assert aggregate["mine"] is None
    assert ReviewModel.query.count() == 0
    # Second delete does nothing
    assert engagement.remove_review(project.id, people["reviewer"])["count"] == 0


def test_project_stats(project, people):
    engagement.submit_rating(project.id, people["rater"], 3)
    engagement.toggle_like(project.id, people["reviewer"])
    engagement.submit_review(project.id, people["reviewer"], "Solid")

    stats = engagement.project_stats(project.id)
    assert stats["title"] == "Solar Car"
    assert stats["total_ratings"] == 1
    assert stats["average_rating"] == 3.0
    assert stats["total_likes"] == 1
    assert stats["total_reviews"] == 1


# --- Over HTTP ---

def test_end_to_end_engagement(client, project, people, login):
    bob = login("1002@horus.edu.eg")
    carol = login("1003@horus.edu.eg")
    url = f"/projects/{project.id}"

    assert client.put(f"{url}/ratings", json = {"rating": 4}, headers = bob).status_code == 200
    response = client.put(f"{url}/ratings", json = {"rating": 2}, headers = bob)
    assert response.get_json() == {"count": 1, "average": 2.0, "mine": 2}

    assert client.post(f"{url}/likes", headers = bob).get_json()["count"] == 1
    assert client.post(f"{url}/likes", headers = bob).get_json()["count"] == 0

    response = client.put(f"{url}/reviews", json = {"comment": "Great work"}, headers = carol)
    assert response.get_json()["count"] == 1
    first = response.get_json()["mine"]
    assert first["updated_at"] == first["created_at"]
    response = client.put(f"{url}/reviews", json = {"comment": "Even better"}, headers = carol)
    body = response.get_json()
    assert body["count"] == 1
    assert body["mine"]["comment"] == "Even better"
    assert body["mine"]["reviewer_name"] == "Carol Reviewer"
    assert body["mine"]["updated_at"] != body["mine"]["created_at"]


def test_owner_gets_403_and_aggregate_is_unchanged(client, project, login):
    alice = login("1001@horus.edu.eg")
    url = f"/projects/{project.id}"

    response = client.put(f"{url}/ratings", json = {"rating": 5}, headers = alice)
    assert response.status_code == 403
    assert client.post(f"{url}/likes", headers = alice).status_code == 403

    assert client.get(f"{url}/ratings").get_json() == {"count": 0, "average": 0.0, "mine": None}
    assert client.get(f"{url}/likes").get_json() == {"count": 0, "mine": False}


def test_anonymous_read_and_signed_in_mine(client, project, people, login):
    engagement.submit_rating(project.id, people["rater"], 5)
    db.session.commit()

    assert client.get(f"/projects/{project.id}/ratings").get_json()["mine"] is None
    bob = login("1002@horus.edu.eg")
    assert client.get(f"/projects/{project.id}/ratings", headers = bob).get_json()["mine"] == 5


def test_rating_requires_login(client, project):
    response = client.put(f"/projects/{project.id}/ratings", json = {"rating": 3})
    assert response.status_code == 401


def test_invalid_rating_payload_is_422(client, project, login):
    bob = login("1002@horus.edu.eg")
    response = client.put(f"/projects/{project.id}/ratings", json = {"rating": 9}, headers = bob)
    assert response.status_code == 422


def test_engagement_on_missing_project_is_404(client, people, login):
    bob = login("1002@horus.edu.eg")
    assert client.get("/projects/999/ratings").status_code == 404
    assert client.post("/projects/999/likes", headers = bob).status_code == 404
