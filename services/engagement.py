'''
----------------------------
Ratings, likes and reviews
Aggregates are recomputed from raw rows on every call
----------------------------
'''

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from db import db
from models import ProjectModel, RatingModel, LikeModel, ReviewModel
from services.errors import SelfInteractionError, SubmissionError

logger = logging.getLogger(__name__)


def average(values):
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def _project_or_404(project_id):
    return ProjectModel.query.filter_by(id = project_id).first_or_404(description = "Project not found")


def _ensure_not_owner(project, principal, action):
    if principal.id == project.user_id:
        raise SelfInteractionError(f"You cannot {action} your own project")


def _commit(action, project_id, principal_id):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to %s project %s for user %s", action, project_id, principal_id)
        raise


# --- Ratings ---

def rating_aggregate(project_id, principal_id = None):
    _project_or_404(project_id)
    rows = RatingModel.query.filter_by(project_id = project_id).all()
    mine = None
    if principal_id is not None:
        mine = next((row.rating for row in rows if row.user_id == principal_id), None)
    return {
        "count": len(rows),
        "average": average(row.rating for row in rows),
        "mine": mine,
    }


def submit_rating(project_id, principal, rating):
    project = _project_or_404(project_id)
    _ensure_not_owner(project, principal, "rate")
    if not isinstance(rating, int) or not 1 <= rating <= 5:
        raise SubmissionError("Rating must be between 1 and 5")

    now = datetime.now(timezone.utc)
    row = RatingModel.query.filter_by(project_id = project_id, user_id = principal.id).first()
    if row is None:
        # Both stamps from one clock read, updated_at only moves on edit
        db.session.add(RatingModel(
            project_id = project_id, user_id = principal.id, rating = rating, created_at = now, updated_at = now
        ))
    else:
        # Last write wins
        row.rating = rating
        row.updated_at = now
    _commit("rate", project_id, principal.id)
    return rating_aggregate(project_id, principal.id)


# --- Likes ---

def like_aggregate(project_id, principal_id = None):
    _project_or_404(project_id)
    rows = LikeModel.query.filter_by(project_id = project_id).all()
    return {
        "count": len(rows),
        "mine": principal_id is not None and any(row.user_id == principal_id for row in rows),
    }


def toggle_like(project_id, principal):
    # Insert when absent, delete when present
    project = _project_or_404(project_id)
    _ensure_not_owner(project, principal, "like")

    row = LikeModel.query.filter_by(project_id = project_id, user_id = principal.id).first()
    if row is None:
        db.session.add(LikeModel(project_id = project_id, user_id = principal.id))
    else:
        db.session.delete(row)
    _commit("like", project_id, principal.id)
    return like_aggregate(project_id, principal.id)


def remove_like(project_id, principal):
    _project_or_404(project_id)
    row = LikeModel.query.filter_by(project_id = project_id, user_id = principal.id).first()
    if row is not None:
        db.session.delete(row)
        _commit("unlike", project_id, principal.id)
    return like_aggregate(project_id, principal.id)


# --- Reviews ---

def review_aggregate(project_id, principal_id = None):
    _project_or_404(project_id)
    rows = (
        ReviewModel.query.filter_by(project_id = project_id)
        .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
        .all()
    )
    mine = None
    if principal_id is not None:
        mine = next((row for row in rows if row.user_id == principal_id), None)
    return {
        "count": len(rows),
        "mine": mine,
        "reviews": rows,
    }


def submit_review(project_id, principal, comment):
    project = _project_or_404(project_id)
    _ensure_not_owner(project, principal, "review")
    comment = (comment or "").strip()
    if not comment:
        raise SubmissionError("Please write a comment for your review")

    now = datetime.now(timezone.utc)
    row = ReviewModel.query.filter_by(project_id = project_id, user_id = principal.id).first()
    if row is None:
        db.session.add(ReviewModel(
            project_id = project_id, user_id = principal.id, comment = comment, created_at = now, updated_at = now
        ))
    else:
        row.comment = comment
        row.updated_at = now
    _commit("review", project_id, principal.id)
    return review_aggregate(project_id, principal.id)


def remove_review(project_id, principal):
    _project_or_404(project_id)
    row = ReviewModel.query.filter_by(project_id = project_id, user_id = principal.id).first()
    if row is not None:
        db.session.delete(row)
        _commit("delete review of", project_id, principal.id)
    return review_aggregate(project_id, principal.id)


# --- Combined ---

def project_stats(project_id):
    # Ratings, likes and reviews of one project
    project = _project_or_404(project_id)
    ratings = rating_aggregate(project_id)
    return {
        "id": project.id,
        "title": project.title,
        "creator_name": project.creator_name,
        "average_rating": ratings["average"],
        "total_ratings": ratings["count"],
        "total_likes": like_aggregate(project_id)["count"],
        "total_reviews": review_aggregate(project_id)["count"],
    }
