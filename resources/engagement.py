'''
----------------------------
Ratings, likes and reviews
Every mutation answers with the recomputed aggregate
USER INTERACTIONS
----------------------------
'''

from flask.views import MethodView
from flask_smorest import Blueprint, abort
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import SQLAlchemyError

from schemas import (
    LikeAggregateSchema,
    RatingAggregateSchema,
    RatingInputSchema,
    ReviewAggregateSchema,
    ReviewInputSchema,
)
from services import engagement
from services.errors import ShowcaseError
from services.identity import current_principal, optional_principal

blp = Blueprint("engagement", __name__, description = "Ratings, likes and reviews on projects")


def _run(operation, *args):
    # Domain errors keep their status, store errors become a generic failure
    try:
        return operation(*args)
    except ShowcaseError as e:
        abort(e.status_code, message = e.message)
    except SQLAlchemyError:
        abort(500, message = "There was an error processing your request")


def _viewer_id():
    viewer = optional_principal()
    return viewer.id if viewer else None


@blp.route("/projects/<int:project_id>/ratings")
class ProjectRatings(MethodView):
    @jwt_required(optional = True)
    @blp.response(200, RatingAggregateSchema)
    def get(self, project_id):
        return _run(engagement.rating_aggregate, project_id, _viewer_id())

    # Replaces an earlier rating by the same user
    @jwt_required()
    @blp.arguments(RatingInputSchema)
    @blp.response(200, RatingAggregateSchema)
    def put(self, rating_data, project_id):
        return _run(engagement.submit_rating, project_id, current_principal(), rating_data["rating"])


@blp.route("/projects/<int:project_id>/likes")
class ProjectLikes(MethodView):
    @jwt_required(optional = True)
    @blp.response(200, LikeAggregateSchema)
    def get(self, project_id):
        return _run(engagement.like_aggregate, project_id, _viewer_id())

    # Toggle
    @jwt_required()
    @blp.response(200, LikeAggregateSchema)
    def post(self, project_id):
        return _run(engagement.toggle_like, project_id, current_principal())

    @jwt_required()
    @blp.response(200, LikeAggregateSchema)
    def delete(self, project_id):
        return _run(engagement.remove_like, project_id, current_principal())


@blp.route("/projects/<int:project_id>/reviews")
class ProjectReviews(MethodView):
    @jwt_required(optional = True)
    @blp.response(200, ReviewAggregateSchema)
    def get(self, project_id):
        return _run(engagement.review_aggregate, project_id, _viewer_id())

    # Creates or edits the caller's review
    @jwt_required()
    @blp.arguments(ReviewInputSchema)
    @blp.response(200, ReviewAggregateSchema)
    def put(self, review_data, project_id):
        return _run(engagement.submit_review, project_id, current_principal(), review_data["comment"])

    @jwt_required()
    @blp.response(200, ReviewAggregateSchema)
    def delete(self, project_id):
        return _run(engagement.remove_review, project_id, current_principal())
