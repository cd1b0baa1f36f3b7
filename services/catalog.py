'''
----------------------------
Project catalog: search, filter and sort
Every project carries its engagement aggregate
----------------------------
'''

from collections import defaultdict

from db import db
from models import ProjectModel, RatingModel, LikeModel, ReviewModel
from services.engagement import average

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_HIGHEST_RATED = "highest_rated"
SORT_MOST_LIKED = "most_liked"
SORT_KEYS = (SORT_NEWEST, SORT_OLDEST, SORT_HIGHEST_RATED, SORT_MOST_LIKED)

# Department values meaning "no filter"
ALL_DEPARTMENTS = {"", "all", "all majors", "all departments"}

TOP_MIN_RATINGS = 3
TOP_MIN_LIKES = 5
TOP_LIMIT = 5


def _engagement_rows(project_ids):
    # One query per engagement table for the whole set
    ratings = defaultdict(list)
    likes = defaultdict(int)
    reviews = defaultdict(int)
    if not project_ids:
        return ratings, likes, reviews

    for project_id, rating in db.session.query(RatingModel.project_id, RatingModel.rating).filter(
        RatingModel.project_id.in_(project_ids)
    ):
        ratings[project_id].append(rating)
    for (project_id,) in db.session.query(LikeModel.project_id).filter(LikeModel.project_id.in_(project_ids)):
        likes[project_id] += 1
    for (project_id,) in db.session.query(ReviewModel.project_id).filter(ReviewModel.project_id.in_(project_ids)):
        reviews[project_id] += 1
    return ratings, likes, reviews


def summarize(projects):
    '''
    Attach average_rating, total_ratings, total_likes and total_reviews
    to each project, preserving input order.
    '''
    ratings, likes, reviews = _engagement_rows([project.id for project in projects])
    summaries = []
    for project in projects:
        project_ratings = ratings.get(project.id, [])
        summaries.append({
            "project": project,
            "average_rating": average(project_ratings),
            "total_ratings": len(project_ratings),
            "total_likes": likes.get(project.id, 0),
            "total_reviews": reviews.get(project.id, 0),
        })
    return summaries


def _matches(summary, search, department, level):
    project = summary["project"]
    if search:
        needle = search.lower()
        haystacks = (project.title or "", project.creator_name or "")
        if not any(needle in text.lower() for text in haystacks):
            return False
    if department and department.strip().lower() not in ALL_DEPARTMENTS:
        if project.department != department:
            return False
    if level is not None and project.level != level:
        return False
    return True


def sort_summaries(summaries, sort = SORT_NEWEST):
    # sorted() is stable, ties keep their incoming order
    if sort == SORT_OLDEST:
        return sorted(summaries, key = lambda s: s["project"].created_at)
    if sort == SORT_HIGHEST_RATED:
        return sorted(summaries, key = lambda s: s["average_rating"], reverse = True)
    if sort == SORT_MOST_LIKED:
        return sorted(summaries, key = lambda s: s["total_likes"], reverse = True)
    return sorted(summaries, key = lambda s: s["project"].created_at, reverse = True)


def list_projects(search = None, department = None, level = None, sort = SORT_NEWEST):
    projects = ProjectModel.query.order_by(ProjectModel.id.asc()).all()
    summaries = [s for s in summarize(projects) if _matches(s, search, department, level)]
    return sort_summaries(summaries, sort)


def projects_of(user_id):
    projects = (
        ProjectModel.query.filter_by(user_id = user_id)
        .order_by(ProjectModel.created_at.desc(), ProjectModel.id.desc())
        .all()
    )
    return summarize(projects)


def top_projects():
    # Enough engagement to be meaningful, best average first, then most liked
    summaries = [
        s for s in summarize(ProjectModel.query.order_by(ProjectModel.id.asc()).all())
        if s["total_ratings"] >= TOP_MIN_RATINGS or s["total_likes"] >= TOP_MIN_LIKES
    ]
    summaries.sort(key = lambda s: (s["average_rating"], s["total_likes"]), reverse = True)
    return summaries[:TOP_LIMIT]


def overall_stats():
    ratings = [rating for (rating,) in db.session.query(RatingModel.rating)]
    return {
        "total_ratings": len(ratings),
        "total_likes": LikeModel.query.count(),
        "total_reviews": ReviewModel.query.count(),
        "average_rating": average(ratings),
    }
