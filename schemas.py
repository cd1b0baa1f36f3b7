import re

from flask import current_app
from marshmallow import Schema, fields, validate, validates, validates_schema, ValidationError

from services.catalog import SORT_KEYS, SORT_NEWEST
from services.collaboration import EMAIL_PATTERN

# --- Plain Schemas: Core attributes, for basic input / ID assignments ---

class PlainUserSchema(Schema):
    id = fields.Int(dump_only = True)
    email = fields.Str(dump_only = True)
    full_name = fields.Str(dump_only = True)

# Sign-up, with the profile data collected on the same form
class RegisterSchema(Schema):
    email = fields.Str(required = True, validate = validate.Length(max = 255))
    # Passwords are load_only, so they're never dumped
    password = fields.Str(required = True, load_only = True, validate = validate.Length(min = 6, max = 256))
    confirm_password = fields.Str(required = True, load_only = True)
    full_name = fields.Str(required = True, validate = validate.Length(min = 1, max = 120))
    major = fields.Str(load_default = None, validate = validate.Length(max = 120))
    student_id = fields.Str(load_default = None, validate = validate.Length(max = 40))

    @validates("email")
    def validate_institutional_email(self, value, **kwargs):
        domain = current_app.config["INSTITUTION_EMAIL_DOMAIN"]
        pattern = rf"^[a-zA-Z0-9]+@{re.escape(domain)}$"
        if not re.match(pattern, value.strip(), re.IGNORECASE):
            raise ValidationError(f"Please use your institutional email address (e.g. 8241106@{domain})")

    @validates_schema
    def validate_passwords_match(self, data, **kwargs):
        if data.get("password") != data.get("confirm_password"):
            raise ValidationError("Please ensure both passwords match", field_name = "confirm_password")

class LoginSchema(Schema):
    email = fields.Str(required = True)
    password = fields.Str(required = True, load_only = True)

class MeSchema(PlainUserSchema):
    is_admin = fields.Bool(dump_only = True)

class ProfileSchema(Schema):
    user_id = fields.Int(dump_only = True)
    full_name = fields.Str(allow_none = True, validate = validate.Length(max = 120))
    major = fields.Str(allow_none = True, validate = validate.Length(max = 120))
    department = fields.Str(allow_none = True, validate = validate.Length(max = 120))
    student_id = fields.Str(allow_none = True, validate = validate.Length(max = 40))
    updated_at = fields.DateTime(dump_only = True, allow_none = True)

# Project rows as stored
class PlainProjectSchema(Schema):
    id = fields.Int(dump_only = True)
    title = fields.Str(dump_only = True)
    description = fields.Str(dump_only = True)
    department = fields.Str(dump_only = True)
    level = fields.Int(dump_only = True)
    creator_name = fields.Str(dump_only = True, allow_none = True)
    file_url = fields.Str(dump_only = True, allow_none = True)
    files_urls = fields.List(fields.Str(), dump_only = True)
    video_url = fields.Str(dump_only = True, allow_none = True)
    github_url = fields.Str(dump_only = True, allow_none = True)
    user_id = fields.Int(dump_only = True)
    created_at = fields.DateTime(dump_only = True)

# Multipart form fields of the upload / edit form
# Required fields are checked by the submission service, so an edit can send only what changed
class ProjectFormSchema(Schema):
    title = fields.Str(validate = validate.Length(max = 200))
    description = fields.Str(validate = validate.Length(max = 5000))
    department = fields.Str(validate = validate.Length(max = 120))
    level = fields.Int(allow_none = True, validate = validate.Range(min = 0, max = 5))
    video_url = fields.Str(validate = validate.Length(max = 1024))
    github_url = fields.Str(validate = validate.Length(max = 1024))

class CatalogQuerySchema(Schema):
    search = fields.Str(load_default = None)
    department = fields.Str(load_default = None)
    level = fields.Int(load_default = None, validate = validate.Range(min = 0, max = 5))
    sort = fields.Str(load_default = SORT_NEWEST, validate = validate.OneOf(SORT_KEYS))

# --- Engagement ---

class RatingInputSchema(Schema):
    rating = fields.Int(required = True, strict = True, validate = validate.Range(min = 1, max = 5))

class RatingAggregateSchema(Schema):
    count = fields.Int()
    average = fields.Float()
    mine = fields.Int(allow_none = True)

class LikeAggregateSchema(Schema):
    count = fields.Int()
    mine = fields.Bool()

class ReviewInputSchema(Schema):
    comment = fields.Str(required = True, validate = validate.Length(min = 1, max = 5000))

class ReviewSchema(Schema):
    id = fields.Int(dump_only = True)
    project_id = fields.Int(dump_only = True)
    user_id = fields.Int(dump_only = True)
    reviewer_name = fields.Function(lambda review: review.user.display_name if review.user else None)
    comment = fields.Str(dump_only = True)
    created_at = fields.DateTime(dump_only = True)
    updated_at = fields.DateTime(dump_only = True)

class ReviewAggregateSchema(Schema):
    count = fields.Int()
    mine = fields.Nested(ReviewSchema(), allow_none = True)
    reviews = fields.List(fields.Nested(ReviewSchema()))

# --- Full Schemas: project plus its derived numbers ---

class ProjectSummarySchema(Schema):
    project = fields.Nested(PlainProjectSchema())
    average_rating = fields.Float()
    total_ratings = fields.Int()
    total_likes = fields.Int()
    total_reviews = fields.Int()

class ProjectStatsSchema(Schema):
    id = fields.Int()
    title = fields.Str()
    creator_name = fields.Str(allow_none = True)
    average_rating = fields.Float()
    total_ratings = fields.Int()
    total_likes = fields.Int()
    total_reviews = fields.Int()

class OverallStatsSchema(Schema):
    total_ratings = fields.Int()
    total_likes = fields.Int()
    total_reviews = fields.Int()
    average_rating = fields.Float()

# --- Collaboration ---

class CollaboratorSchema(Schema):
    id = fields.Int(dump_only = True)
    project_id = fields.Int(dump_only = True)
    user_id = fields.Int(dump_only = True)
    role = fields.Str(dump_only = True)
    display_name = fields.Function(lambda collaborator: collaborator.user.display_name if collaborator.user else None)
    created_at = fields.DateTime(dump_only = True)

class InviteCreateSchema(Schema):
    email = fields.Str(required = True, validate = validate.Regexp(EMAIL_PATTERN, error = "Please enter a valid email address"))

class InviteSchema(Schema):
    id = fields.Int(dump_only = True)
    project_id = fields.Int(dump_only = True)
    inviter_id = fields.Int(dump_only = True)
    invitee_email = fields.Str(dump_only = True)
    status = fields.Str(dump_only = True)
    created_at = fields.DateTime(dump_only = True)
    project_title = fields.Function(lambda invite: invite.project.title)
    # Falls back to the owner's name for projects saved without one
    creator_name = fields.Function(lambda invite: invite.project.creator_name or invite.project.user.display_name)

class ProjectDetailSchema(ProjectSummarySchema):
    collaborators = fields.List(fields.Nested(CollaboratorSchema()))
    is_owner = fields.Bool()

# --- Admin and contact ---

class AdminDashboardSchema(Schema):
    total_projects = fields.Int()
    total_students = fields.Int()
    this_month_uploads = fields.Int()
    departments = fields.Dict(keys = fields.Str(), values = fields.Int())
    total_ratings = fields.Int()
    total_likes = fields.Int()
    total_reviews = fields.Int()
    average_rating = fields.Float()
    projects = fields.List(fields.Nested(ProjectSummarySchema()))

class ContactSchema(Schema):
    name = fields.Str(required = True, validate = validate.Length(min = 1, max = 120))
    email = fields.Email(required = True)
    subject = fields.Str(required = True, validate = validate.Length(min = 1, max = 200))
    message = fields.Str(required = True, validate = validate.Length(min = 1, max = 5000))
