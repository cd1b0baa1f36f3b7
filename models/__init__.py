# By having it in __init__.py, we can use "from models import UserModel, ProjectModel"
from models.user import UserModel
from models.profile import ProfileModel
from models.project import ProjectModel
from models.rating import RatingModel
from models.like import LikeModel
from models.review import ReviewModel
from models.collaborator import CollaboratorModel
from models.invite import InviteModel
from models.tokens_blocklist import TokenBlocklist
