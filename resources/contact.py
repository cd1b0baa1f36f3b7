'''
----------------------------
Contact form
USER INTERACTION
----------------------------
'''

import logging

from flask.views import MethodView
from flask_smorest import Blueprint

from schemas import ContactSchema

logger = logging.getLogger(__name__)

blp = Blueprint("contact", __name__, description = "Contact messages from visitors")

@blp.route("/contact")
class ContactMessage(MethodView):
    @blp.arguments(ContactSchema)
    def post(self, message_data):
        logger.info(
            "Contact message from %s <%s>: %s",
            message_data["name"],
            message_data["email"],
            message_data["subject"]
        )
        return {"message": "Thank you for contacting us. We'll get back to you soon."}, 202
