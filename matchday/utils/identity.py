"""
Identity resolution for API requests.

Tokens are verified by the backend-for-frontend, which forwards the stable
user id in a header. Flask-Login turns that header into current_user.
"""

import logging

from flask import current_app, jsonify, request

from matchday.models import User

logger = logging.getLogger(__name__)


def register_identity_loader(app, login_manager):
    header_name = app.config.get("USER_ID_HEADER", "X-User-Id")

    @login_manager.request_loader
    def load_user_from_request(req):
        user_id = (req.headers.get(header_name) or "").strip()
        if not user_id or len(user_id) > 36:
            return None
        return User.find(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        logger.info(f"Unauthorized request to {request.path}")
        return (
            jsonify(
                {
                    "error": "unauthorized",
                    "message": f"A known user id is required in the {header_name} header",
                    "retryable": False,
                }
            ),
            401,
        )


def forwarded_user_id():
    """Raw user id from the forwarding header, registered or not"""
    header_name = current_app.config.get("USER_ID_HEADER", "X-User-Id")
    return (request.headers.get(header_name) or "").strip()
