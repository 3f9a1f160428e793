#======================================================================================
#
#   ACCESS CONTROL: bearer tokens for the admin console and the tier gate
#
#======================================================================================
from datetime import timedelta
from functools import wraps

import jwt
from flask import current_app, g, jsonify
from flask_login import current_user, login_required

from exceptions import AuthError, ForbiddenError
from extensions import db, login_manager
from models import Member, ELEVATED_TIERS
from utils import utcnow
import logging

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


class TokenService:
    """Issues and verifies signed member tokens."""

    def __init__(self, secret, expires_hours=24):
        if not secret:
            raise ValueError("A token signing secret is required")
        self.secret = secret
        self.expires_in = timedelta(hours=expires_hours)

    def issue(self, member_id):
        now = utcnow()
        payload = {
            "memberId": member_id,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token):
        try:
            return jwt.decode(token, self.secret, algorithms=[TOKEN_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthError("Token expired")
        except jwt.InvalidTokenError:
            raise AuthError("Invalid token")


def get_token_service():
    return current_app.extensions["token_service"]


def generate_token(member_id):
    return get_token_service().issue(member_id)


def bearer_token(req):
    auth_header = req.headers.get("Authorization", "")
    parts = auth_header.split(" ")
    return parts[1] if len(parts) > 1 and parts[1] else None


def authenticate_request(req):
    """Resolve the member behind the request's bearer token or raise AuthError."""
    token = bearer_token(req)
    if not token:
        raise AuthError("Access token required")

    payload = get_token_service().verify(token)
    member_id = payload.get("memberId")
    member = db.session.get(Member, member_id) if isinstance(member_id, int) else None

    if not member or not member.is_active:
        raise AuthError("Invalid or inactive member")
    return member


def is_elevated(member):
    # Placeholder policy: the upper membership tiers double as admins
    return member is not None and member.membership_type in ELEVATED_TIERS


#-------------------------------------------------------------------------------------
#      FLASK-LOGIN WIRING
#-------------------------------------------------------------------------------------
@login_manager.request_loader
def load_member_from_request(req):
    try:
        return authenticate_request(req)
    except AuthError as e:
        g.auth_error = e.message
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": g.get("auth_error", "Authentication required")}), 401


def admin_required(f):
    """
    Decorator to restrict access to admin-only routes.
    - Requires a valid bearer token (401 otherwise).
    - Requires an elevated membership tier (403 otherwise).
    """
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not is_elevated(current_user):
            logger.warning(f"Admin access denied for member {current_user.id}")
            error = ForbiddenError("Admin access required")
            return jsonify(error.to_response()), error.status_code
        return f(*args, **kwargs)

    return decorated_function
