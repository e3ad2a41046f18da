# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/liquor_pos/routes/auth.py
"""
Authentication API routes

- Login checks the bcrypt hash and returns a bearer token
- Logout revokes the token
- /me resolves the token to the current user and role permissions
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..errors import AuthError, error_response
from ..permissions import permissions_for_role
from ..services import auth_service
from ..services import session_service
from ..decorators import bearer_token, require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    username = None
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        user = auth_service.authenticate(username, password)

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return jsonify({
            "user": user.to_dict(),
            "permissions": permissions_for_role(user.role),
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful"
        }), 200

    except AuthError as e:
        current_app.logger.info("Failed login for %r", username)
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """Revoke session token (logout). Expects Authorization: Bearer <token>."""
    try:
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authorization header required"}), 401

        revoked = session_service.revoke_session(token, reason="User logout")

        if not revoked:
            return jsonify({"error": "Invalid or expired token"}), 401

        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user plus the permission codes of their role (for UI filtering)."""
    return jsonify({
        "user": g.current_user.to_dict(),
        "permissions": permissions_for_role(g.session_context.role),
    }), 200
