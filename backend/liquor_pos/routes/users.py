# Overview: Flask API routes for user administration; parses input and returns JSON responses.

# backend/liquor_pos/routes/users.py
"""
User administration (admin only).

Provides endpoints for:
- Listing and creating staff accounts
- Changing a user's role
- Deleting a user without transaction history
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_permission
from ..errors import POSError, error_response
from ..services import auth_service

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("MANAGE_USERS")
def list_users_route():
    return jsonify({"users": auth_service.list_users()})


@users_bp.post("")
@require_auth
@require_permission("MANAGE_USERS")
def create_user_route():
    """
    Create a new user.

    Request body:
    - username: str (required)
    - password: str (required, strength-checked)
    - role: str (optional) - admin, manager or cashier (default cashier)
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not all([username, password]):
            return jsonify({"error": "username and password required"}), 400

        user = auth_service.create_user(
            username,
            password,
            role=data.get("role") or "cashier",
            rounds=current_app.config["BCRYPT_ROUNDS"],
        )
        current_app.logger.info("User %s created by %s", user.username, g.session_context.username)

        return jsonify({"user": user.to_dict(), "message": "User created successfully"}), 201

    except POSError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.put("/<int:user_id>/role")
@require_auth
@require_permission("MANAGE_USERS")
def update_role_route(user_id: int):
    """Change a user's role. Their open sessions are revoked."""
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.update_role(user_id, data.get("role"))
    except POSError as e:
        return error_response(e)
    return jsonify({"user": user.to_dict()})


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def delete_user_route(user_id: int):
    try:
        auth_service.delete_user(user_id, acting_user_id=g.session_context.user_id)
    except POSError as e:
        return error_response(e)
    return jsonify({"ok": True}), 200
