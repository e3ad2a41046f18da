# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication and user administration.

One password contract: bcrypt hash on write, bcrypt.checkpw on login.
There is no plaintext comparison path.
"""

import logging
import re

import bcrypt

from ..errors import AuthError, DuplicateError, NotFoundError, ValidationError
from ..extensions import db
from ..models import SessionToken, Transaction, User
from ..permissions import ROLES, normalize_role
from ..time_utils import utcnow
from . import session_service

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Validate strength, then hash with bcrypt."""
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check password against a bcrypt hash.

    bcrypt.checkpw compares in constant time. A malformed stored hash
    (e.g. a legacy plaintext value) never matches.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


def validate_role(role: str | None) -> str:
    normalized = normalize_role(role)
    if normalized not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    return normalized


def create_user(username: str, password: str, role: str = "cashier", rounds: int = BCRYPT_ROUNDS) -> User:
    """
    Create a staff user with a bcrypt password hash.

    Raises:
        ValidationError: blank username, weak password, or unknown role
        DuplicateError: username already taken
    """
    username = (username or "").strip()
    if not username:
        raise ValidationError("username is required")
    role = validate_role(role)

    if db.session.query(User).filter_by(username=username).first():
        raise DuplicateError("Username already exists", details={"username": username})

    user = User(username=username, password_hash=hash_password(password, rounds=rounds), role=role)
    db.session.add(user)
    db.session.commit()
    logger.info("Created user %s with role %s", username, role)
    return user


def authenticate(username: str, password: str) -> User:
    """
    Check credentials and return the user.

    Raises AuthError with the same message for an unknown user, an inactive
    user, and a wrong password.
    """
    user = db.session.query(User).filter_by(username=(username or "").strip()).first()

    if not user or not user.is_active or not verify_password(password or "", user.password_hash):
        raise AuthError("Invalid username or password")

    user.last_login_at = utcnow()
    db.session.commit()
    return user


def list_users() -> list[dict]:
    return [u.to_dict() for u in db.session.query(User).order_by(User.username.asc()).all()]


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found", details={"id": user_id})
    return user


def update_role(user_id: int, role: str) -> User:
    """Change a user's role; live sessions are revoked so the new role applies at next login."""
    user = get_user(user_id)
    user.role = validate_role(role)
    db.session.commit()
    session_service.revoke_all_user_sessions(user.id, reason="Role changed")
    return user


def delete_user(user_id: int, acting_user_id: int | None = None) -> None:
    """
    Delete a user.

    Users referenced by transactions keep the history attributable and
    cannot be deleted; deactivate them instead.
    """
    user = get_user(user_id)
    if acting_user_id is not None and user.id == acting_user_id:
        raise ValidationError("You cannot delete your own account")

    has_history = db.session.query(Transaction.id).filter_by(cashier_id=user.id).first()
    if has_history:
        raise ValidationError("User has transactions; deactivate the account instead")

    db.session.query(SessionToken).filter_by(user_id=user.id).delete(synchronize_session=False)
    db.session.delete(user)
    db.session.commit()


def set_active(user_id: int, is_active: bool) -> User:
    user = get_user(user_id)
    user.is_active = bool(is_active)
    db.session.commit()
    if not user.is_active:
        session_service.revoke_all_user_sessions(user.id, reason="User deactivated")
    return user
