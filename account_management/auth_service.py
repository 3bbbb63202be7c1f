"""
Authentication Service for Account Management
Handles password hashing, admin bootstrap and credential checks
"""
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import bcrypt
from sqlalchemy.orm import Session

from account_management.models import AdminUser
from core.logging import get_logger

logger = get_logger(__name__)

GENERATED_PASSWORD_BYTES = 18

# bcrypt only hashes the first 72 bytes and rejects longer input
BCRYPT_MAX_PASSWORD_BYTES = 72


@dataclass
class AdminBootstrapResult:
    """What ensure_admin_user did.

    ``generated_password`` is only set when a random password was created; it
    is never stored and must be shown to the operator exactly once.
    """

    created: bool
    username: str
    generated_password: Optional[str] = None


class AuthService:
    """Service for handling authentication operations"""

    @staticmethod
    def hash_password(password: str) -> str:
        """
        Hash a password using bcrypt

        Args:
            password: Plain text password

        Returns:
            str: Hashed password
        """
        salt = bcrypt.gensalt()
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its bcrypt hash"""
        password_bytes = plain_password.encode("utf-8")
        if len(password_bytes) > BCRYPT_MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))

    @staticmethod
    def generate_password() -> str:
        return secrets.token_urlsafe(GENERATED_PASSWORD_BYTES)

    @staticmethod
    def ensure_admin_user(db: Session, username: str, password: Optional[str] = None) -> AdminBootstrapResult:
        """
        Create the first administrator if no admin exists

        Uses the operator-supplied password when given; otherwise generates a
        random one and returns it so the caller can surface it once.
        """
        if db.query(AdminUser).count() > 0:
            return AdminBootstrapResult(created=False, username=username)

        generated = None
        if not password:
            generated = AuthService.generate_password()
            password = generated

        db.add(AdminUser(username=username, password_hash=AuthService.hash_password(password)))
        db.commit()

        logger.info(f"Admin user '{username}' created ({'generated' if generated else 'operator-supplied'} password)")
        return AdminBootstrapResult(created=True, username=username, generated_password=generated)

    @staticmethod
    def authenticate(db: Session, username: str, password: str) -> Optional[AdminUser]:
        """Return the admin when the credentials match, else None"""
        admin = db.query(AdminUser).filter(AdminUser.username == username).first()
        if admin is None or not AuthService.verify_password(password, admin.password_hash):
            logger.warning(f"Failed admin login for '{username}'")
            return None

        admin.last_login_at = datetime.utcnow()
        db.commit()
        return admin
