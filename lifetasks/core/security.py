"""
Password hashing and bearer token utilities.
"""

from typing import Optional
from uuid import UUID

import bcrypt
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from lifetasks.core.config import settings


def hash_password(password: str) -> str:
    """
    Hash a plain password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hashed password as string
    """
    # Ensure password is not longer than 72 bytes (bcrypt limitation)
    password_bytes = password.encode('utf-8')[:72]
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: Plain text password from user input
        hashed_password: Previously hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8')
    return bcrypt.checkpw(password_bytes, hashed_bytes)


class TokenManager:
    """Issues and verifies signed bearer tokens."""

    salt = "lifetasks-access-token"

    def __init__(self, secret_key: Optional[str] = None, max_age_hours: Optional[int] = None):
        self.serializer = URLSafeTimedSerializer(secret_key or settings.SECRET_KEY, salt=self.salt)
        self.max_age = 60 * 60 * (max_age_hours or settings.ACCESS_TOKEN_EXPIRE_HOURS)

    def create_access_token(self, user_id: UUID, email: str) -> str:
        return self.serializer.dumps({"user_id": str(user_id), "email": email})

    def decode_access_token(self, token: str) -> Optional[dict]:
        """
        Verify and decode a token.

        Returns:
            Dict with user_id and email if valid, None otherwise
        """
        try:
            return self.serializer.loads(token, max_age=self.max_age)
        except (BadSignature, SignatureExpired):
            return None


# Global token manager instance
token_manager = TokenManager()
