"""JWT authentication with HS256 signing.

Tokens are signed with the shared ``settings.jwt_secret_key``. The ``sub``
claim carries the numeric user id that audit rows are attributed to.
"""
from datetime import datetime, timedelta
from typing import Dict, Optional

import jwt

from mssp.config import settings


class JWTAuth:
    """JWT authentication handler with symmetric signing."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        self.secret_key = secret_key or settings.jwt_secret_key
        self.algorithm = algorithm or settings.jwt_algorithm
        self.access_token_expire_minutes = access_token_expire_minutes or settings.access_token_expire_minutes

    def create_access_token(
        self,
        user_id: int,
        username: str,
        role: str,
        additional_claims: Optional[Dict] = None,
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User primary key
            username: Login name
            role: User role (admin, manager, engineer, user)
            additional_claims: Additional JWT claims

        Returns:
            Encoded JWT token
        """
        now = datetime.utcnow()
        expire = now + timedelta(minutes=self.access_token_expire_minutes)

        claims = {
            "sub": str(user_id),
            "username": username,
            "role": role,
            "iat": now,
            "exp": expire,
            "type": "access",
        }

        if additional_claims:
            claims.update(additional_claims)

        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> Dict:
        """
        Verify and decode JWT token.

        Raises:
            jwt.ExpiredSignatureError: If token is expired
            jwt.InvalidTokenError: If token is invalid
        """
        return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])

    def verify_access_token(self, token: str) -> Dict:
        """
        Verify access token specifically.

        Raises:
            jwt.InvalidTokenError: If not an access token or ``sub`` is not a user id
        """
        payload = self.verify_token(token)

        if payload.get("type") != "access":
            raise jwt.InvalidTokenError("Not an access token")

        if not str(payload.get("sub", "")).isdigit():
            raise jwt.InvalidTokenError("Subject is not a user id")

        return payload


# Global JWT auth instance
jwt_auth = JWTAuth()
