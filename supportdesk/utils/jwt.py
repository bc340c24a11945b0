"""Session Token Issue and Validation"""
import jwt
from datetime import timedelta
from typing import Any, Dict, Optional

from ..domain.errors import AuthenticationError
from ..domain.models import SessionIdentity
from .logger import get_logger
from .time import utc_now

logger = get_logger(__name__)


class SessionTokenCodec:
    """Signs and validates the session tokens stored in the session cookie"""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_minutes: int = 720):
        if not secret:
            raise ValueError("Session secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = timedelta(minutes=ttl_minutes)

    def issue(self, user_id: str, email: str) -> str:
        """
        Issue a signed session token

        Args:
            user_id: Subject of the token
            email: User email, carried for logging

        Returns:
            Encoded JWT
        """
        now = utc_now()
        claims = {
            "sub": user_id,
            "email": email,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def decode(self, token: Optional[str]) -> Dict[str, Any]:
        """
        Validate a session token

        Args:
            token: Raw token (a 'Bearer ' prefix is tolerated)

        Returns:
            Decoded claims

        Raises:
            AuthenticationError: If token is missing, expired or invalid
        """
        if not token:
            raise AuthenticationError("Session token is missing")

        if token.startswith("Bearer "):
            token = token[7:]

        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.info("Session token expired")
            raise AuthenticationError("Session has expired")
        except jwt.PyJWTError as e:
            logger.warning(f"Session token rejected: {e}")
            raise AuthenticationError("Invalid session token")

    def identity(self, token: Optional[str]) -> SessionIdentity:
        """Decode a token into the identity it carries"""
        claims = self.decode(token)
        return SessionIdentity(user_id=claims["sub"], email=claims.get("email", ""))
