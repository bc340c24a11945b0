"""Auth Service - Session resolution, role lookup and sign-in"""
from typing import Optional, Tuple

import bcrypt

from ..domain.models import Profile, SessionIdentity
from ..domain.enums import Role, Portal
from ..domain.errors import (
    AuthenticationError, AuthorizationError, NotFoundError, UpstreamError, ValidationError
)
from ..repositories.profile_repo import ProfileRepository
from ..utils.jwt import SessionTokenCodec
from ..utils.idgen import generate_user_id
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)

BCRYPT_ROUNDS = 12

# bcrypt only reads the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt

    Raises:
        ValidationError: Password is empty or longer than bcrypt can hash
    """
    encoded = password.encode("utf-8")
    if not encoded:
        raise ValidationError("Password cannot be empty")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a password against a stored bcrypt hash; malformed hashes never match"""
    encoded = password.encode("utf-8")
    if not password_hash or not encoded or len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


class AuthService:
    """
    Identity collaborator for the access gate and the API.

    resolve_session never raises: any failure means anonymous.
    get_role raises so callers can fail closed.
    """

    def __init__(self, codec: SessionTokenCodec, profiles: ProfileRepository):
        self._codec = codec
        self._profiles = profiles

    def resolve_session(self, token: Optional[str]) -> Optional[SessionIdentity]:
        """Resolve a session token to an identity, or None for anonymous"""
        if not token:
            return None
        try:
            return self._codec.identity(token)
        except AuthenticationError:
            return None
        except Exception as e:
            logger.error(f"Unexpected error resolving session: {e}", exc_info=True)
            return None

    async def get_profile(self, user_id: str) -> Profile:
        """
        Fetch the caller's profile

        Raises:
            ProfileNotFoundError: No profile for this user
            UpstreamError: The profile store failed
        """
        try:
            return await self._profiles.get_profile_or_raise(user_id)
        except NotFoundError:
            raise
        except Exception as e:
            logger.error(f"Profile lookup failed: {e}", extra={"user_id": user_id})
            raise UpstreamError("Could not fetch user profile", details={"reason": str(e)})

    async def get_role(self, user_id: str) -> Role:
        """Role of a user; raises on any lookup failure"""
        profile = await self.get_profile(user_id)
        return profile.role

    async def authenticate(
        self,
        email: str,
        password: str,
        portal: Portal = Portal.CUSTOMER
    ) -> Tuple[Profile, str]:
        """
        Verify credentials and issue a session token

        The employee portal is only for support and admin staff.

        Returns:
            (profile, session token)
        """
        profile = await self._profiles.get_by_email(email)
        if not profile or not verify_password(password, profile.password_hash):
            logger.info("Sign-in rejected: bad credentials")
            raise AuthenticationError("Invalid email or password")

        if portal == Portal.EMPLOYEE and not profile.role.is_staff:
            logger.info("Customer attempted employee sign-in", extra={"user_id": profile.user_id})
            raise AuthorizationError("Employee portal is only for admin and support staff")

        token = self._codec.issue(profile.user_id, profile.email)
        logger.info("Signed in", extra={"user_id": profile.user_id, "role": profile.role.value})
        return profile, token

    async def register_customer(self, email: str, password: str, full_name: str = "") -> Tuple[Profile, str]:
        """Create a customer profile and sign it in"""
        if len(password) < 8:
            raise ValidationError("Password must be at least 8 characters")

        now = utc_now()
        profile = Profile(
            user_id=generate_user_id(),
            email=email.lower(),
            full_name=full_name,
            role=Role.CUSTOMER,
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
        )
        await self._profiles.create_profile(profile)
        return profile, self._codec.issue(profile.user_id, profile.email)
