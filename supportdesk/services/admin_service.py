"""Admin Service - Business logic for admin operations"""
from typing import List

from ..domain.models import ActorContext, Profile
from ..domain.enums import Role
from ..domain.errors import AuthorizationError, ProfileNotFoundError, ValidationError
from ..repositories.profile_repo import ProfileRepository
from ..repositories.ticket_repo import TicketRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class AdminService:
    """Service for staff management"""

    def __init__(self, profiles: ProfileRepository, tickets: TicketRepository):
        self.profile_repo = profiles
        self.ticket_repo = tickets

    # =========================================================================
    # Access Checks
    # =========================================================================

    def require_admin(self, actor: ActorContext) -> None:
        if actor.role != Role.ADMIN:
            raise AuthorizationError("Admin access required", details={"user_id": actor.user_id})

    # =========================================================================
    # Staff
    # =========================================================================

    async def list_staff(self, actor: ActorContext) -> List[Profile]:
        """Support profiles, newest first"""
        self.require_admin(actor)
        return await self.profile_repo.list_by_role(Role.SUPPORT)

    async def convert_to_staff(self, email: str, actor: ActorContext) -> Profile:
        """
        Give an existing user support access

        Raises:
            ProfileNotFoundError: No user with that email
            ValidationError: The admin targets their own account
        """
        self.require_admin(actor)

        profile = await self.profile_repo.get_by_email(email)
        if not profile:
            raise ProfileNotFoundError(f"No user with email {email}", details={"email": email})
        if profile.user_id == actor.user_id:
            raise ValidationError("You cannot change your own role")
        if profile.role == Role.SUPPORT:
            return profile

        updated = await self.profile_repo.set_role(profile.user_id, Role.SUPPORT)
        logger.info(
            f"Granted support access to {profile.user_id}",
            extra={"user_id": actor.user_id, "role": Role.SUPPORT.value}
        )
        return updated

    async def remove_access(self, user_id: str, actor: ActorContext) -> Profile:
        """Demote a staff user to customer and unassign their tickets"""
        self.require_admin(actor)
        if user_id == actor.user_id:
            raise ValidationError("You cannot change your own role")

        await self.profile_repo.get_profile_or_raise(user_id)
        updated = await self.profile_repo.set_role(user_id, Role.CUSTOMER)
        unassigned = await self.ticket_repo.unassign_all(user_id)
        logger.info(
            f"Removed staff access from {user_id}; unassigned {unassigned} tickets",
            extra={"user_id": actor.user_id}
        )
        return updated
