"""Profile Repository - User profiles and roles"""
from typing import Any, Dict, List, Optional
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from .mongo_client import PROFILES
from ..domain.models import Profile
from ..domain.enums import Role
from ..domain.errors import AlreadyExistsError, ProfileNotFoundError
from ..utils.logger import get_logger
from ..utils.time import utc_now

logger = get_logger(__name__)


class ProfileRepository:
    """Repository for user profiles"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self._profiles = db[PROFILES]

    @staticmethod
    def _to_model(doc: Dict[str, Any]) -> Profile:
        doc.pop("_id", None)
        return Profile.model_validate(doc)

    async def create_profile(self, profile: Profile) -> Profile:
        """Insert a new profile; emails are unique"""
        doc = profile.model_dump(mode="json")
        doc["created_at"] = profile.created_at
        doc["updated_at"] = profile.updated_at
        doc["_id"] = profile.user_id
        try:
            await self._profiles.insert_one(doc)
        except DuplicateKeyError:
            raise AlreadyExistsError(f"A user with email {profile.email} already exists")
        logger.info(f"Created profile: {profile.user_id}", extra={"user_id": profile.user_id})
        return profile

    async def get_profile(self, user_id: str) -> Optional[Profile]:
        doc = await self._profiles.find_one({"user_id": user_id})
        return self._to_model(doc) if doc else None

    async def get_profile_or_raise(self, user_id: str) -> Profile:
        profile = await self.get_profile(user_id)
        if not profile:
            raise ProfileNotFoundError(f"Profile {user_id} not found", details={"user_id": user_id})
        return profile

    async def get_by_email(self, email: str) -> Optional[Profile]:
        doc = await self._profiles.find_one({"email": email.lower()})
        return self._to_model(doc) if doc else None

    async def list_by_role(self, role: Role) -> List[Profile]:
        """Profiles with a given role, newest first"""
        cursor = self._profiles.find({"role": role.value}).sort("created_at", DESCENDING)
        return [self._to_model(doc) async for doc in cursor]

    async def set_role(self, user_id: str, role: Role) -> Profile:
        """Change the role of a profile"""
        result = await self._profiles.find_one_and_update(
            {"user_id": user_id},
            {"$set": {"role": role.value, "updated_at": utc_now()}},
            return_document=ReturnDocument.AFTER
        )
        if result is None:
            raise ProfileNotFoundError(f"Profile {user_id} not found", details={"user_id": user_id})
        logger.info(f"Set role of {user_id} to {role.value}", extra={"user_id": user_id, "role": role.value})
        return self._to_model(result)
