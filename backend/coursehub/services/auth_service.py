"""
Account registration, login and profile management.

Issues the signed identity claim the rest of the core trusts.
"""

import logging
from typing import Any, Mapping, Tuple, Union

from coursehub.core.config import Settings
from coursehub.core.errors import AuthenticationError, ConflictError, NotFoundError
from coursehub.core.security import Identity, create_identity_token, get_password_hash, verify_password
from coursehub.models.user import User
from coursehub.schemas.auth import PasswordChange, ProfileUpdate, UserLogin, UserRegister
from coursehub.store.base import EntityStore
from .common import parse_input


logger = logging.getLogger(__name__)

Payload = Union[Mapping[str, Any], Any]


class AuthService:
    def __init__(self, users: EntityStore[User], settings: Settings):
        self.users = users
        self.settings = settings

    def issue_token(self, user: User) -> str:
        identity = Identity(account_id=user.id, email=user.email, role=user.role)
        return create_identity_token(self.settings, identity)

    async def _user(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", entity="user", entity_id=user_id)
        return user

    async def register(self, payload: Payload) -> Tuple[User, str]:
        """
        Create an account and sign a token for it.

        E-mails are stored lower-cased, so uniqueness is case-insensitive.
        """
        data = parse_input(UserRegister, payload)

        if await self.users.find_one({"email": data.email}) is not None:
            raise ConflictError("User with this email already exists")

        user = await self.users.create({
            "name": data.name,
            "email": data.email,
            "hashed_password": get_password_hash(data.password),
            "role": data.role,
        })
        logger.info(f"Registered {user.role} account {user.id}")
        return user, self.issue_token(user)

    async def login(self, payload: Payload) -> Tuple[User, str]:
        data = parse_input(UserLogin, payload)

        user = await self.users.find_one({"email": data.email})
        if user is None or not verify_password(data.password, user.hashed_password):
            raise AuthenticationError("Invalid email or password")

        return user, self.issue_token(user)

    async def get_profile(self, user_id: str) -> User:
        return await self._user(user_id)

    async def update_profile(self, user_id: str, payload: Payload) -> User:
        """Change name or e-mail. Role and password are not editable here."""
        data = parse_input(ProfileUpdate, payload)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        user = await self._user(user_id)
        if "email" in changes and changes["email"] != user.email:
            if await self.users.find_one({"email": changes["email"]}) is not None:
                raise ConflictError("User with this email already exists")

        if not changes:
            return user
        return await self.users.update_by_id(user_id, changes)

    async def change_password(self, user_id: str, payload: Payload) -> User:
        data = parse_input(PasswordChange, payload)

        user = await self._user(user_id)
        if not verify_password(data.current_password, user.hashed_password):
            raise AuthenticationError("Current password is incorrect")

        user = await self.users.update_by_id(user_id, {"hashed_password": get_password_hash(data.new_password)})
        logger.info(f"Password changed for account {user_id}")
        return user
