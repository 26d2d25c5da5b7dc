"""
Authentication router for Coursehub.

Handles registration, login and profile endpoints.
"""

from typing import Dict

from fastapi import APIRouter, Depends, status

from coursehub.core.security import Identity
from coursehub.schemas.auth import PasswordChange, ProfileUpdate, Token, UserLogin, UserRegister, UserResponse
from coursehub.services import Services
from .deps import DeadlineRoute, get_identity, get_services


router = APIRouter(route_class=DeadlineRoute)


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    services: Services = Depends(get_services)
) -> Token:
    """
    Register a new student or teacher account.
    """
    user, token = await services.auth.register(user_data)
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.post("/login", response_model=Token)
async def login(
    credentials: UserLogin,
    services: Services = Depends(get_services)
) -> Token:
    """
    Exchange e-mail and password for a bearer token.
    """
    user, token = await services.auth.login(credentials)
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.get("/profile", response_model=UserResponse)
async def get_profile(
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services)
):
    return await services.auth.get_profile(identity.account_id)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    profile: ProfileUpdate,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services)
):
    """
    Update name or e-mail of the current account.
    """
    return await services.auth.update_profile(identity.account_id, profile)


@router.put("/change-password")
async def change_password(
    password_data: PasswordChange,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services)
) -> Dict[str, str]:
    await services.auth.change_password(identity.account_id, password_data)
    return {"message": "Password changed successfully"}
