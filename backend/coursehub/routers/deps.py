"""
Shared router dependencies.

Identity comes from the bearer token only; the services and settings built
by the application factory live on ``app.state``.
"""

from typing import Any, Callable, Coroutine, Dict, Optional, Type

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.routing import APIRoute
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel
from starlette.responses import Response

from coursehub.core.config import Settings
from coursehub.core.deadline import with_deadline
from coursehub.core.errors import ForbiddenError
from coursehub.core.security import Identity, identity_from_token
from coursehub.models.course import CourseLevel
from coursehub.models.user import UserRole
from coursehub.schemas.query import QueryOptions
from coursehub.services import Page, Services
from coursehub.store.filters import SortDirection


# OAuth2 scheme for token authentication
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


class DeadlineRoute(APIRoute):
    """Route that runs its handler under the configured request deadline."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        handler = super().get_route_handler()

        async def deadline_handler(request: Request) -> Response:
            settings: Settings = request.app.state.settings
            return await with_deadline(handler(request), settings.REQUEST_TIMEOUT_SECONDS)

        return deadline_handler


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_identity(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings)
) -> Identity:
    """
    Verified identity of the caller.
    """
    identity = identity_from_token(settings, token)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity


def require_role(role: UserRole) -> Callable[..., Identity]:
    """Dependency factory rejecting callers without ``role``."""

    def check_role(identity: Identity = Depends(get_identity)) -> Identity:
        if identity.role != role.value:
            raise ForbiddenError(f"This action requires the {role.value} role")
        return identity

    return check_role


def page_response(page: Page, schema: Type[BaseModel]) -> Dict[str, Any]:
    return {
        "items": [schema.model_validate(item) for item in page.items],
        "meta": page.meta,
    }


def course_list_options(
    search: Optional[str] = Query(None, description="Substring matched against title, description and level"),
    level: Optional[CourseLevel] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[str] = Query(None, description="One of title, level, likes, view_count, created_at, updated_at"),
    sort_order: SortDirection = SortDirection.DESC,
) -> QueryOptions:
    """List options from the query string."""
    filters = {"level": level.value} if level is not None else {}
    sort = {sort_by: sort_order} if sort_by else None
    return QueryOptions(filters=filters, search_term=search, sort=sort, page=page, limit=limit)
