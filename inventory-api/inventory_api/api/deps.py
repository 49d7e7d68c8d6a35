# inventory_api/api/deps.py
from typing import Annotated, Optional

from fastapi import Depends, Path, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.config import Settings
from inventory_api.core.errors import ForbiddenError, UnauthorizedError
from inventory_api.core.logging_config import LogContext, get_logger
from inventory_api.core.schemas import MAX_DB_INT
from inventory_api.db.base import get_db
from inventory_api.db.models.users import Role
from inventory_api.domain.identity.schemas import Identity
from inventory_api.domain.identity.service import resolve_identity

logger = get_logger("api.auth")

bearer_scheme = HTTPBearer(auto_error=False)

# Path id that fits the INTEGER primary keys; anything else is a 400
RowId = Annotated[int, Path(gt=0, le=MAX_DB_INT)]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> Identity:
    if credentials is None:
        raise UnauthorizedError("Token not provided. Access denied.")

    identity = await resolve_identity(db, credentials.credentials, settings)
    LogContext.set(user_id=str(identity.id))
    return identity


async def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.role != Role.ADMIN:
        logger.warning("admin_access_denied", extra={"user_id": identity.id})
        raise ForbiddenError("Access denied. Administrator role required.")
    return identity
