# inventory_api/api/v1/routes_auth.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.api.deps import get_app_settings, get_current_identity
from inventory_api.core.config import Settings
from inventory_api.core.schemas import Envelope
from inventory_api.db.base import get_db
from inventory_api.domain.identity.schemas import AuthOut, Identity, UserLogin, UserRegister
from inventory_api.domain.identity.service import authenticate_user, issue_token, register_user, to_identity

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthOut, status_code=201)
async def register_endpoint(
    payload: UserRegister,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = await register_user(db, payload, settings)
    return AuthOut(
        message="User registered successfully",
        data=to_identity(user),
        token=issue_token(user, settings),
    )


@router.post("/login", response_model=AuthOut)
async def login_endpoint(
    payload: UserLogin,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    user = await authenticate_user(db, payload.email, payload.password)
    return AuthOut(
        message="Login successful",
        data=to_identity(user),
        token=issue_token(user, settings),
    )


@router.get("/me", response_model=Envelope[Identity])
async def me_endpoint(identity: Identity = Depends(get_current_identity)):
    return Envelope(data=identity)
