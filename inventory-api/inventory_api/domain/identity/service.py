# inventory_api/domain/identity/service.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from inventory_api.core.config import Settings
from inventory_api.core.errors import DuplicateEmailError, InvalidCredentialsError, UnauthorizedError
from inventory_api.core.logging_config import get_logger
from inventory_api.core.schemas import MAX_DB_INT
from inventory_api.core.security import create_access_token, decode_access_token, hash_password, verify_password
from inventory_api.db.models.users import User
from inventory_api.db.repositories.users import create_user, get_user_by_email, get_user_by_id
from .schemas import Identity, UserRegister

logger = get_logger("identity")


def to_identity(user: User) -> Identity:
    return Identity.model_validate(user)


def issue_token(user: User, settings: Settings) -> str:
    return create_access_token(user.id, user.role.value, settings)


async def register_user(
    db: AsyncSession,
    data: UserRegister,
    settings: Settings,
) -> User:
    if await get_user_by_email(db, data.email) is not None:
        raise DuplicateEmailError(data.email)

    # Hash before the row exists; the model never sees the plaintext
    password_hash = hash_password(data.password, settings.BCRYPT_ROUNDS)

    try:
        user = await create_user(
            db,
            name=data.name,
            email=data.email,
            password_hash=password_hash,
            role=data.role,
        )
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateEmailError(data.email) from exc

    logger.info("user_registered", extra={"user_id": user.id, "role": user.role.value})
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(db, email)
    if user is None:
        logger.warning("login_failed", extra={"reason": "unknown_email"})
        raise InvalidCredentialsError()

    if not verify_password(password, user.password_hash):
        logger.warning("login_failed", extra={"reason": "bad_password", "user_id": user.id})
        raise InvalidCredentialsError()

    logger.info("login_succeeded", extra={"user_id": user.id})
    return user


async def resolve_identity(db: AsyncSession, token: str, settings: Settings) -> Identity:
    """Turn a bearer token into the caller's identity, or raise UnauthorizedError."""
    claims = decode_access_token(token, settings)
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise UnauthorizedError("Invalid token.") from exc
    if not 0 < user_id <= MAX_DB_INT:
        raise UnauthorizedError("Invalid token.")

    user = await get_user_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError("User not found. Invalid token.")
    return to_identity(user)
