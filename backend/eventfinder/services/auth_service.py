"""
Authentication service handling registration, login and profile updates.
"""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinder.core.exceptions import ConflictError, ForbiddenError, NotFoundError, UnauthenticatedError
from eventfinder.core.logging import get_logger
from eventfinder.core.security import Role, create_access_token, hash_password, verify_password
from eventfinder.models.user import User
from eventfinder.schemas.user import ProfileUpdate, UserCreate, UserLogin

logger = get_logger(__name__)


async def register_user(db: AsyncSession, user_data: UserCreate) -> tuple[User, str]:
    """
    Register a new user with hashed password and return it with a token.
    Raises 409 if the email already exists.
    """
    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=email)
        raise ConflictError("Email already registered")

    user = User(
        name=user_data.name.strip(),
        email=email,
        hashed_password=hash_password(user_data.password),
        phone=user_data.phone,
        role=Role(user_data.role).value,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Email already registered") from e
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email, role=user.role)
    return user, create_access_token(user_id=user.id, role=user.role)


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[User, str]:
    """
    Authenticate user and return it with a JWT access token.
    Raises 401 if credentials are invalid, 403 if the account is deactivated.
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise UnauthenticatedError("Invalid email or password")

    if not user.is_active:
        raise ForbiddenError("Account is deactivated")

    token = create_access_token(user_id=user.id, role=user.role)
    logger.info("user_logged_in", user_id=user.id)
    return user, token


async def get_user(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


async def update_profile(db: AsyncSession, user_id: int, profile: ProfileUpdate) -> User:
    user = await get_user(db, user_id)
    for field, value in profile.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(user, field, value)
    await db.flush()
    await db.refresh(user)
    logger.info("profile_updated", user_id=user_id)
    return user
