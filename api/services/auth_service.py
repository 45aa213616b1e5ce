"""Credential login for admin users.

Verifies email and password, then issues a signed access token. A login
audit entry is written on a savepoint so a failing insert never blocks the
login itself.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from core import get_logger
from core.security import create_access_token, verify_password
from core.wide_event import set_wide_event_fields
from models import ActivityType, User
from repositories.activity_repository import ActivityRepository
from repositories.user_repository import UserRepository
from schemas import LoginResponse, LoginUser

logger = get_logger(__name__)


class MissingCredentialsError(Exception):
    """Raised when email or password is absent or empty."""


class InvalidCredentialsError(Exception):
    """Raised for an unknown email, passwordless account or wrong password.

    The three cases share one message so callers cannot probe for accounts.
    """


class AccountDeactivatedError(Exception):
    """Raised when the credentials are correct but the account is inactive."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} is deactivated")


async def login(
    db: AsyncSession, email: str | None, password: str | None
) -> LoginResponse:
    """Authenticate a user and issue an access token.

    Raises:
        MissingCredentialsError: If email or password is empty.
        InvalidCredentialsError: If the credentials do not match.
        AccountDeactivatedError: If the account is inactive.
    """
    if not email or not password:
        raise MissingCredentialsError()

    user = await UserRepository(db).get_by_email(email)
    if user is None or not user.password:
        logger.info("login.failed", reason="unknown_user")
        raise InvalidCredentialsError()

    if not verify_password(password, user.password):
        logger.info("login.failed", reason="bad_password", user_id=user.id)
        raise InvalidCredentialsError()

    if not user.is_active:
        logger.info("login.failed", reason="deactivated", user_id=user.id)
        raise AccountDeactivatedError(user.id)

    token = create_access_token(
        user_id=user.id,
        email=user.email,
        role=user.role.value,
        name=user.name,
    )

    await _record_login(db, user)

    set_wide_event_fields(user_id=user.id, login_success=True)
    logger.info("login.succeeded", user_id=user.id, role=user.role.value)

    return LoginResponse(
        token=token,
        user=LoginUser(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role.value,
        ),
    )


async def _record_login(db: AsyncSession, user: User) -> None:
    """Write the USER_LOGIN activity. Failures are logged and dropped."""
    try:
        async with db.begin_nested():
            await ActivityRepository(db).create(
                activity_type=ActivityType.USER_LOGIN,
                title="User Login",
                description=f"{user.name or user.email} logged in successfully",
                user_id=user.id,
            )
    except Exception:
        logger.warning("login.activity_log.failed", user_id=user.id, exc_info=True)
