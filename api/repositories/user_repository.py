"""Repository for user lookups."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import User, UserRole
from repositories.utils import log_slow_query


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, user_id: str) -> User | None:
        return await self.db.get(User, user_id)

    @log_slow_query("get_user_by_email")
    async def get_by_email(self, email: str) -> User | None:
        """Exact, case-sensitive email match."""
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    @log_slow_query("count_platform_users")
    async def count_active_platform_users(self) -> int:
        """Active users, excluding super admins."""
        result = await self.db.execute(
            select(func.count())
            .select_from(User)
            .where(User.is_active.is_(True), User.role != UserRole.SUPER_ADMIN)
        )
        return result.scalar_one() or 0
