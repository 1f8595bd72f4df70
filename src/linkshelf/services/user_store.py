"""Credential store: user accounts.

Passwords arrive here already hashed; verification lives in auth.password.
"""

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.db.models import User
from linkshelf.errors import NotFound, storage_errors


class UserStore:
    """CRUD over the users table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user(self, username: str, password_hash: str) -> int:
        """Insert a user and return its id. Duplicate usernames raise ConstraintViolation."""
        async with storage_errors(self.db):
            user = User(username=username, password_hash=password_hash)
            self.db.add(user)
            await self.db.flush()
            user_id = user.id
            await self.db.commit()
        return user_id

    async def get_user_by_id(self, user_id: int) -> User:
        async with storage_errors(self.db):
            result = await self.db.execute(select(User).where(User.id == user_id))
            user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("user", user_id)
        return user

    async def get_user_by_username(self, username: str) -> User:
        async with storage_errors(self.db):
            result = await self.db.execute(
                select(User).where(User.username == username)
            )
            user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("user", username)
        return user

    async def update_user_password(self, user_id: int, password_hash: str) -> bool:
        async with storage_errors(self.db):
            result = await self.db.execute(
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash)
            )
            await self.db.commit()
        return result.rowcount > 0

    async def delete_user(self, user_id: int) -> bool:
        """Delete a user. Their groups, links and associations go with them (FK cascade)."""
        async with storage_errors(self.db):
            result = await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
        return result.rowcount > 0
