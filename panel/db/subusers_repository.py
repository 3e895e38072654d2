"""
Repository Pattern for Database Operations
Provides clean data access layer
"""

from typing import Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.base_repository import BaseRepository
from panel.models.subuser_model import Subuser


class SubuserRepository(BaseRepository[Subuser]):
    """Repository for Subuser operations"""

    async def get_by_user_and_server(
        self, user_id: str, server_id: str
    ) -> Optional[Subuser]:
        """Get subuser record for a user on a server"""
        result = await self.db.execute(
            select(Subuser).where(
                and_(Subuser.user_id == user_id, Subuser.server_id == server_id)
            )
        )
        return result.scalar_one_or_none()


def get_subuser_repository(db: AsyncSession) -> SubuserRepository:
    """Get SubuserRepository instance"""
    return SubuserRepository(Subuser, db)
