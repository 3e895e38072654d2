"""
Repository Pattern for Database Operations
Provides clean data access layer
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from panel.db.base_repository import BaseRepository
from panel.models.server_model import Server
from panel.utils.exceptions import RecordNotFoundError


class ServerRepository(BaseRepository[Server]):
    """Repository for Server operations"""

    async def find_with_node(self, server_id: str) -> Server:
        """Get server with its node loaded or raise RecordNotFoundError"""
        result = await self.db.execute(
            select(Server).options(joinedload(Server.node)).where(Server.id == server_id)
        )
        server = result.scalar_one_or_none()
        if server is None:
            raise RecordNotFoundError(f"Server not found: {server_id}")
        return server

    async def count_owned_by(self, user_id: str) -> int:
        """Count servers owned by a user"""
        result = await self.db.execute(
            select(func.count(Server.id)).where(Server.owner_id == user_id)
        )
        return result.scalar()


def get_server_repository(db: AsyncSession) -> ServerRepository:
    """Get ServerRepository instance"""
    return ServerRepository(Server, db)
