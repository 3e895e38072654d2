"""
Repository Pattern for Database Operations
Provides clean data access layer
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.base_repository import BaseRepository
from panel.models.node_model import Node


class NodeRepository(BaseRepository[Node]):
    """Repository for Node operations"""

    async def get_by_daemon_secret(self, daemon_secret: str) -> Optional[Node]:
        """Get node by the token its daemon authenticates with"""
        result = await self.db.execute(
            select(Node).where(Node.daemon_secret == daemon_secret)
        )
        return result.scalar_one_or_none()


def get_node_repository(db: AsyncSession) -> NodeRepository:
    """Get NodeRepository instance"""
    return NodeRepository(Node, db)
