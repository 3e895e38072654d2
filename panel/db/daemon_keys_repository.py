"""
Daemon Key Repository
Persistence for daemon keys; no caching, no locking
"""

from typing import List, Optional

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from panel.db.base_repository import BaseRepository
from panel.models.daemon_key_model import DaemonKey
from panel.models.node_model import Node
from panel.models.server_model import Server
from panel.schemas.daemon_key_schemas import RevocableDaemonKey
from panel.utils.exceptions import RecordNotFoundError


class DaemonKeyRepository(BaseRepository[DaemonKey]):
    """Repository for Daemon Key operations"""

    async def get_by_user_and_server(
        self, user_id: str, server_id: str
    ) -> Optional[DaemonKey]:
        """Get the key bound to a user on a server, if any"""
        result = await self.db.execute(
            select(DaemonKey).where(
                and_(DaemonKey.user_id == user_id, DaemonKey.server_id == server_id)
            )
        )
        return result.scalar_one_or_none()

    async def find_by_user_and_server(self, user_id: str, server_id: str) -> DaemonKey:
        """Get the key bound to a user on a server or raise RecordNotFoundError"""
        key = await self.get_by_user_and_server(user_id, server_id)
        if key is None:
            raise RecordNotFoundError(
                f"No daemon key for user {user_id} on server {server_id}"
            )
        return key

    async def find_by_secret_with_server(self, secret: str) -> DaemonKey:
        """Get a key by its secret with the server and node relations loaded"""
        result = await self.db.execute(
            select(DaemonKey)
            .options(joinedload(DaemonKey.server).joinedload(Server.node))
            .where(DaemonKey.secret == secret)
        )
        key = result.scalar_one_or_none()
        if key is None:
            raise RecordNotFoundError("Daemon key not found")
        return key

    async def list_for_revocation(self, user_id: str) -> List[RevocableDaemonKey]:
        """
        Get every key belonging to a user, each joined with the node
        details needed to revoke it on the daemon
        """
        result = await self.db.execute(
            select(
                DaemonKey.id,
                DaemonKey.secret,
                DaemonKey.server_id,
                Node.id.label("node_id"),
                Node.scheme,
                Node.fqdn,
                Node.daemon_listen,
                Node.daemon_secret,
            )
            .join(Server, Server.id == DaemonKey.server_id)
            .join(Node, Node.id == Server.node_id)
            .where(DaemonKey.user_id == user_id)
        )

        return [
            RevocableDaemonKey(
                id=row.id,
                secret=row.secret,
                server_id=row.server_id,
                node_id=row.node_id,
                daemon_url=f"{row.scheme}://{row.fqdn}:{row.daemon_listen}",
                daemon_secret=row.daemon_secret,
            )
            for row in result.all()
        ]


def get_daemon_key_repository(db: AsyncSession) -> DaemonKeyRepository:
    """Get DaemonKeyRepository instance"""
    return DaemonKeyRepository(DaemonKey, db)
