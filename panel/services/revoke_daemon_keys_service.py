"""
Revoke Daemon Keys Service - Bulk revocation of every key a user holds
"""

import logging
from collections import defaultdict
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.daemon_keys_repository import (
    DaemonKeyRepository,
    get_daemon_key_repository,
)
from panel.models.user_model import User
from panel.schemas.daemon_key_schemas import RevocableDaemonKey
from panel.services.daemon_service import DaemonService, daemon_service
from panel.utils.exceptions import DaemonConnectionError

logger = logging.getLogger(__name__)


class RevokeDaemonKeysService:
    """Revokes all daemon keys of a user on their daemons and deletes them"""

    def __init__(self, repository: DaemonKeyRepository, daemon: DaemonService):
        self.repository = repository
        self.daemon = daemon
        # Daemon failures from the last run, keyed by node ID
        self.exceptions: Dict[str, DaemonConnectionError] = {}

    async def handle(self, user: User) -> int:
        """
        Revoke every daemon key belonging to a user

        Daemons are told first, best-effort; the rows are deleted whether or
        not every daemon answered.

        Returns:
            Number of keys deleted
        """
        self.exceptions = {}

        keys = await self.repository.list_for_revocation(user.id)
        if not keys:
            return 0

        by_node: Dict[str, List[RevocableDaemonKey]] = defaultdict(list)
        for key in keys:
            by_node[key.node_id].append(key)

        for node_id, node_keys in by_node.items():
            first = node_keys[0]
            try:
                await self.daemon.revoke_keys(
                    first.daemon_url,
                    first.daemon_secret,
                    [key.secret for key in node_keys],
                )
            except DaemonConnectionError as e:
                logger.warning(
                    f"Could not revoke {len(node_keys)} key(s) for user {user.id} "
                    f"on node {node_id}: {str(e)}"
                )
                self.exceptions[node_id] = e

        deleted = await self.repository.delete_many([key.id for key in keys])
        await self.repository.db.commit()

        logger.info(f"Revoked {deleted} daemon key(s) for user {user.id}")
        return deleted


def get_revoke_daemon_keys_service(
    db: AsyncSession, daemon: DaemonService = daemon_service
) -> RevokeDaemonKeysService:
    """Build a RevokeDaemonKeysService bound to a database session"""
    return RevokeDaemonKeysService(get_daemon_key_repository(db), daemon)
