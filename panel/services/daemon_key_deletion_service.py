"""
Daemon Key Deletion Service - Removes the key for a single (server, user) pair
"""

import logging

from panel.db.daemon_keys_repository import DaemonKeyRepository
from panel.db.servers_repository import ServerRepository
from panel.services.daemon_service import DaemonService
from panel.utils.exceptions import DaemonConnectionError
from panel.utils.security import mask_secret

logger = logging.getLogger(__name__)


class DaemonKeyDeletionService:
    """Deletes one daemon key and tells the server's daemon to forget it"""

    def __init__(
        self,
        repository: DaemonKeyRepository,
        server_repository: ServerRepository,
        daemon: DaemonService,
    ):
        self.repository = repository
        self.server_repository = server_repository
        self.daemon = daemon

    async def handle(self, server_id: str, user_id: str) -> bool:
        """
        Delete the daemon key of a user on a server

        Returns:
            True once the row is deleted

        Raises:
            RecordNotFoundError: If the pair has no key or the server is gone;
                nothing is deleted in either case
        """
        key = await self.repository.find_by_user_and_server(user_id, server_id)
        server = await self.server_repository.find_with_node(server_id)
        secret = key.secret

        await self.repository.delete(key)
        await self.repository.db.commit()

        logger.info(
            f"Deleted daemon key {mask_secret(secret)} for user {user_id} on server {server_id}"
        )

        try:
            await self.daemon.notify_key_revoked(
                server.node.daemon_url, server.node.daemon_secret, secret
            )
        except DaemonConnectionError as e:
            logger.warning(
                f"Daemon for server {server_id} was not told about deleted key: {str(e)}"
            )

        return True
