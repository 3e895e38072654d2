"""
Daemon Key Update Service - Rotates an existing key in place
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import IntegrityError

from panel.db.daemon_keys_repository import DaemonKeyRepository
from panel.db.servers_repository import ServerRepository
from panel.services.daemon_service import DaemonService
from panel.utils.exceptions import DaemonConnectionError, DataValidationError
from panel.utils.security import (
    daemon_key_expiry,
    generate_daemon_secret,
    mask_secret,
    utcnow,
)

logger = logging.getLogger(__name__)


class DaemonKeyUpdateService:
    """Replaces the secret and expiry of a key, keeping its id and binding"""

    MAX_RETRY_ATTEMPTS = 5

    def __init__(
        self,
        repository: DaemonKeyRepository,
        server_repository: ServerRepository,
        daemon: DaemonService,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.server_repository = server_repository
        self.daemon = daemon
        self.clock = clock

    async def handle(self, key_id: str) -> str:
        """
        Rotate a daemon key

        Args:
            key_id: ID of the key to rotate

        Returns:
            The new key secret

        Raises:
            RecordNotFoundError: If the key was deleted in the meantime
            DataValidationError: If the updated row is rejected
        """
        key = await self.repository.find(key_id)
        server_id, previous_secret = key.server_id, key.secret

        expires_at = daemon_key_expiry(self.clock())
        db = self.repository.db

        # The only constraint an in-place update can hit is the secret
        for attempt in range(self.MAX_RETRY_ATTEMPTS):
            secret = generate_daemon_secret()
            try:
                async with db.begin_nested():
                    await self.repository.update(
                        key, secret=secret, expires_at=expires_at
                    )
                break
            except IntegrityError as e:
                logger.warning(
                    f"Daemon key secret collision rotating {key_id}, attempt {attempt + 1}"
                )
                if attempt == self.MAX_RETRY_ATTEMPTS - 1:
                    raise DataValidationError(
                        f"Daemon key {key_id} could not be rotated"
                    ) from e

        await db.commit()

        logger.info(
            f"Rotated daemon key {key_id}: {mask_secret(previous_secret)} -> {mask_secret(secret)}"
        )

        await self._notify(server_id, previous_secret, secret, expires_at)

        return secret

    async def _notify(
        self, server_id: str, previous_secret: str, secret: str, expires_at: datetime
    ) -> None:
        server = await self.server_repository.find_with_node(server_id)
        node = server.node

        try:
            await self.daemon.notify_key_issued(
                node.daemon_url, node.daemon_secret, server_id, secret, expires_at
            )
            await self.daemon.notify_key_revoked(
                node.daemon_url, node.daemon_secret, previous_secret
            )
        except DaemonConnectionError as e:
            logger.warning(
                f"Daemon for server {server_id} was not told about rotated key: {str(e)}"
            )
