"""
Daemon Key Creation Service - Issues new daemon keys
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


class DaemonKeyCreationService:
    """Creates the daemon key for a (server, user) pair"""

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

    async def handle(self, server_id: str, user_id: str) -> str:
        """
        Create a new daemon key

        Only the insert runs inside a savepoint, so a rejected row leaves
        the rest of the caller's session untouched.

        Args:
            server_id: Server the key grants access to
            user_id: User the key belongs to

        Returns:
            The new key secret

        Raises:
            RecordNotFoundError: If the server does not exist
            DataValidationError: If a key for the pair was created
                concurrently, or no unique secret could be generated
        """
        server = await self.server_repository.find_with_node(server_id)
        expires_at = daemon_key_expiry(self.clock())
        db = self.repository.db

        for attempt in range(self.MAX_RETRY_ATTEMPTS):
            secret = generate_daemon_secret()
            try:
                async with db.begin_nested():
                    await self.repository.create(
                        user_id=user_id,
                        server_id=server_id,
                        secret=secret,
                        expires_at=expires_at,
                    )
                break
            except IntegrityError as e:
                if await self.repository.get_by_user_and_server(user_id, server_id):
                    logger.warning(
                        f"Daemon key for user {user_id} on server {server_id} "
                        f"already exists: {str(e.orig)}"
                    )
                    raise DataValidationError(
                        f"Daemon key for user {user_id} on server {server_id} already exists"
                    ) from e

                logger.warning(
                    f"Daemon key secret collision for user {user_id} on server {server_id}, "
                    f"attempt {attempt + 1}"
                )
                if attempt == self.MAX_RETRY_ATTEMPTS - 1:
                    raise DataValidationError(
                        "Failed to generate unique daemon key secret after multiple attempts"
                    ) from e

        await db.commit()

        logger.info(
            f"Issued daemon key {mask_secret(secret)} for user {user_id} on server {server_id}"
        )

        try:
            await self.daemon.notify_key_issued(
                server.node.daemon_url,
                server.node.daemon_secret,
                server_id,
                secret,
                expires_at,
            )
        except DaemonConnectionError as e:
            logger.warning(
                f"Daemon for server {server_id} was not told about key "
                f"{mask_secret(secret)}: {str(e)}"
            )

        return secret
