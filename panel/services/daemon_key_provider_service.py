"""
Daemon Key Provider Service - The entry point for obtaining a usable daemon key
"""

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.daemon_keys_repository import (
    DaemonKeyRepository,
    get_daemon_key_repository,
)
from panel.db.servers_repository import get_server_repository
from panel.db.subusers_repository import SubuserRepository, get_subuser_repository
from panel.models.server_model import Server
from panel.models.user_model import User
from panel.services.daemon_key_creation_service import DaemonKeyCreationService
from panel.services.daemon_key_update_service import DaemonKeyUpdateService
from panel.services.daemon_service import DaemonService, daemon_service
from panel.utils.exceptions import RecordNotFoundError
from panel.utils.security import seconds_until, utcnow

logger = logging.getLogger(__name__)


class DaemonKeyProviderService:
    """
    Resolves the daemon key a user should use for a server

    This is the only sanctioned way to obtain a key: it holds the check
    that the user has any right to a key for the server at all.
    """

    def __init__(
        self,
        creation_service: DaemonKeyCreationService,
        update_service: DaemonKeyUpdateService,
        repository: DaemonKeyRepository,
        subuser_repository: SubuserRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.creation_service = creation_service
        self.update_service = update_service
        self.repository = repository
        self.subuser_repository = subuser_repository
        self.clock = clock

    async def handle(
        self, server: Server, user: User, update_if_expired: bool = True
    ) -> str:
        """
        Get the access key for a user on a specific server

        Args:
            server: Server the key is for
            user: User requesting the key
            update_if_expired: Rotate the key if it has expired

        Returns:
            A key secret

        Raises:
            RecordNotFoundError: If the user has no access to the server
            DataValidationError: If a key for the pair was created concurrently;
                calling again picks up the winning key
        """
        key = await self.repository.get_by_user_and_server(user.id, server.id)

        if key is None:
            return await self._create(server, user)

        if not update_if_expired or seconds_until(key.expires_at, self.clock()) > 0:
            return key.secret

        logger.debug(f"Daemon key {key.id} expired, rotating")
        return await self.update_service.handle(key.id)

    async def _create(self, server: Server, user: User) -> str:
        if user.root_admin or user.id == server.owner_id:
            return await self.creation_service.handle(server.id, user.id)

        subuser = await self.subuser_repository.get_by_user_and_server(
            user.id, server.id
        )
        if subuser is None:
            logger.info(f"User {user.id} has no access to server {server.id}")
            raise RecordNotFoundError(
                f"User {user.id} has no access to server {server.id}"
            )

        return await self.creation_service.handle(subuser.server_id, subuser.user_id)


def get_daemon_key_provider_service(
    db: AsyncSession, daemon: DaemonService = daemon_service
) -> DaemonKeyProviderService:
    """Build a DaemonKeyProviderService bound to a database session"""
    repository = get_daemon_key_repository(db)
    server_repository = get_server_repository(db)

    return DaemonKeyProviderService(
        creation_service=DaemonKeyCreationService(repository, server_repository, daemon),
        update_service=DaemonKeyUpdateService(repository, server_repository, daemon),
        repository=repository,
        subuser_repository=get_subuser_repository(db),
    )
