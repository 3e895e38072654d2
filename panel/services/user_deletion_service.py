"""
User Deletion Service
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.servers_repository import ServerRepository, get_server_repository
from panel.db.users_repository import UserRepository, get_user_repository
from panel.models.user_model import User
from panel.services.daemon_service import DaemonService, daemon_service
from panel.services.revoke_daemon_keys_service import (
    RevokeDaemonKeysService,
    get_revoke_daemon_keys_service,
)
from panel.utils.exceptions import HasActiveServersError

logger = logging.getLogger(__name__)


class UserDeletionService:
    """Deletes a user account after revoking their daemon keys"""

    def __init__(
        self,
        repository: UserRepository,
        server_repository: ServerRepository,
        revocation_service: RevokeDaemonKeysService,
    ):
        self.repository = repository
        self.server_repository = server_repository
        self.revocation_service = revocation_service

    async def handle(self, user: User) -> int:
        """
        Delete a user

        Returns:
            Number of daemon keys revoked

        Raises:
            HasActiveServersError: If the user still owns servers
        """
        owned = await self.server_repository.count_owned_by(user.id)
        if owned > 0:
            raise HasActiveServersError(
                f"Cannot delete user {user.id}: {owned} server(s) still assigned"
            )

        revoked = await self.revocation_service.handle(user)

        await self.repository.delete(user)
        await self.repository.db.commit()

        logger.info(f"Deleted user {user.id} ({revoked} daemon key(s) revoked)")
        return revoked


def get_user_deletion_service(
    db: AsyncSession, daemon: DaemonService = daemon_service
) -> UserDeletionService:
    """Build a UserDeletionService bound to a database session"""
    return UserDeletionService(
        get_user_repository(db),
        get_server_repository(db),
        get_revoke_daemon_keys_service(db, daemon),
    )
