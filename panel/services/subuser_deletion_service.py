"""
Subuser Deletion Service - Removes a subuser and their daemon key
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.daemon_keys_repository import get_daemon_key_repository
from panel.db.servers_repository import get_server_repository
from panel.db.subusers_repository import SubuserRepository, get_subuser_repository
from panel.services.daemon_key_deletion_service import DaemonKeyDeletionService
from panel.services.daemon_service import DaemonService, daemon_service
from panel.utils.exceptions import RecordNotFoundError

logger = logging.getLogger(__name__)


class SubuserDeletionService:
    """Service for removing a subuser's access to a server"""

    def __init__(
        self,
        repository: SubuserRepository,
        key_deletion_service: DaemonKeyDeletionService,
    ):
        self.repository = repository
        self.key_deletion_service = key_deletion_service

    async def handle(self, subuser_id: str) -> None:
        """
        Delete a subuser

        The daemon key is removed before the subuser row.

        Raises:
            RecordNotFoundError: If the subuser does not exist
        """
        subuser = await self.repository.find(subuser_id)
        server_id, user_id = subuser.server_id, subuser.user_id

        try:
            await self.key_deletion_service.handle(server_id, user_id)
        except RecordNotFoundError as e:
            logger.debug(f"No daemon key removed for subuser {subuser_id}: {str(e)}")

        await self.repository.delete(subuser)
        await self.repository.db.commit()

        logger.info(f"Removed subuser {user_id} from server {server_id}")


def get_subuser_deletion_service(
    db: AsyncSession, daemon: DaemonService = daemon_service
) -> SubuserDeletionService:
    """Build a SubuserDeletionService bound to a database session"""
    return SubuserDeletionService(
        get_subuser_repository(db),
        DaemonKeyDeletionService(
            get_daemon_key_repository(db), get_server_repository(db), daemon
        ),
    )
