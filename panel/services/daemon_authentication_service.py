"""
Daemon Authentication Service - Answers daemons asking who a key belongs to
"""

import logging
from datetime import datetime
from typing import Callable

from panel.db.daemon_keys_repository import DaemonKeyRepository
from panel.models.node_model import Node
from panel.schemas.daemon_key_schemas import DaemonKeyAuthResponse
from panel.utils.exceptions import RecordNotFoundError
from panel.utils.security import INTERNAL_KEY_IDENTIFIER, seconds_until, utcnow

logger = logging.getLogger(__name__)


class DaemonAuthenticationService:
    def __init__(
        self,
        repository: DaemonKeyRepository,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.clock = clock

    async def handle(self, secret: str, node: Node) -> DaemonKeyAuthResponse:
        """
        Resolve a presented key for the daemon on `node`

        Expiry is reported, not enforced; the daemon decides.

        Raises:
            RecordNotFoundError: If the key is unknown or belongs to a server
                on another node
        """
        if not secret.startswith(INTERNAL_KEY_IDENTIFIER):
            raise RecordNotFoundError("Daemon key not found")

        key = await self.repository.find_by_secret_with_server(secret)

        if key.server.node_id != node.id:
            logger.warning(
                f"Node {node.id} presented a key for server {key.server_id} "
                f"hosted on node {key.server.node_id}"
            )
            raise RecordNotFoundError("Daemon key not found")

        return DaemonKeyAuthResponse(
            server=key.server_id,
            user=key.user_id,
            expires_at=key.expires_at,
            expired=seconds_until(key.expires_at, self.clock()) <= 0,
        )
