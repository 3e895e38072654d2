"""
Remote Routes - Called by node daemons
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.daemon_keys_repository import get_daemon_key_repository
from panel.db.session import get_db
from panel.models.node_model import Node
from panel.schemas.daemon_key_schemas import DaemonKeyAuthResponse
from panel.services.daemon_authentication_service import DaemonAuthenticationService
from panel.utils.auth import get_current_node

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/authenticate/{secret}", response_model=DaemonKeyAuthResponse)
async def authenticate_daemon_key(
    secret: str,
    node: Node = Depends(get_current_node),
    db: AsyncSession = Depends(get_db),
):
    """
    Resolve a daemon key to the server and user it was issued for

    Unknown keys, and keys for servers on other nodes, return 404.
    """
    service = DaemonAuthenticationService(get_daemon_key_repository(db))
    return await service.handle(secret, node)
