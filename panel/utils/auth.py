"""
Authentication Dependencies for FastAPI
Daemons authenticate to the panel with their node token
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from panel.db.nodes_repository import get_node_repository
from panel.db.session import get_db
from panel.models.node_model import Node

logger = logging.getLogger(__name__)


bearer_scheme = HTTPBearer(
    auto_error=False,
    scheme_name="Node Token",
    description="The daemon_secret of the calling node",
)


async def get_current_node(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Node:
    """Get the node whose daemon is calling"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required. Provide 'Authorization: Bearer <node_token>' header.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    node = await get_node_repository(db).get_by_daemon_secret(credentials.credentials)

    if not node:
        logger.warning("Rejected daemon request with unknown node token")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid node token",
        )

    logger.debug(f"Authenticated daemon for node {node.id}")
    return node
