"""
Daemon Service - Notifies node daemons about daemon key changes
"""

import logging
import os
from datetime import datetime
from typing import Dict, List

import httpx
from dotenv import load_dotenv

from panel.utils.exceptions import DaemonConnectionError

load_dotenv()

DAEMON_REQUEST_TIMEOUT = float(os.getenv("DAEMON_REQUEST_TIMEOUT", "5.0"))

logger = logging.getLogger(__name__)


class DaemonService:
    """Service for talking to the daemon running on a node"""

    def __init__(self, timeout: float = DAEMON_REQUEST_TIMEOUT):
        self.timeout = timeout

    def _get_headers(self, daemon_secret: str, server_id: str = None) -> Dict[str, str]:
        """Get authorization headers"""
        headers = {
            "Authorization": f"Bearer {daemon_secret}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if server_id:
            headers["X-Access-Server"] = server_id
        return headers

    async def notify_key_issued(
        self,
        daemon_url: str,
        daemon_secret: str,
        server_id: str,
        secret: str,
        expires_at: datetime,
    ) -> None:
        """
        Tell a daemon about a newly issued or rotated key

        Args:
            daemon_url: Base URL of the node daemon
            daemon_secret: Node token the daemon trusts
            server_id: Server the key grants access to
            secret: The key secret
            expires_at: When the key stops being handed out by the panel

        Raises:
            DaemonConnectionError: If the daemon is unreachable or rejects the key
        """
        payload = {
            "key": secret,
            "server": server_id,
            "expires_at": expires_at.isoformat(),
        }

        await self._post(
            f"{daemon_url}/v1/keys",
            payload,
            self._get_headers(daemon_secret, server_id),
        )

    async def revoke_keys(
        self, daemon_url: str, daemon_secret: str, secrets: List[str]
    ) -> None:
        """
        Ask a daemon to forget a batch of keys
        A 404 means the daemon no longer knows the keys, which is the goal

        Raises:
            DaemonConnectionError: If the daemon is unreachable or rejects the request
        """
        if not secrets:
            return

        try:
            await self._post(
                f"{daemon_url}/v1/keys/batch-delete",
                {"keys": secrets},
                self._get_headers(daemon_secret),
            )
        except DaemonConnectionError as e:
            if e.status_code == 404:
                logger.debug(f"Daemon at {daemon_url} had no record of revoked keys")
                return
            raise

    async def notify_key_revoked(
        self, daemon_url: str, daemon_secret: str, secret: str
    ) -> None:
        """Ask a daemon to forget a single key"""
        await self.revoke_keys(daemon_url, daemon_secret, [secret])

    async def _post(self, url: str, payload: dict, headers: Dict[str, str]) -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url, json=payload, headers=headers, timeout=self.timeout
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Daemon rejected request to {url}: {e.response.status_code}"
            )
            raise DaemonConnectionError(
                f"Daemon returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Daemon HTTP error for {url}: {str(e)}", exc_info=True)
            raise DaemonConnectionError("Daemon temporarily unavailable") from e


daemon_service = DaemonService()
