from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from panel.services.daemon_service import DaemonService
from panel.utils.exceptions import DaemonConnectionError

DAEMON_URL = "https://node1.example.com:8080"


def daemon_response(status_code, path):
    return httpx.Response(
        status_code, request=httpx.Request("POST", f"{DAEMON_URL}{path}")
    )


class TestDaemonService:
    """Talking to node daemons over HTTP"""

    @pytest.fixture
    def daemon_service(self):
        return DaemonService(timeout=1.0)

    @pytest.mark.asyncio
    async def test_notify_key_issued(self, daemon_service):
        expires_at = datetime(2024, 1, 1, tzinfo=timezone.utc)

        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(return_value=daemon_response(204, "/v1/keys"))
            mock_client.return_value.__aenter__.return_value.post = post

            await daemon_service.notify_key_issued(
                DAEMON_URL, "node-token", "server1", "i_secret", expires_at
            )

        post.assert_awaited_once()
        assert post.await_args.args[0] == f"{DAEMON_URL}/v1/keys"
        kwargs = post.await_args.kwargs
        assert kwargs["json"] == {
            "key": "i_secret",
            "server": "server1",
            "expires_at": expires_at.isoformat(),
        }
        assert kwargs["headers"]["Authorization"] == "Bearer node-token"
        assert kwargs["headers"]["X-Access-Server"] == "server1"
        assert kwargs["timeout"] == 1.0

    @pytest.mark.asyncio
    async def test_revoke_keys_batch(self, daemon_service):
        with patch("httpx.AsyncClient") as mock_client:
            post = AsyncMock(
                return_value=daemon_response(204, "/v1/keys/batch-delete")
            )
            mock_client.return_value.__aenter__.return_value.post = post

            await daemon_service.revoke_keys(DAEMON_URL, "node-token", ["i_a", "i_b"])

        assert post.await_args.args[0] == f"{DAEMON_URL}/v1/keys/batch-delete"
        assert post.await_args.kwargs["json"] == {"keys": ["i_a", "i_b"]}
        assert "X-Access-Server" not in post.await_args.kwargs["headers"]

    @pytest.mark.asyncio
    async def test_revoke_unknown_keys_is_ok(self, daemon_service):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=daemon_response(404, "/v1/keys/batch-delete")
            )

            await daemon_service.notify_key_revoked(DAEMON_URL, "node-token", "i_a")

    @pytest.mark.asyncio
    async def test_revoke_nothing_skips_request(self, daemon_service):
        with patch("httpx.AsyncClient") as mock_client:
            await daemon_service.revoke_keys(DAEMON_URL, "node-token", [])

        mock_client.assert_not_called()

    @pytest.mark.asyncio
    async def test_daemon_rejection_raises(self, daemon_service):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=daemon_response(500, "/v1/keys")
            )

            with pytest.raises(DaemonConnectionError) as exc_info:
                await daemon_service.notify_key_issued(
                    DAEMON_URL,
                    "node-token",
                    "server1",
                    "i_secret",
                    datetime.now(timezone.utc),
                )

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_unreachable_daemon_raises(self, daemon_service):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("connection refused")
            )

            with pytest.raises(DaemonConnectionError, match="unavailable"):
                await daemon_service.revoke_keys(DAEMON_URL, "node-token", ["i_a"])
