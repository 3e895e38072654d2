from unittest.mock import AsyncMock, Mock

import pytest

from panel.db.daemon_keys_repository import DaemonKeyRepository
from panel.models.user_model import User
from panel.schemas.daemon_key_schemas import RevocableDaemonKey
from panel.services.revoke_daemon_keys_service import RevokeDaemonKeysService
from panel.utils.exceptions import DaemonConnectionError


def revocable(id, node_id, secret):
    return RevocableDaemonKey(
        id=id,
        secret=secret,
        server_id=f"server-{id}",
        node_id=node_id,
        daemon_url=f"https://{node_id}.example.com:8080",
        daemon_secret=f"{node_id}-token",
    )


class TestRevokeDaemonKeysService:
    """Bulk revocation when a user goes away"""

    @pytest.fixture
    def user(self):
        user = Mock(spec=User)
        user.id = "user1"
        return user

    @pytest.fixture
    def repository(self, mock_db_session):
        repository = AsyncMock(spec=DaemonKeyRepository)
        repository.db = mock_db_session
        return repository

    @pytest.fixture
    def service(self, repository, mock_daemon):
        return RevokeDaemonKeysService(repository, mock_daemon)

    @pytest.mark.asyncio
    async def test_revokes_per_node_then_deletes(
        self, service, repository, mock_daemon, mock_db_session, user
    ):
        repository.list_for_revocation.return_value = [
            revocable("k1", "nodeA", "i_a1"),
            revocable("k2", "nodeB", "i_b1"),
            revocable("k3", "nodeA", "i_a2"),
        ]
        repository.delete_many.return_value = 3

        count = await service.handle(user)

        assert count == 3
        assert mock_daemon.revoke_keys.await_count == 2
        calls = {c.args[0]: c.args for c in mock_daemon.revoke_keys.await_args_list}
        assert calls["https://nodeA.example.com:8080"] == (
            "https://nodeA.example.com:8080",
            "nodeA-token",
            ["i_a1", "i_a2"],
        )
        assert calls["https://nodeB.example.com:8080"][2] == ["i_b1"]
        repository.delete_many.assert_awaited_once_with(["k1", "k2", "k3"])
        mock_db_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_daemon_failure_still_deletes(
        self, service, repository, mock_daemon, user
    ):
        repository.list_for_revocation.return_value = [
            revocable("k1", "nodeA", "i_a1"),
            revocable("k2", "nodeB", "i_b1"),
        ]
        repository.delete_many.return_value = 2
        error = DaemonConnectionError("Daemon temporarily unavailable")
        mock_daemon.revoke_keys.side_effect = [error, None]

        count = await service.handle(user)

        assert count == 2
        assert service.exceptions == {"nodeA": error}
        repository.delete_many.assert_awaited_once_with(["k1", "k2"])

    @pytest.mark.asyncio
    async def test_no_keys_returns_zero(
        self, service, repository, mock_daemon, mock_db_session, user
    ):
        repository.list_for_revocation.return_value = []

        assert await service.handle(user) == 0
        assert await service.handle(user) == 0

        mock_daemon.revoke_keys.assert_not_awaited()
        repository.delete_many.assert_not_awaited()
        mock_db_session.commit.assert_not_awaited()
