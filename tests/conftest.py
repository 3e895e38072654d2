from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from panel.db.session import Base
from panel.models.daemon_key_model import DaemonKey  # noqa: F401
from panel.models.node_model import Node
from panel.models.server_model import Server
from panel.models.subuser_model import Subuser
from panel.models.user_model import User
from panel.services.daemon_service import DaemonService

# In-memory SQLite so the real unique constraints apply
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeClock:
    """Controllable now() source"""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_db_session():
    """Create a properly configured mock database session"""
    session = AsyncMock(spec=AsyncSession)

    session.add = MagicMock()
    session.commit = AsyncMock()
    session.flush = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()

    # begin_nested() is used as `async with`; errors inside must propagate
    savepoint = MagicMock()
    savepoint.__aenter__ = AsyncMock(return_value=savepoint)
    savepoint.__aexit__ = AsyncMock(return_value=False)
    session.begin_nested = MagicMock(return_value=savepoint)

    return session


@pytest.fixture
def mock_daemon():
    """Daemon client that accepts every call"""
    return AsyncMock(spec=DaemonService)


@pytest.fixture
def mock_node():
    node = Mock(spec=Node)
    node.id = "node1"
    node.daemon_url = "https://node1.example.com:8080"
    node.daemon_secret = "node1-token"
    return node


@pytest.fixture
def mock_server(mock_node):
    server = Mock(spec=Server)
    server.id = "server1"
    server.owner_id = "owner1"
    server.node_id = mock_node.id
    server.node = mock_node
    return server


@pytest_asyncio.fixture
async def db_session():
    """Fresh in-memory database per test"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded(db_session):
    """
    Two nodes, an owner, an admin, a subuser and a stranger.
    server1 lives on node1, server2 on node2; both owned by `owner`.
    """
    node1 = Node(
        id="node1", name="node1", fqdn="node1.example.com", daemon_secret="node1-token"
    )
    node2 = Node(
        id="node2",
        name="node2",
        fqdn="node2.example.com",
        scheme="http",
        daemon_listen=9090,
        daemon_secret="node2-token",
    )
    owner = User(id="owner", email="owner@example.com", username="owner")
    admin = User(
        id="admin", email="admin@example.com", username="admin", root_admin=True
    )
    sub = User(id="sub", email="sub@example.com", username="sub")
    stranger = User(id="stranger", email="stranger@example.com", username="stranger")
    server1 = Server(id="server1", name="survival", owner_id="owner", node_id="node1")
    server2 = Server(id="server2", name="creative", owner_id="owner", node_id="node2")
    subuser = Subuser(id="subuser1", user_id="sub", server_id="server1")

    db_session.add_all(
        [node1, node2, owner, admin, sub, stranger, server1, server2, subuser]
    )
    await db_session.commit()

    return {
        "node1": node1,
        "node2": node2,
        "owner": owner,
        "admin": admin,
        "sub": sub,
        "stranger": stranger,
        "server1": server1,
        "server2": server2,
        "subuser": subuser,
    }
