"""
Shared test fixtures and utilities for the test suite.

This module provides common fixtures for database sessions, users,
workspaces with members, projects and a recording event publisher.
"""
import os

# Settings are read at import time, so the environment is prepared first
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import AsyncGenerator, List  # noqa: E402
from unittest.mock import AsyncMock, Mock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

import strideboard.modules  # noqa: E402,F401
from strideboard.core.database import configure_sqlite_engine  # noqa: E402
from strideboard.core.models import Base  # noqa: E402
from strideboard.modules.auth.models import User  # noqa: E402
from strideboard.modules.project.models import Project  # noqa: E402
from strideboard.modules.project.schemas import ProjectCreate  # noqa: E402
from strideboard.modules.project.service import ProjectService  # noqa: E402
from strideboard.modules.work_item.events import (  # noqa: E402
    ChangeKind,
    WorkItemChanged,
    WorkItemEventPublisher,
)
from strideboard.modules.workspace.models import (  # noqa: E402
    Membership,
    Workspace,
    WorkspaceRole,
)
from strideboard.modules.workspace.schemas import WorkspaceCreate  # noqa: E402
from strideboard.modules.workspace.service import WorkspaceService  # noqa: E402

# Test database URL for in-memory SQLite
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Not a valid bcrypt hash; verify_password() reports a mismatch for it
PLACEHOLDER_HASH = "not-a-bcrypt-hash"


class RecordingEventPublisher(WorkItemEventPublisher):
    """Publisher that keeps events in memory for assertions."""

    def __init__(self) -> None:
        self.events: List[WorkItemChanged] = []

    async def publish(self, event: WorkItemChanged) -> None:
        self.events.append(event)

    def kinds(self) -> List[ChangeKind]:
        return [event.kind for event in self.events]


def build_engine(url: str = TEST_DATABASE_URL):
    """Create a SQLite engine configured like the application engine."""
    if url == TEST_DATABASE_URL:
        engine = create_async_engine(
            url,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(url, echo=False)
    configure_sqlite_engine(engine)
    return engine


def build_session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine."""
    engine = build_engine()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def mock_db_session():
    """Create a mock database session for unit tests."""
    session = AsyncMock(spec=AsyncSession)
    session.add = Mock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    return session


@pytest.fixture
def publisher() -> RecordingEventPublisher:
    return RecordingEventPublisher()


async def create_user(session: AsyncSession, email: str, display_name: str = "") -> User:
    """Insert a user directly, bypassing password hashing."""
    user = User(email=email, display_name=display_name, hashed_password=PLACEHOLDER_HASH)
    session.add(user)
    await session.commit()
    return user


async def add_member(
    session: AsyncSession,
    workspace: Workspace,
    user: User,
    role: WorkspaceRole = WorkspaceRole.MEMBER
) -> Membership:
    """Grant a user a role in a workspace."""
    membership = Membership(workspace_id=workspace.id, user_id=user.id, role=role)
    session.add(membership)
    await session.commit()
    return membership


@pytest_asyncio.fixture
async def alice(db_session: AsyncSession) -> User:
    """Workspace owner in most tests."""
    return await create_user(db_session, "alice@example.com", "Alice")


@pytest_asyncio.fixture
async def bob(db_session: AsyncSession) -> User:
    return await create_user(db_session, "bob@example.com", "Bob")


@pytest_asyncio.fixture
async def carol(db_session: AsyncSession) -> User:
    return await create_user(db_session, "carol@example.com", "Carol")


@pytest_asyncio.fixture
async def workspace(db_session: AsyncSession, alice: User) -> Workspace:
    """Workspace "My Team" owned by alice."""
    return await WorkspaceService(db_session).create_workspace(
        WorkspaceCreate(name="My Team"), alice
    )


@pytest_asyncio.fixture
async def project(db_session: AsyncSession, workspace: Workspace, alice: User) -> Project:
    """Project "Board" in alice's workspace."""
    return await ProjectService(db_session).create_project(
        workspace.id, ProjectCreate(name="Board", description="Main board"), alice
    )
