"""Pytest configuration and fixtures."""

import os

# Settings are read when bill.core.config is first imported, so the test
# environment has to be in place before any bill import below.
os.environ["DEBUG"] = "true"
os.environ["OTEL_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "INFO"
os.environ["SECRET_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_URL"] = "https://bill-test.supabase.co"
os.environ["SECRET_SUPABASE_ANON_KEY"] = "test-anon-key"
os.environ["SECRET_SUPABASE_JWT_SECRET"] = "test-jwt-secret-with-enough-entropy-0123456789"
os.environ["SECRET_PII_HASH"] = "test-pii-secret-0123456789abcdef0123456789"

import uuid
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock

import pytest
from bill.api.dependencies import get_family_repository, get_identity_provider, get_user_repository
from bill.core import database, telemetry
from bill.core.config import settings
from bill.core.database import get_db
from bill.domain.entities import Family, User, UserProfile
from bill.main import app
from bill.models import Base
from bill.repositories.base import FamilyRepository, UserRepository
from bill.services.identity_provider import IdentityProvider, ProviderIdentity
from httpx import ASGITransport, AsyncClient
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tests.helpers.jwt_helpers import make_access_token

# Database fixtures


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """
    In-memory SQLite engine with the full schema.

    StaticPool keeps a single connection alive so every session in the test
    sees the same in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Async session bound to the test engine."""
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session


# Port test doubles


def _assign_profile_ids(profile: UserProfile) -> UserProfile:
    return UserProfile.create(
        id=profile.id or 1,
        serial=profile.serial or uuid.uuid4().hex,
        name=profile.name,
        surname=profile.surname,
        birth_date=profile.birth_date,
        user_id=profile.user_id,
    )


@pytest.fixture
def user_repository() -> AsyncMock:
    """
    UserRepository double with an empty store.

    Lookups find nothing; saves echo their argument back, with profile
    ids assigned the way storage would.
    """
    repository = AsyncMock(spec=UserRepository)
    repository.find_by_email.return_value = None
    repository.find_by_id.return_value = None
    repository.find_profile_by_user_id.return_value = None
    repository.save.side_effect = lambda user: user
    repository.save_profile.side_effect = _assign_profile_ids
    return repository


@pytest.fixture
def family_repository() -> AsyncMock:
    """FamilyRepository double assigning id 42 on save."""
    repository = AsyncMock(spec=FamilyRepository)
    repository.save.side_effect = lambda family: Family.create(id=42, name=family.name, user_id=family.user_id)
    return repository


@pytest.fixture
def identity_provider() -> AsyncMock:
    """IdentityProvider double that mints a fresh identity for every sign-up."""
    provider = AsyncMock(spec=IdentityProvider)
    provider.sign_up.side_effect = lambda email, password: ProviderIdentity(
        external_user_id=str(uuid.uuid4()),
        email=email,
    )
    return provider


# Test data factories


@pytest.fixture
def signup_payload() -> dict[str, str]:
    """Valid signup body with a unique email."""
    return {
        "email": f"ann.lee.{uuid.uuid4().hex[:8]}@example.com",
        "password": "s3cret-pass",
        "name": "Ann",
        "surname": "Lee",
        "birth_date": "2000-01-01",
    }


@pytest.fixture
def existing_user() -> User:
    """Confirmed user previously mirrored from the identity provider."""
    return User.create(
        id=str(uuid.uuid4()),
        email="existing@example.com",
        is_super_admin=True,
        email_confirmed_at=datetime(2024, 3, 1, 12, 0, tzinfo=UTC),
    )


@pytest.fixture
def existing_profile(existing_user: User) -> UserProfile:
    """Profile already stored for ``existing_user``."""
    return UserProfile.create(
        id=7,
        serial=uuid.uuid4().hex,
        name="Ann",
        surname="Lee",
        birth_date=date(1990, 5, 17),
        user_id=existing_user.id,
    )


# HTTP fixtures


@pytest.fixture
def auth_user_id() -> str:
    return str(uuid.uuid4())


@pytest.fixture
def auth_headers(auth_user_id: str) -> dict[str, str]:
    """Authorization header for ``auth_user_id``."""
    return {"Authorization": f"Bearer {make_access_token(auth_user_id)}"}


@pytest.fixture
async def async_client(
    user_repository: AsyncMock,
    family_repository: AsyncMock,
    identity_provider: AsyncMock,
) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app with every port replaced by a test double."""
    app.dependency_overrides[get_user_repository] = lambda: user_repository
    app.dependency_overrides[get_family_repository] = lambda: family_repository
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
async def db_async_client(db_session: AsyncSession, identity_provider: AsyncMock) -> AsyncGenerator[AsyncClient]:
    """HTTP client using the real SQLAlchemy repositories on SQLite and a stubbed identity provider."""

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


# OpenTelemetry fixtures


@pytest.fixture
def otel_enabled_provider(monkeypatch: pytest.MonkeyPatch) -> Generator[tuple[TracerProvider, InMemorySpanExporter]]:
    """
    TracerProvider that records spans in memory instead of exporting them.

    Yields:
        Tuple of (TracerProvider, InMemorySpanExporter); read spans with
        ``exporter.get_finished_spans()``.
    """
    monkeypatch.setattr(settings, "OTEL_ENABLED", True)

    exporter = InMemorySpanExporter()
    provider = TracerProvider(
        resource=Resource(
            attributes={
                "service.name": "bill-backend-test",
                "deployment.environment": "test",
            }
        )
    )
    provider.add_span_processor(SimpleSpanProcessor(exporter))

    # Bypass set_tracer_provider(), which refuses to replace a provider once set
    trace._TRACER_PROVIDER = provider  # type: ignore[attr-defined]

    yield provider, exporter

    exporter.clear()
    trace._TRACER_PROVIDER = None  # type: ignore[attr-defined]


@pytest.fixture(autouse=True)
def reset_module_state() -> Generator[None]:
    """Reset lazily created engine and tracer provider globals around each test."""
    telemetry._tracer_provider = None  # type: ignore[attr-defined]
    database._engine = None  # type: ignore[attr-defined]
    database._session_factory = None  # type: ignore[attr-defined]

    yield

    telemetry._tracer_provider = None  # type: ignore[attr-defined]
    database._engine = None  # type: ignore[attr-defined]
    database._session_factory = None  # type: ignore[attr-defined]
