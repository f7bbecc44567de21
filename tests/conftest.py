import inspect
import os

# Settings are read when cocoon.main is imported.
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")

from unittest.mock import MagicMock  # noqa: E402

import anyio  # noqa: E402
import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from cocoon.auth.dependencies import get_current_user  # noqa: E402
from cocoon.auth.oauth import OAuthClient, get_oauth_service  # noqa: E402
from cocoon.auth.service import AuthService  # noqa: E402
from cocoon.auth.tokens import TokenService, get_token_service  # noqa: E402
from cocoon.core.email import EmailService, get_email_service  # noqa: E402
from cocoon.core.security import hash_password  # noqa: E402
from cocoon.core.settings import Settings, get_settings  # noqa: E402
from cocoon.db.mongo import ensure_indexes, get_database  # noqa: E402
from cocoon.main import app  # noqa: E402
from cocoon.user.models import FederatedAccount, OAuthProvider, User  # noqa: E402
from cocoon.user.repository import UserRepository  # noqa: E402

TEST_PASSWORD = "correct-horse-battery"


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


@pytest.fixture(name="settings")
def settings_fixture():
    """Create test settings."""
    return Settings(
        env_name="test",
        mongodb_url="mongodb://localhost:27017",
        mongodb_db="cocoon-test",
        jwt_secret="test-jwt-secret",
        refresh_token_secret="test-refresh-secret",
        base_url="http://api.test",
        client_url="http://shop.test",
        app_domain="cocoon.test",
        google_client_id="google-client-id",
        google_client_secret="google-client-secret",
        facebook_client_id="facebook-client-id",
        facebook_client_secret="facebook-client-secret",
    )


@pytest.fixture(name="db")
def db_fixture():
    """In-memory database with the application indexes."""
    database = mongomock.MongoClient(tz_aware=True)["cocoon-test"]
    ensure_indexes(database)
    return database


@pytest.fixture(name="users")
def users_fixture(db):
    return UserRepository(db)


@pytest.fixture(name="tokens")
def tokens_fixture(settings: Settings):
    return TokenService(settings)


@pytest.fixture(name="mock_email")
def mock_email_fixture():
    return MagicMock(spec=EmailService)


@pytest.fixture(name="auth_service")
def auth_service_fixture(settings, users, tokens, mock_email):
    return AuthService(settings=settings, users=users, tokens=tokens, email=mock_email)


@pytest.fixture(name="test_password")
def test_password_fixture():
    return TEST_PASSWORD


@pytest.fixture(name="test_user")
def test_user_fixture(users: UserRepository):
    """A verified local account with TEST_PASSWORD."""
    return users.insert(
        User(
            email="test@example.com",
            name="Test User",
            password_hash=hash_password(TEST_PASSWORD),
            email_verified=True,
        )
    )


@pytest.fixture(name="pending_user")
def pending_user_fixture(users: UserRepository):
    """A local account that has not confirmed its email."""
    return users.insert(
        User(
            email="pending@example.com",
            name="Pending User",
            password_hash=hash_password(TEST_PASSWORD),
        )
    )


@pytest.fixture(name="federated_user")
def federated_user_fixture(users: UserRepository):
    return users.insert(
        User(
            email="federated@example.com",
            name="Federated User",
            account=FederatedAccount(provider=OAuthProvider.google, subject="g-123"),
            email_verified=True,
        )
    )


@pytest.fixture(name="mock_oauth")
def mock_oauth_fixture():
    return MagicMock(spec=OAuthClient)


def _override_infrastructure(db, settings, tokens, mock_email, mock_oauth) -> None:
    app.dependency_overrides[get_database] = lambda: db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_token_service] = lambda: tokens
    app.dependency_overrides[get_email_service] = lambda: mock_email
    app.dependency_overrides[get_oauth_service] = lambda: mock_oauth


@pytest.fixture(name="client")
def client_fixture(db, settings, tokens, mock_email, mock_oauth, test_user: User):
    """Create a test client authenticated as test_user."""
    _override_infrastructure(db, settings, tokens, mock_email, mock_oauth)
    app.dependency_overrides[get_current_user] = lambda: test_user

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="unauthenticated_client")
def unauthenticated_client_fixture(db, settings, tokens, mock_email, mock_oauth):
    """Create a test client without auth override (for testing auth failures)."""
    _override_infrastructure(db, settings, tokens, mock_email, mock_oauth)

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
