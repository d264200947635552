import inspect
import os
from unittest.mock import MagicMock

# Settings are read at import time by the engine and the admin panel.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET_KEY", "test-secret-key")
os.environ.setdefault("ADMIN_USERNAME", "admin")
os.environ.setdefault("ADMIN_PASSWORD", "admin")
os.environ.setdefault("PUSH_ENABLED", "false")

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from neighborwatch.auth.dependencies import get_current_user  # noqa: E402
from neighborwatch.auth.service import (  # noqa: E402
    FirebaseAuthService,
    TokenClaims,
    get_firebase_auth_service,
)
from neighborwatch.core.settings import Settings, get_settings  # noqa: E402
from neighborwatch.db.engine import get_session  # noqa: E402
from neighborwatch.main import app  # noqa: E402
from neighborwatch.notifications.push import (  # noqa: E402
    PushService,
    get_push_service,
)
from neighborwatch.user.models import User, UserStatus  # noqa: E402


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


def make_user(session: Session, external_id: str, email: str, **kwargs) -> User:
    user = User(external_id=external_id, email=email, **kwargs)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session):
    """Create a test user in the database."""
    return make_user(
        session,
        "test-firebase-uid-123",
        "test@example.com",
        first_name="Test",
        last_name="User",
        push_token="ExponentPushToken[test]",
    )


@pytest.fixture(name="other_user")
def other_user_fixture(session: Session):
    """A second, unrelated user."""
    return make_user(
        session,
        "other-firebase-uid-789",
        "other@example.com",
        first_name="Other",
        last_name="Person",
        push_token="ExponentPushToken[other]",
    )


@pytest.fixture(name="inactive_user")
def inactive_user_fixture(session: Session):
    """Create an inactive test user."""
    return make_user(
        session,
        "inactive-uid-456",
        "inactive@example.com",
        first_name="Inactive",
        last_name="User",
        status=UserStatus.inactive,
    )


@pytest.fixture(name="mock_firebase_auth")
def mock_firebase_auth_fixture():
    """Create a mock FirebaseAuthService."""
    mock_service = MagicMock(spec=FirebaseAuthService)
    mock_service.verify_session_cookie.return_value = TokenClaims(uid="test-uid")
    mock_service.verify_id_token.return_value = TokenClaims(uid="test-uid")
    return mock_service


@pytest.fixture(name="mock_push")
def mock_push_fixture():
    """Push dispatcher that records calls instead of sending."""
    mock_service = MagicMock(spec=PushService)
    mock_service.notify.return_value = 0
    return mock_service


@pytest.fixture(name="mock_settings")
def mock_settings_fixture():
    """Create mock settings."""
    return Settings(
        env_name="test",
        database_url="sqlite://",
        session_secret_key="test-secret-key",
        admin_username="admin",
        admin_password="admin",
        public_base_url="https://api.example.com",
        push_enabled=False,
    )


def _override_common(session, mock_firebase_auth, mock_settings, mock_push) -> None:
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_firebase_auth_service] = lambda: mock_firebase_auth
    app.dependency_overrides[get_settings] = lambda: mock_settings
    app.dependency_overrides[get_push_service] = lambda: mock_push


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    test_user: User,
    mock_firebase_auth: MagicMock,
    mock_settings: Settings,
    mock_push: MagicMock,
):
    """Create a test client authenticated as test_user."""
    _override_common(session, mock_firebase_auth, mock_settings, mock_push)
    app.dependency_overrides[get_current_user] = lambda: test_user

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()


@pytest.fixture(name="login_as")
def login_as_fixture(client: TestClient):
    """Switch the user the ``client`` fixture is authenticated as."""

    def _login_as(user: User) -> TestClient:
        app.dependency_overrides[get_current_user] = lambda: user
        return client

    return _login_as


@pytest.fixture(name="unauthenticated_client")
def unauthenticated_client_fixture(
    session: Session,
    mock_firebase_auth: MagicMock,
    mock_settings: Settings,
    mock_push: MagicMock,
):
    """Create a test client without auth override (for testing auth failures)."""
    _override_common(session, mock_firebase_auth, mock_settings, mock_push)

    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
