"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and environment, and provides common fixtures for
unit and integration tests.
"""
import os
import sys
import tempfile
from pathlib import Path

# Settings are read once at import of api.config: point them at throwaway
# locations before anything imports the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "lajan-test-logs"))
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PROGRESS_TIMEZONE", "UTC")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root and src to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """In-memory SQLite engine shared by every session of one test."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def session_factory(in_memory_engine):
    from api.config import Base
    import api.models  # noqa: F401

    Base.metadata.create_all(in_memory_engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)


@pytest.fixture
def db_session(session_factory):
    """In-memory database session with the schema and the built-in catalog."""
    from api.services.catalog import seed_catalog

    session = session_factory()
    seed_catalog(session)
    yield session
    session.close()


@pytest.fixture
def test_user(db_session):
    """A registered user with no progress yet."""
    from api.utils.auth import create_user

    return create_user(
        "learner@example.com",
        "testpass123",
        db_session,
        name="Test Learner",
        preferred_topics=["banking"],
        learning_style="practical",
    )
