from functools import lru_cache
from zoneinfo import ZoneInfo

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./lajan.db"
    secret_key: str = "your-secret-key-here-change-in-production"  # In production, use environment variable
    access_token_expire_minutes: int = 30

    ollama_base_url: str = "http://localhost:11434"
    ollama_model: str = "qwen:latest"
    generation_timeout_seconds: float = 60.0

    log_level: str = "INFO"
    log_dir: str = "logs"

    progress_timezone: str = "UTC"
    module_completion_points: int = 50
    lesson_completion_points: int = 10
    store_max_attempts: int = 3
    applied_event_retention_days: int = 30
    seed_catalog: bool = True

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.progress_timezone)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def _make_engine(url: str):
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)
    return create_engine(url, pool_pre_ping=True)


settings = get_settings()
engine = _make_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def reset_db():
    Base.metadata.drop_all(bind=engine)
    create_db()


def create_db():
    # Import for side effect: registers every table on Base.metadata.
    import api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
