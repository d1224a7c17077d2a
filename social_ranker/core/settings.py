"""Application settings loaded from environment / .env file.

Config precedence (highest to lowest):
    1. Environment variables
    2. ``.env`` file in project root
    3. Defaults defined in this module

Metric weights are intentionally *not* configurable here; they live in
:data:`social_ranker.services.scoring.ENGAGEMENT_WEIGHTS`.
"""

from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from social_ranker.services.scoring import ScoringStrategy

# Project root is two levels up from this file (social_ranker/core/settings.py)
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
_DEFAULT_DB_PATH = str(_PROJECT_ROOT / "data" / "app.db")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
    )

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Database: override via APP_DB_PATH env var
    app_db_path: str = _DEFAULT_DB_PATH

    @property
    def database_url(self) -> str:
        """SQLite connection URL derived from ``app_db_path``."""
        return f"sqlite:///{self.app_db_path}"

    # Scoring: the strategy decides which posts a run persists
    scoring_strategy: ScoringStrategy = ScoringStrategy.min_max
    historical_chunk_size: int = Field(default=1000, ge=1)

    @model_validator(mode="after")
    def _validate_db_path(self) -> "Settings":
        """Ensure the DB path parent directory exists or can be created."""
        parent = Path(self.app_db_path).parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            msg = (
                f"Cannot create database directory '{parent}': {exc}. "
                f"Set APP_DB_PATH to a writable location."
            )
            raise ValueError(msg) from exc
        return self

    def safe_dump(self) -> dict[str, object]:
        """Return settings dict suitable for a ``config_loaded`` log line."""
        return {
            "api_host": self.api_host,
            "api_port": self.api_port,
            "debug": self.debug,
            "log_level": self.log_level,
            "app_db_path": self.app_db_path,
            "scoring_strategy": self.scoring_strategy.value,
            "historical_chunk_size": self.historical_chunk_size,
        }


settings = Settings()
