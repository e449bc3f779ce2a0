"""Process configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from finvault.domain.errors import ConfigError

DEFAULT_BENCHMARK_SYMBOL = "SPY"


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the record store."""

    database_url: str
    encryption_key: str
    environment: str = "development"
    log_level: str = "INFO"
    log_file: Optional[str] = None
    benchmark_symbol: str = DEFAULT_BENCHMARK_SYMBOL

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def default_database_url(db_path: Optional[str] = None) -> str:
    """Build a SQLite URL, defaulting to ~/.finvault/finvault.db."""
    if db_path is None:
        db_dir = Path.home() / ".finvault"
        db_dir.mkdir(exist_ok=True)
        db_path = str(db_dir / "finvault.db")
    return f"sqlite:///{db_path}"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Settings instance

    Raises:
        ConfigError: In production, if the database URL or encryption key is missing
    """
    env = os.environ if environ is None else environ
    environment = env.get("FINVAULT_ENV", "development")

    if environment == "production":
        for name in ("FINVAULT_DATABASE_URL", "FINVAULT_ENCRYPTION_KEY"):
            if not env.get(name):
                raise ConfigError(f"Missing required environment variable: {name}")

    database_url = env.get("FINVAULT_DATABASE_URL") or default_database_url(env.get("FINVAULT_DB_PATH"))

    return Settings(
        database_url=database_url,
        encryption_key=env.get("FINVAULT_ENCRYPTION_KEY", ""),
        environment=environment,
        log_level=env.get("FINVAULT_LOG_LEVEL", "INFO"),
        log_file=env.get("FINVAULT_LOG_FILE") or None,
        benchmark_symbol=env.get("FINVAULT_BENCHMARK_SYMBOL", DEFAULT_BENCHMARK_SYMBOL),
    )
