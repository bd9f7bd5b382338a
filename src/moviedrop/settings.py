from pathlib import Path
from typing import Literal, Optional, List

from pydantic import AnyHttpUrl, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class TMDBSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TMDB_", extra="ignore")
    api_key: SecretStr
    api_base_url: AnyHttpUrl = "https://api.themoviedb.org/3"

class Settings(BaseSettings):

    # ---- Data roots ----
    project_root: Path = Path(".").resolve()
    data_root: Path = Path("data")
    store_dir: Path = data_root / "store"
    client_state_dir: Path = data_root / "client"

    # ---- app/runtime ----
    env: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    verify_ssl: bool = True

    # ---- reproducibility ----
    random_seed: Optional[int] = None  # None = fresh entropy for every shuffle

    # ---- upstream ----
    region_default: str = "US"
    tmdb_image_base: str = "https://image.tmdb.org/t/p"
    request_timeout: float = 12.0  # seconds, applies to every upstream call

    # ---- feed / personalization ----
    feed_limit: int = 20
    min_signals: int = 3
    signal_workers: int = 2

    # ---- API server configuration ----
    api_host: str = "127.0.0.1"  # localhost for dev, 0.0.0.0 for docker/prod
    api_port: int = 8000
    api_reload: bool = True  # Auto-reload on code changes (dev only)
    api_workers: int = 1
    api_base_url: str = "http://127.0.0.1:8000/api/v1"  # used by the HTTP client / CLI
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_file = ".env",
        env_prefix="APP_",      # APP_ENV, APP_LOG_LEVEL, etc.
        env_nested_delimiter='__',
        extra = "ignore"
    )

    # ---- integrations ----
    tmdb: Optional[TMDBSettings] = None  # <-- DO NOT instantiate here


def get_settings() -> Settings:
    """
    Build settings from the environment / .env file.

    The TMDB block can be given nested (APP_TMDB__API_KEY) or, as most
    deployments do, flat via TMDB_API_KEY. A missing key leaves `tmdb`
    unset; callers that need the upstream raise MissingCredentialError.
    """
    cfg = Settings()
    if cfg.tmdb is None:
        try:
            cfg.tmdb = TMDBSettings()
        except ValidationError:
            cfg.tmdb = None
    return cfg
