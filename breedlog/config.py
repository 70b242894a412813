"""Process-level settings, read from ``BREEDLOG_*`` environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings; a ``.env`` file in the working directory is also read.

    Engine tuning (mating-window offsets, fallback interval, phase days) is
    not here: it lives in ``heat/heat_config.yaml``.  ``heat_config_path``
    points the service at a replacement file.
    """

    app_name: str = "Breedlog"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    environment: str = "development"  # development | staging | production

    heat_config_path: str | None = None

    # Browser clients allowed to call the API
    cors_origins: list[str] = ["http://localhost:5173"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "BREEDLOG_"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
