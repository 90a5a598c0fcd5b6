"""Configuration of DuckPyground.

All settings can be provided through environment variables
prefixed by ``DUCKPYGROUND_``, for example::

    DUCKPYGROUND_DATABASE=analytics.duckdb pyground-duckquery "SELECT 42"

Options explicitly provided on the command line always
take precedence over the settings.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment driven settings."""

    model_config = SettingsConfigDict(env_prefix="DUCKPYGROUND_", case_sensitive=False)

    # ":memory:" gives a transient in-process database.
    database: str = ":memory:"
    read_only: bool = False
    threads: int | None = None
    memory_limit: str | None = None

    posts_dir: str = "_posts"
    default_layout: str = "post"
    required_front_matter: list[str] = Field(
        default_factory=lambda: ["layout", "title", "date", "categories"]
    )
    similarity_threshold: float = Field(default=0.9, ge=0.0, le=1.0)

    log_level: str = "WARNING"
    log_json: bool = False

    def duckdb_config(self) -> dict[str, str | int]:
        """Options to provide to DuckDB when connecting."""
        config: dict[str, str | int] = {}
        if self.threads is not None:
            config["threads"] = self.threads
        if self.memory_limit is not None:
            config["memory_limit"] = self.memory_limit
        return config


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process wide settings, read once from the environment."""
    return Settings()
