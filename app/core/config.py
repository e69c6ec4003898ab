from functools import lru_cache
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "Traitors Fantasy Draft"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql://localhost:5432/traitors_fantasy"

    # Shared secret for commissioner-only routes
    commissioner_key: str = "changeme"

    # Scoring
    default_rule_pack_id: str = "traitors-classic"
    score_history_limit: int = 52  # archived weekly snapshots kept per season

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def async_database_url(self) -> str:
        """Database URL with an async driver, so plain postgres URLs from the host work."""
        url = self.database_url
        if url.startswith("postgres://"):
            url = "postgresql://" + url[len("postgres://"):]
        if url.startswith("postgresql://"):
            url = "postgresql+asyncpg://" + url[len("postgresql://"):]
        return url


@lru_cache()
def get_settings() -> Settings:
    return Settings()
