"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - An oracle (or the listing search) is "configured" only when its credential/URL is set

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Two timeout layers per oracle: client timeout (per HTTP call) and strategy timeout
      (whole contribution, including retries)
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

ANTHROPIC_KEY_PLACEHOLDER = "sk-ant-placeholder"


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://fango:fango@db:5432/fango"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres provides postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Language oracle (Anthropic)
    anthropic_api_key: str = ANTHROPIC_KEY_PLACEHOLDER
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 120
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 60_000
    llm_model: str = "claude-sonnet-4-5"
    llm_max_tokens: int = 2000

    # Similarity oracle (vector server)
    similarity_server_url: str = ""
    similarity_timeout_seconds: float = 10.0
    similarity_index_timeout_seconds: float = 300.0

    # Listing search (external property search API)
    external_search_url: str = ""
    external_search_api_key: str = ""
    external_search_timeout_seconds: float = 120.0

    # Ranking chain: per-strategy bounds
    similarity_strategy_timeout_seconds: float = 15.0
    llm_strategy_timeout_seconds: float = 180.0
    round_size: int = 10

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def language_oracle_enabled(self) -> bool:
        return bool(self.anthropic_api_key) and (
            self.anthropic_api_key != ANTHROPIC_KEY_PLACEHOLDER
        )

    @property
    def similarity_oracle_enabled(self) -> bool:
        return bool(self.similarity_server_url)

    @property
    def listing_search_enabled(self) -> bool:
        return bool(self.external_search_url) and bool(self.external_search_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
