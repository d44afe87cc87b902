"""Application settings and configuration.

This module defines all configuration options for the Kratia Forums application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    This class defines all configuration options for Kratia Forums, including
    the governance constants used when issuing and closing votations.
    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Kratia Forums", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Database configuration
    database_url: str = Field(default="sqlite:///./kratia.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")
    transaction_max_attempts: int = Field(default=5, ge=1, alias="TRANSACTION_MAX_ATTEMPTS")

    # Governance: where votation threads live and how long proposals stay open
    agora_forum_id: str = Field(default="agora", alias="AGORA_FORUM_ID")
    agora_category_id: str = Field(default="cat_agora", alias="AGORA_CATEGORY_ID")
    votation_duration_days: int = Field(default=3, ge=1, alias="VOTATION_DURATION_DAYS")
    votation_quorum_min_participants: int = Field(
        default=10,
        ge=1,
        alias="VOTATION_QUORUM_MIN_PARTICIPANTS",
    )
    # Lower bound applied at closure on top of each votation's own quorum.
    votation_quorum_floor: int = Field(default=1, ge=1, alias="VOTATION_QUORUM_FLOOR")

    # Karma and voting rights
    karma_threshold_for_voting: int = Field(default=100, alias="KARMA_THRESHOLD_FOR_VOTING")
    days_to_karma_eligibility: int = Field(default=30, alias="DAYS_TO_KARMA_ELIGIBILITY")
    proposal_karma_reward: int = Field(default=2, ge=0, alias="PROPOSAL_KARMA_REWARD")

    # Sanctions
    max_sanction_days: int = Field(default=365, ge=1, alias="MAX_SANCTION_DAYS")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
