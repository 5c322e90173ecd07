"""
Application Configuration
=========================

Centralized configuration using Pydantic Settings for type-safe environment variables.
All config is loaded from environment variables or .env file.

Environment Setup:
------------------
For local development, create a .env file in /backend with:
    POSTGRES_SERVER=localhost
    POSTGRES_USER=postgres
    POSTGRES_PASSWORD=yourpassword
    POSTGRES_DB=docsync
    REDIS_HOST=localhost
    DOCS_GITHUB_REPO=laravilt/laravilt
    DOCS_GITHUB_TOKEN=ghp_...   # optional, raises the API rate limit

Navigation preferences are JSON when set through the environment:
    DOCS_NAV_SECTIONS='{"getting-started": "Getting Started", "forms": "Forms"}'
    DOCS_NAV_ITEM_ORDER='{"forms": ["introduction", "validation"]}'
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


DEFAULT_NAV_SECTIONS: dict[str, str] = {
    "getting-started": "Getting Started",
    "panel": "Panel",
    "forms": "Forms",
    "tables": "Tables",
    "infolists": "Infolists",
    "actions": "Actions",
    "notifications": "Notifications",
    "widgets": "Widgets",
    "auth": "Authentication",
    "ai": "AI Integration",
    "schemas": "Schemas",
    "frontend": "Frontend",
    "query-builder": "Query Builder",
    "plugins": "Plugins",
    "support": "Support",
}

DEFAULT_NAV_ITEM_ORDER: dict[str, list[str]] = {
    "getting-started": ["installation", "quick-start", "architecture"],
    "panel": [
        "introduction",
        "creating-panels",
        "resources",
        "pages",
        "navigation",
        "themes",
        "tenancy",
    ],
    "forms": [
        "introduction",
        "field-types",
        "validation",
        "layouts",
        "reactive-fields",
        "custom-fields",
    ],
    "tables": ["introduction", "columns", "filters", "actions", "api"],
    "auth": ["introduction", "methods", "two-factor", "social", "passkeys", "profile"],
    "frontend": ["README", "components", "layouts", "styling", "utilities"],
}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Pydantic Settings provides:
    - Automatic type coercion (str -> int, JSON -> dict, etc.)
    - Validation with clear error messages
    - .env file support
    - Case-insensitive matching
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # POSTGRES_USER == postgres_user
        extra="ignore",  # Ignore unknown env vars without error
        populate_by_name=True,  # Allow both field name and alias
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    app_name: str = "Docs Sync"
    debug: bool = False  # Set DEBUG=true for verbose logging
    environment: Literal["development", "staging", "production"] = "development"
    admin_secret: str = "sync-secret-change-me"

    # -------------------------------------------------------------------------
    # PostgreSQL Database Configuration
    # -------------------------------------------------------------------------
    # DATABASE_URL wins when present, otherwise built from POSTGRES_* vars
    database_url_override: str | None = Field(None, alias="DATABASE_URL")

    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_server: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "docsync"

    @property
    def database_url(self) -> str:
        """
        Get async database connection URL.

        Priority:
        1. DATABASE_URL env var
        2. Constructed from individual POSTGRES_* vars

        Note: hosted providers hand out 'postgresql://' URLs but async
        SQLAlchemy needs 'postgresql+asyncpg://'.
        """
        if self.database_url_override:
            url = self.database_url_override
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+asyncpg://", 1)
            elif url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_server}:{self.postgres_port}/{self.postgres_db}"

    # -------------------------------------------------------------------------
    # Redis Configuration
    # -------------------------------------------------------------------------
    # Used for: Celery broker, result backend, and the navigation cache
    redis_url_override: str | None = Field(None, alias="REDIS_URL")

    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: str | None = None

    @property
    def redis_url(self) -> str:
        """
        Get Redis connection URL.

        Priority:
        1. REDIS_URL env var
        2. Constructed from individual REDIS_* vars
        """
        if self.redis_url_override:
            return self.redis_url_override
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # "memory" keeps the navigation cache in-process (single worker / tests)
    cache_backend: Literal["redis", "memory"] = "redis"

    # -------------------------------------------------------------------------
    # Documentation Source
    # -------------------------------------------------------------------------
    docs_github_repo: str = "laravilt/laravilt"
    docs_github_branch: str = "master"
    docs_github_path: str = "docs"  # Folder inside the repo holding the docs tree
    docs_github_token: str | None = None
    docs_github_api_url: str = "https://api.github.com"
    docs_github_raw_url: str = "https://raw.githubusercontent.com"
    docs_user_agent: str = "Docs-Sync"

    # Used by `docsync sync --local` when no --path is given
    docs_local_path: str = "packages/laravilt/docs"

    # Every network call is bounded; a timed out unit counts as a failure
    docs_http_timeout: float = 15.0
    docs_fetch_max_concurrency: int = Field(default=4, ge=1)
    docs_fetch_max_attempts: int = Field(default=3, ge=1)
    docs_fetch_backoff: float = 1.0  # Exponential backoff multiplier (seconds)

    # -------------------------------------------------------------------------
    # Rendering & Read Paths
    # -------------------------------------------------------------------------
    docs_base_path: str = "/docs"  # Site prefix for rewritten internal links
    docs_default_page: str = "getting-started/installation"
    docs_search_min_length: int = 2
    docs_search_limit: int = 20

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------
    docs_nav_sections: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_NAV_SECTIONS)
    )
    docs_nav_item_order: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_NAV_ITEM_ORDER.items()}
    )
    docs_nav_cache_key: str = "docs_navigation"
    docs_nav_cache_ttl: int = 6 * 3600  # Backstop only, sync invalidates explicitly

    # -------------------------------------------------------------------------
    # API Configuration
    # -------------------------------------------------------------------------
    api_prefix: str = "/api"

    # CORS origins - frontend URLs allowed to make requests (comma-separated)
    cors_origins_str: str = Field(
        default="http://localhost:3000,http://127.0.0.1:3000",
        alias="CORS_ORIGINS"
    )

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]

    # -------------------------------------------------------------------------
    # Celery Task Queue Configuration
    # -------------------------------------------------------------------------
    celery_broker_url: str | None = None  # Override for separate broker
    celery_result_backend: str | None = None  # Override for separate backend

    @property
    def celery_broker(self) -> str:
        """Message broker URL - where tasks are queued."""
        return self.celery_broker_url or self.redis_url

    @property
    def celery_backend(self) -> str:
        """Result backend URL - where task results are stored."""
        return self.celery_result_backend or self.redis_url

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance - import this throughout the package
# Usage: from docsync.config import settings
settings = get_settings()
