"""Application configuration using Pydantic Settings.

All configuration is loaded from environment variables.
No secrets are hardcoded.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LauncherKind(str, Enum):
    """Mechanism used to hand UPI URLs to a payment app."""

    SYSTEM = "system"
    ADB = "adb"


class LLMSettings(BaseSettings):
    """LLM service configuration.

    Defaults target the Groq OpenAI-compatible endpoint.
    """

    model_config = SettingsConfigDict(env_prefix="LLM_")

    base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="LLM API base URL",
    )
    model: str = Field(
        default="llama3-70b-8192",
        description="Model name to use for generation",
    )
    api_key: SecretStr = Field(
        default=SecretStr("not-required"),
        description="Bearer API key",
    )
    timeout: float = Field(
        default=120.0,
        description="Request timeout in seconds",
    )
    max_tokens: int = Field(
        default=1024,
        description="Maximum tokens in a chat response",
    )
    analysis_max_tokens: int = Field(
        default=4096,
        description="Maximum tokens in a transaction analysis response",
    )
    temperature: float = Field(
        default=0.7,
        description="Sampling temperature",
    )


class EmbeddingSettings(BaseSettings):
    """Embedding service configuration."""

    model_config = SettingsConfigDict(env_prefix="EMBEDDING_")

    base_url: str = Field(
        default="https://api-inference.huggingface.co/models",
        description="HuggingFace Inference API base URL",
    )
    model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="Embedding model name",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="HuggingFace bearer token",
    )
    timeout: float = Field(
        default=60.0,
        description="Request timeout in seconds",
    )


class StoreSettings(BaseSettings):
    """Hosted transaction store (Supabase) configuration."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = Field(
        default="http://localhost:54321",
        description="Supabase project URL",
    )
    api_key: SecretStr = Field(
        default=SecretStr(""),
        description="Supabase anon or service key",
    )
    table: str = Field(
        default="transactions",
        description="Transactions table name",
    )
    default_category: str = Field(
        default="Food",
        description="Category used when a transaction has none",
    )
    timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds",
    )


class SearchSettings(BaseSettings):
    """Local semantic search configuration."""

    model_config = SettingsConfigDict(env_prefix="SEARCH_")

    threshold: float = Field(
        default=0.6,
        ge=-1.0,
        le=1.0,
        description="Minimum cosine similarity to include a transaction",
    )
    limit: int = Field(
        default=5,
        ge=1,
        description="Maximum number of search results",
    )


class UpiSettings(BaseSettings):
    """UPI dispatch configuration."""

    model_config = SettingsConfigDict(env_prefix="UPI_")

    launcher: LauncherKind = Field(
        default=LauncherKind.SYSTEM,
        description="How payment URLs are handed to a UPI app",
    )
    adb_path: str = Field(
        default="adb",
        description="Path to the adb executable",
    )
    adb_serial: str | None = Field(
        default=None,
        description="Target device serial (optional with one device)",
    )


class Settings(BaseSettings):
    """Main application settings.

    Aggregates all configuration sections.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application settings
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # API settings
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    upi: UpiSettings = Field(default_factory=UpiSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()
