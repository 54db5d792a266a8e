from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "Shortlink"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Database
    database_url: str = "sqlite:///./shortlink.db"

    # Short links
    base_url: str = "http://127.0.0.1:8000"
    short_code_length: int = 6
    max_insert_attempts: int = 3
    link_ttl_seconds: int = 6 * 60 * 60  # Links expire 6 hours after last modification

    # Short code generation strategy
    short_code_strategy: str = "random"  # Options: "random", "nanoid"

    # Custom code limits (premium owners may pick shorter aliases)
    custom_code_min_length: int = 6
    premium_custom_code_min_length: int = 4
    custom_code_max_length: int = 32

    # Analytics
    analytics_recorder: str = "direct"  # Options: "direct", "queue", "null"

    # Queue settings (used by the "queue" analytics recorder)
    redis_url: str = "redis://localhost:6379/0"
    queue_backend: str = "redis_streams"  # Options: "redis_streams", "memory"
    queue_name: str = "link_access"
    queue_consumer_group: str = "analytics_workers"
    queue_batch_size: int = 100

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
