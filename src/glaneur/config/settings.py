"""
Application settings with environment-based configuration.

Priority (highest to lowest):
1. Environment variables (from .env or system)
2. Environment-specific YAML config file (development.yaml, production.yaml)
3. Default YAML config file (default.yaml)
4. Pydantic defaults
"""

import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Secrets (database URL, JWT key, platform keypair path) should come
    from environment variables, not from YAML files.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    # Application
    APP_NAME: str = "Glaneur"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="development", description="Environment name")
    DEBUG: bool = Field(default=False, description="Debug mode")

    # API Server
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000, ge=1024, le=65535)
    API_RELOAD: bool = Field(default=False)

    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Database (REQUIRED)
    DATABASE_URL: str = Field(..., description="Database connection URL")
    DATABASE_ECHO: bool = Field(default=False)

    # Session tokens (REQUIRED)
    JWT_SECRET_KEY: str = Field(..., description="JWT secret key")
    JWT_ALGORITHM: str = Field(default="HS256")
    JWT_EXPIRATION_HOURS: int = Field(
        default=168,
        ge=1,
        description="Session lifetime in hours (7 days default)",
    )

    # Sign-in challenges
    SIWS_DOMAIN: str = Field(
        default="Glaneur",
        description="Domain shown in the sign-in challenge message",
    )
    CHALLENGE_TTL_SECONDS: int = Field(
        default=300,
        ge=10,
        description="Challenge lifetime in seconds",
    )

    # Redis
    REDIS_ENABLED: bool = Field(default=False)
    REDIS_HOST: str = Field(default="localhost")
    REDIS_PORT: int = Field(default=6379, ge=1024, le=65535)
    REDIS_DB: int = Field(default=0, ge=0, le=15)
    REDIS_PASSWORD: Optional[str] = Field(default=None)

    # Solana (RPC URL REQUIRED)
    SOLANA_RPC_URL: str = Field(..., description="Solana RPC URL")
    SOLANA_NETWORK: str = Field(default="devnet")
    SOLANA_COMMITMENT: str = Field(default="confirmed")
    PLATFORM_KEYPAIR_PATH: Optional[str] = Field(
        default=None,
        description="Path to the platform authority keypair JSON",
    )
    BUBBLEGUM_TREE_ADDRESS: Optional[str] = Field(
        default=None,
        description="Merkle tree that compressed collectibles are minted into",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Resilience - Timeouts
    RPC_TIMEOUT: float = Field(
        default=10.0,
        ge=1.0,
        le=30.0,
        description="Total Solana RPC request timeout in seconds",
    )
    RPC_CONNECT_TIMEOUT: float = Field(
        default=3.0,
        description="Solana RPC connect timeout in seconds",
    )

    # Resilience - Retry
    RETRY_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        description="Maximum retry attempts for transient RPC failures",
    )
    RETRY_INITIAL_DELAY: float = Field(
        default=1.0,
        description="Initial retry delay in seconds",
    )
    RETRY_MAX_DELAY: float = Field(
        default=4.0,
        description="Maximum retry delay in seconds",
    )

    # Collect rate limiting
    COLLECT_USER_DAILY_LIMIT: int = Field(
        default=10,
        ge=1,
        description="Collects per user per daily window",
    )
    COLLECT_IP_DAILY_LIMIT: int = Field(
        default=30,
        ge=1,
        description="Collects per client IP per daily window",
    )
    COLLECT_BURST_LIMIT: int = Field(
        default=2,
        ge=1,
        description="Collects per user per burst window",
    )
    COLLECT_DAILY_WINDOW_SECONDS: int = Field(default=86400, ge=60)
    COLLECT_BURST_WINDOW_SECONDS: int = Field(default=60, ge=1)
    COLLECT_STALE_PENDING_SECONDS: int = Field(
        default=120,
        ge=10,
        description="Age after which an unsigned pending collection is orphaned",
    )

    # Confirmation tracking
    RECONCILIATION_ENABLED: bool = Field(
        default=True,
        description="Run the background pending-collection sweep",
    )
    RECONCILIATION_INTERVAL_SECONDS: float = Field(default=30.0, gt=0)
    RECONCILIATION_BATCH_SIZE: int = Field(default=50, ge=1)

    # Observability
    METRICS_ENABLED: bool = Field(
        default=True,
        description="Expose Prometheus metrics on /metrics",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Invalid LOG_LEVEL. Must be one of: {allowed}")
        return v_upper

    @field_validator("SOLANA_NETWORK")
    @classmethod
    def validate_solana_network(cls, v: str) -> str:
        """Validate Solana network."""
        allowed = ["devnet", "testnet", "mainnet-beta", "localnet"]
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"Invalid SOLANA_NETWORK. Must be one of: {allowed}")
        return v_lower


def load_config(
    config_file: Optional[str] = None,
    env_file: Optional[str] = None,
    env: Optional[str] = None,
) -> Settings:
    """
    Load configuration from YAML files and environment variables.

    Priority: ENV vars > environment-specific YAML > default YAML > defaults

    Args:
        config_file: Optional YAML config filename override
        env_file: Optional .env filename (e.g., ".env.development")
        env: Optional environment name override (e.g., "development", "test")

    Returns:
        Settings instance

    Raises:
        ValidationError: If required fields are missing
    """
    current_file = Path(__file__).resolve()
    project_root = current_file.parent.parent.parent.parent
    config_dir = project_root / "config"

    environment = env or os.getenv("ENV", "production")

    env_map = {
        "production": (".env.production", "production.yaml"),
        "development": (".env.development", "development.yaml"),
        "test": (".env.test", "test.yaml"),
    }

    if env_file is None:
        default_env_file, default_config_file = env_map.get(
            environment, (".env.production", "production.yaml")
        )
        env_file = default_env_file
        if config_file is None:
            config_file = default_config_file

    env_file_path = project_root / env_file
    if env_file_path.exists():
        load_dotenv(env_file_path, override=True)

    merged_config = {}

    default_config_path = config_dir / "default.yaml"
    if default_config_path.exists():
        with open(default_config_path, "r") as f:
            loaded = yaml.safe_load(f)
            if loaded:
                merged_config = loaded

    if config_file:
        env_config_path = config_dir / config_file
        if env_config_path.exists():
            with open(env_config_path, "r") as f:
                loaded = yaml.safe_load(f)
                if loaded:
                    merged_config.update(loaded)

    # Environment variables win over YAML values
    for key in list(merged_config):
        if key in os.environ:
            merged_config.pop(key)

    return Settings(**merged_config)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or initialize global settings singleton."""
    global _settings
    if _settings is None:
        _settings = load_config()
    return _settings


def override_settings(new_settings: Settings) -> None:
    """Override global settings (for testing)."""
    global _settings
    _settings = new_settings


def reset_settings() -> None:
    """Reset settings to force re-initialization (for testing)."""
    global _settings
    _settings = None
