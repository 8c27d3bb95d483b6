# ============================================================================
# CLAUDE CONTEXT - APPLICATION CONFIGURATION
# ============================================================================
# STATUS: Core Infrastructure - Configuration Management
# PURPOSE: Centralized PostgreSQL connection configuration with managed identity support
# EXPORTS: AppConfig, get_app_config, get_postgres_connection_string
# DEPENDENCIES: pydantic-settings, azure-identity
# SOURCE: Environment variables, .env file, Azure managed identity
# PATTERNS: Singleton pattern for config, lazy initialization for credentials
# ============================================================================

"""
Application Configuration Module

Provides the PostgreSQL connection settings of the RUIAN database that backs
the reverse geocoding endpoints.

Authentication Modes:
    1. Password-based (local development):
       - Requires: POSTGIS_HOST, POSTGIS_USER, POSTGIS_PASSWORD
       - Use when: USE_MANAGED_IDENTITY=false or not set

    2. Managed Identity (Azure production):
       - Requires: System-assigned managed identity enabled
       - Use when: USE_MANAGED_IDENTITY=true

Usage:
    from config import get_postgres_connection_string

    conn = psycopg.connect(get_postgres_connection_string())
"""

import logging
from typing import Optional
from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings
from pydantic import Field, model_validator

logger = logging.getLogger(__name__)

AZURE_POSTGRES_TOKEN_SCOPE = "https://ossrdbms-aad.database.windows.net/.default"


class AppConfig(BaseSettings):
    """
    Application-wide configuration loaded from environment variables.

    Attributes:
        postgis_host: PostgreSQL server hostname
        postgis_port: PostgreSQL server port
        postgis_database: Database name holding the RUIAN import
        postgis_user: Database username
        use_managed_identity: Enable Azure managed identity authentication
        postgis_password: Database password (optional with managed identity)
        postgis_sslmode: libpq sslmode
    """

    postgis_host: str = Field(..., description="PostgreSQL hostname")
    postgis_port: int = Field(default=5432, description="PostgreSQL port")
    postgis_database: str = Field(..., description="Database name")
    postgis_user: str = Field(..., description="Database username")
    use_managed_identity: bool = Field(
        default=False,
        description="Use Azure managed identity for authentication"
    )
    postgis_password: Optional[str] = Field(default=None, description="Database password")
    postgis_sslmode: str = Field(default="require", description="libpq sslmode")

    class Config:
        env_file = ".env"
        case_sensitive = False

    @model_validator(mode="after")
    def validate_password(self):
        """Ensure password is provided when not using managed identity."""
        if not self.use_managed_identity and not self.postgis_password:
            raise ValueError(
                "POSTGIS_PASSWORD is required when USE_MANAGED_IDENTITY=false"
            )
        return self


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """
    Get singleton application configuration instance.

    Raises:
        ValidationError: If required environment variables are missing
    """
    return AppConfig()


def get_postgres_connection_string() -> str:
    """
    Generate PostgreSQL connection string based on authentication mode.

    Returns:
        str: PostgreSQL connection string (psycopg format)

    Raises:
        ValueError: If required configuration is missing
        RuntimeError: If managed identity token acquisition fails
    """
    config = get_app_config()

    if config.use_managed_identity:
        password = _acquire_managed_identity_token(config)
    else:
        # URL-encode password to handle special characters (e.g., @ symbols)
        password = quote_plus(config.postgis_password)

    return (
        f"postgresql://{config.postgis_user}:{password}"
        f"@{config.postgis_host}:{config.postgis_port}"
        f"/{config.postgis_database}"
        f"?sslmode={config.postgis_sslmode}"
    )


def _acquire_managed_identity_token(config: AppConfig) -> str:
    """
    Acquire an Azure AD access token to be used as the database password.

    Note:
        Tokens live for roughly an hour; a fresh one is requested on
        every call.
    """
    logger.info(f"Acquiring managed identity token for {config.postgis_host}")

    from azure.identity import DefaultAzureCredential

    try:
        credential = DefaultAzureCredential()
        token = credential.get_token(AZURE_POSTGRES_TOKEN_SCOPE)
    except Exception as e:
        logger.error(f"Failed to acquire managed identity token: {e}")
        raise RuntimeError(
            f"Managed identity authentication failed: {e}. "
            "Ensure system-assigned managed identity is enabled and has database permissions."
        ) from e

    logger.info("✅ Successfully acquired managed identity token")
    return token.token


def validate_configuration() -> bool:
    """
    Validate configuration on application startup.

    Raises:
        Exception: If configuration validation fails
    """
    try:
        config = get_app_config()
        logger.info("Configuration validation:")
        logger.info(f"  PostgreSQL Host: {config.postgis_host}")
        logger.info(f"  PostgreSQL Port: {config.postgis_port}")
        logger.info(f"  Database: {config.postgis_database}")
        logger.info(f"  User: {config.postgis_user}")
        logger.info(f"  Managed Identity: {config.use_managed_identity}")

        get_postgres_connection_string()
        logger.info("✅ Connection string generated successfully")

        return True

    except Exception as e:
        logger.error(f"❌ Configuration validation failed: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    validate_configuration()
