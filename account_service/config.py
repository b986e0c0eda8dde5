"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
The ledger itself reads no configuration; only the service wiring does.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class AccountServiceConfig(BaseSettings):
    """Account service configuration"""

    model_config = SettingsConfigDict(
        env_prefix="ACCOUNT_SERVICE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service identity
    service_name: str = "Account Service"
    service_version: str = "1.0.0"
    service_description: str = "Microservice for managing bank accounts"

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    api_reload: bool = False

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Demo customer with a checking and a deposit account
    seed_demo_data: bool = True


# Global configuration instance
config = AccountServiceConfig()


def get_config() -> AccountServiceConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> AccountServiceConfig:
    """Reload configuration from environment"""
    global config
    config = AccountServiceConfig()
    return config
