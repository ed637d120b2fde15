"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class ProjectorConfig(BaseSettings):
    """Loan projector configuration"""

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Simulation configuration
    max_simulation_months: int = 1200  # 100 years
    accrue_between_payments: bool = True

    # Allocation configuration
    zero_rate_policy: str = "equal_split"  # equal_split, minimum_only or raise

    # Display configuration
    display_precision: int = 2

    class Config:
        env_prefix = "LOAN_PROJECTOR_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = ProjectorConfig()


def get_config() -> ProjectorConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> ProjectorConfig:
    """Reload configuration from environment"""
    global config
    config = ProjectorConfig()
    return config
