"""Application configuration."""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Union

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_FILE = "config.yaml"


class Settings(BaseSettings):
    """Application settings loaded from YAML, environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="CALAMARI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Settings
    api_v1_prefix: str = "/api/v1"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "production"

    # Security
    api_keys: Dict[str, Dict[str, Union[str, List[str]]]] = Field(
        default_factory=lambda: {
            "admin-key": {"name": "admin", "permissions": ["pool:read", "pool:write", "osd:read", "osd:write", "cluster:read", "cluster:write"]},
            "readonly-key": {"name": "readonly", "permissions": ["pool:read", "osd:read", "cluster:read"]},
        }
    )

    # Calamari API
    calamari_api_port: int = Field(default=8002, ge=1, le=65535)
    calamari_api_prefix: str = "api"
    request_timeout: float = Field(default=30.0, gt=0, description="Per-request timeout in seconds")
    job_poll_interval: float = Field(default=2.0, ge=0, description="Seconds between request status polls")
    job_poll_timeout: Union[float, None] = Field(
        default=600.0,
        description="Deadline for asynchronous requests in seconds, null to wait forever",
    )

    # Cluster catalog
    catalog_db_path: str = "./data/clusters.db"

    # Logging
    log_level: str = "INFO"
    audit_log_enabled: bool = True
    audit_log_file: str = "./logs/audit.log"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v.upper()

    @field_validator("job_poll_timeout")
    @classmethod
    def validate_poll_timeout(cls, v: Union[float, None]) -> Union[float, None]:
        if v is not None and v <= 0:
            raise ValueError("job_poll_timeout must be positive or null")
        return v

    @classmethod
    def load_from_yaml(cls, config_path: Union[str, Path]) -> "Settings":
        """Load settings from a YAML file.

        Environment variables still override values from the file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Settings instance with values from YAML and environment

        Raises:
            yaml.YAMLError: If YAML parsing fails
        """
        config_path = Path(config_path)

        if not config_path.exists():
            logging.warning(f"Config file not found: {config_path}, using defaults")
            return cls()

        try:
            with open(config_path) as f:
                config_data: Dict[str, Any] = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logging.error(f"Failed to parse YAML config: {e}")
            raise

        # Environment wins over the file
        overridden = {
            key for key in config_data
            if f"{cls.model_config['env_prefix']}{key}".upper() in {k.upper() for k in os.environ}
        }
        return cls(**{k: v for k, v in config_data.items() if k not in overridden})


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    config_file = os.environ.get("CALAMARI_CONFIG_FILE", DEFAULT_CONFIG_FILE)
    if Path(config_file).exists():
        return Settings.load_from_yaml(config_file)
    return Settings()
