"""Configuration management using Pydantic Settings."""

import logging
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class ClientConfig(BaseModel):
    """Configuration for the TickeTing API client."""

    production_base_url: str = "https://api.ticketing.ly/v1"
    sandbox_base_url: str = "https://sandbox.ticketing.ly/v1"
    sandbox: bool = False
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_connections: int = Field(default=20, ge=1)
    max_keepalive_connections: int = Field(default=10, ge=0)
    default_page_size: int | None = Field(default=None, ge=1)
    api_key_header: str = "x-api-key"

    @property
    def base_url(self) -> str:
        """Return the sandbox or production base URL."""
        return self.sandbox_base_url if self.sandbox else self.production_base_url


class Settings(BaseSettings):
    """Environment-backed settings for the SDK and its CLI."""

    api_key: str = ""
    sandbox: bool = False
    logfire_token: str = ""
    log_level: str = "INFO"
    config_path: Path = Path("ticketing.yaml")

    client: ClientConfig = Field(default_factory=ClientConfig)

    model_config = SettingsConfigDict(
        env_prefix="TICKETING_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="after")
    @classmethod
    def normalise_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    def client_config(self) -> ClientConfig:
        """Client config with the top-level sandbox flag applied."""
        if self.sandbox and not self.client.sandbox:
            return self.client.model_copy(update={"sandbox": True})
        return self.client

    def load_yaml_config(self) -> None:
        """Merge the ``client`` section of the YAML config file, if present."""
        config_path = self.config_path

        if not config_path.exists():
            logger.debug(f"Config file not found: {config_path}. Using defaults.")
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)

            if not yaml_config:
                logger.warning(f"Empty config file: {config_path}")
                return

            if "client" in yaml_config:
                section_dict = self.client.model_dump()
                section_dict.update(yaml_config["client"] or {})
                self.client = ClientConfig(**section_dict)

            logger.info(f"Loaded configuration from {config_path}")

        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML config: {e}")
            raise


@lru_cache()
def get_settings() -> Settings:
    """Get singleton Settings instance."""
    settings = Settings()
    settings.load_yaml_config()
    return settings
