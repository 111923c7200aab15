"""Binding configuration management for Issue Reconciler."""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".issue-reconciler"
CONFIG_FILE_NAME = "config.json"


class ConfigurationError(Exception):
    """Exception raised when the configuration cannot be read or written."""

    pass


class BindingMode(str, Enum):
    """Whether the project is bound to a server project."""

    STANDALONE = "standalone"
    CONNECTED = "connected"


class ServerConfig(BaseModel):
    """Connection settings for the issue server."""

    url: str = Field(..., description="Base URL of the issue server")
    token: Optional[str] = Field(default=None, description="User access token")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("Server URL must start with http:// or https://")
        return v.rstrip("/")


class BindingConfiguration(BaseModel):
    """Binding between the local project and a server project."""

    mode: BindingMode = Field(
        default=BindingMode.STANDALONE, description="Binding mode"
    )
    project_key: Optional[str] = Field(
        default=None, description="Key of the bound server project"
    )
    server: Optional[ServerConfig] = Field(
        default=None, description="Server connection settings"
    )
    max_commits: int = Field(
        default=1000,
        description="Maximum commits read per branch when matching branches",
    )

    @property
    def is_standalone(self) -> bool:
        return self.mode == BindingMode.STANDALONE or not self.project_key


class ConfigurationProvider:
    """Loads and stores the binding configuration of one project."""

    def __init__(self, project_root: Path):
        self.project_root = Path(project_root)
        self.config_path = self.project_root / CONFIG_DIR_NAME / CONFIG_FILE_NAME

    def get_configuration(self) -> BindingConfiguration:
        """Load the binding configuration.

        Returns:
            The stored configuration, or a standalone configuration if the
            project has never been bound

        Raises:
            ConfigurationError: If the file is not valid JSON or fails validation
        """
        if not self.config_path.exists():
            logger.debug(f"No configuration at {self.config_path}, using standalone")
            return BindingConfiguration()

        try:
            with open(self.config_path, "r") as f:
                data = json.load(f)
            return BindingConfiguration.model_validate(data)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file {self.config_path}: {e}"
            )
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration in {self.config_path}: {e}"
            )

    def save_configuration(self, config: BindingConfiguration) -> None:
        """Write the binding configuration, creating the config directory if needed."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w") as f:
                json.dump(config.model_dump(mode="json"), f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Failed to write configuration: {e}")

        logger.info(f"Saved binding configuration to {self.config_path}")
