"""Configuration models using Pydantic."""

import logging
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_VAULT_ADDRESS = "https://127.0.0.1:8200"


class VaultConfig(BaseModel):
    """Connection settings for the Vault HTTP API."""

    address: str = DEFAULT_VAULT_ADDRESS
    token: SecretStr | None = None
    # Enterprise namespace, sent as X-Vault-Namespace
    namespace: str | None = None
    timeout: float = 30.0
    verify: bool = True

    @field_validator("address")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class ReadRetryConfig(BaseModel):
    """Retry settings for reading a record right after it was created.

    Vault replicates identity writes asynchronously on performance standbys,
    so a read that immediately follows a create may briefly see a 404.
    """

    max_attempts: int = Field(default=5, ge=1)
    base_delay: float = 0.5
    max_delay: float = 5.0

    @model_validator(mode="after")
    def _check_delays(self) -> "ReadRetryConfig":
        if self.max_delay < self.base_delay:
            raise ValueError("read_retry.max_delay must be >= read_retry.base_delay")
        return self


class LoggingConfig(BaseModel):
    """Configuration for logging output."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_to_file: bool = False


class ConfigError(Exception):
    """Configuration error."""

    pass


class TetherConfig(BaseModel):
    """Root configuration model."""

    vault: VaultConfig = Field(default_factory=VaultConfig)
    read_retry: ReadRetryConfig = Field(default_factory=ReadRetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def require_token(self) -> SecretStr:
        """Return the Vault token.

        Raises:
            ConfigError: If no token is configured.
        """
        if self.vault.token is None:
            raise ConfigError(
                "No Vault token configured. Set [vault].token or VAULT_TOKEN"
            )
        return self.vault.token
