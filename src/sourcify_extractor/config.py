"""
Configuration management for the Sourcify extractor using Pydantic settings.

Settings are read from ``SOURCIFY_EXTRACTOR__*`` environment variables, after
an optional ``.env`` file has been loaded into the environment.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Union

from dotenv import load_dotenv
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .exceptions import ConfigurationError

ENV_PREFIX = "SOURCIFY_EXTRACTOR__"
DEFAULT_SOURCIFY_URL = "https://sourcify.dev/server"


def load_environment(env_file: Optional[Union[str, Path]] = None) -> None:
    """Load environment variables from a .env file if it exists."""
    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


class LogLevel(str, Enum):
    """Logging level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Extractor settings.

    Environment Variables:
        SOURCIFY_EXTRACTOR__DATABASE_URL: str - Downstream storage connection string
        SOURCIFY_EXTRACTOR__ETH_BYTECODE_DB_URL: str - Verification service URL
        SOURCIFY_EXTRACTOR__CHAINS: list - Chain ids, JSON list or comma separated
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="forbid",
    )

    database_url: str = Field(
        ...,
        description="Connection string of the downstream storage",
    )
    create_database: bool = Field(
        False,
        description="Ask the storage service to create its database",
    )
    run_migrations: bool = Field(
        False,
        description="Ask the storage service to run its migrations",
    )

    sourcify_url: str = Field(
        DEFAULT_SOURCIFY_URL,
        description="Base URL of the Sourcify server API",
    )
    eth_bytecode_db_url: str = Field(
        ...,
        description="Base URL of the eth-bytecode-db verification service",
    )
    eth_bytecode_db_api_key: Optional[str] = Field(
        None,
        description="API key sent to the verification service",
    )

    limit_requests_per_second: int = Field(
        10,
        description="Steady registry request rate; burst is twice this value",
        gt=0,
    )
    n_threads: int = Field(
        4,
        description="Size of the event loop's default thread pool",
        gt=0,
    )
    request_timeout: Optional[float] = Field(
        60.0,
        description="Per-call timeout in seconds; 0, empty or 'none' disables the timeout",
        gt=0,
    )
    max_retries: int = Field(
        3,
        description="Retries of transient registry failures",
        ge=0,
    )

    chains: Annotated[List[int], NoDecode] = Field(
        ...,
        description="Chain ids to extract",
    )

    log_level: LogLevel = Field(LogLevel.INFO, description="Logging level")
    json_logs: bool = Field(False, description="Use JSON format for logs")

    @field_validator("sourcify_url", "eth_bytecode_db_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("request_timeout", mode="before")
    @classmethod
    def disable_timeout(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ("", "0", "none", "null"):
            return None
        if v == 0:
            return None
        return v

    @field_validator("chains", mode="before")
    @classmethod
    def split_chains(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                return json.loads(v)
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("chains")
    @classmethod
    def validate_chains(cls, v: List[int]) -> List[int]:
        if not v:
            raise ValueError("`chains` should not be empty")
        if any(chain_id < 0 for chain_id in v):
            raise ValueError("chain ids must be unsigned integers")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


def load_settings(env_file: Optional[Union[str, Path]] = None, **overrides: Any) -> Settings:
    """Build settings from the environment, raising ConfigurationError on failure.

    Args:
        env_file: Optional .env file loaded before reading the environment
        **overrides: Field values taking precedence over the environment

    Returns:
        Validated settings
    """
    load_environment(env_file)
    try:
        return Settings(**overrides)
    except (ValidationError, ValueError) as e:
        raise ConfigurationError(f"failed to read config: {e}") from e


def describe_settings(settings: Settings) -> Dict[str, Any]:
    """Settings as a dictionary with secrets masked, for startup logging."""
    data = settings.model_dump(mode="json")
    for secret in ("database_url", "eth_bytecode_db_api_key"):
        if data.get(secret):
            data[secret] = "***"
    return data
