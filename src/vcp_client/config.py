"""
VCP Sink Client Configuration
=============================

This module handles configuration loading for the sink client.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    VCP_URL                -> connection.url
    VCP_RETRY_DELAY        -> connection.retry_delay_seconds
    VCP_RETRY_BACKOFF      -> connection.retry_backoff
    VCP_MAX_RETRY_ATTEMPTS -> connection.max_retry_attempts
    VCP_SYNC_PROCESS_MODE  -> dispatch.sync_process_mode
    VCP_LOG_LEVEL          -> logging.level
    VCP_DEBUG_FRAMES       -> logging.debug_frames

Example:
    from vcp_client.config import load_config, setup_logging

    settings = load_config()
    setup_logging(settings)
    print(settings.connection.url)
"""

import os
import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

from vcp_client.stream.connection import RetryPolicy


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ConnectionConfig(BaseModel):
    """VCP server connection configuration."""

    url: str = Field(
        default="ws://localhost:8080",
        description="WebSocket URL of the VCP server",
    )
    retry_delay_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Delay before reconnecting after an error or close",
    )
    retry_backoff: Literal["fixed", "exponential"] = Field(
        default="fixed",
        description="Reconnect schedule: 'fixed' or 'exponential'",
    )
    retry_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        description="Delay growth factor for exponential backoff",
    )
    retry_max_delay_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Upper bound on the exponential backoff delay",
    )
    max_retry_attempts: int = Field(
        default=0,
        ge=0,
        description="Maximum consecutive reconnection attempts (0 = unlimited)",
    )

    def retry_policy(self) -> RetryPolicy:
        """Build the RetryPolicy described by this config."""
        return RetryPolicy(
            delay=self.retry_delay_seconds,
            backoff=self.retry_backoff,
            multiplier=self.retry_multiplier,
            max_delay=self.retry_max_delay_seconds,
            max_attempts=self.max_retry_attempts,
        )


class DispatchConfig(BaseModel):
    """Frame dispatch configuration."""

    sync_process_mode: bool = Field(
        default=False,
        description="Queue processing until process_queue() instead of running on arrival",
    )
    allow_duplicate_registration: bool = Field(
        default=True,
        description="Invoke a processor once per registration of the same type",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")
    debug_frames: bool = Field(default=False, description="Log every raw inbound frame")


class Settings(BaseModel):
    """
    Main settings class for the sink client.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    connection: ConnectionConfig = Field(default_factory=ConnectionConfig)
    dispatch: DispatchConfig = Field(default_factory=DispatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        for path in (Path("config.yaml"), Path("config.yml")):
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.debug("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Connection settings
    if env_url := os.environ.get("VCP_URL"):
        config_data.setdefault("connection", {})["url"] = env_url
    if env_delay := os.environ.get("VCP_RETRY_DELAY"):
        config_data.setdefault("connection", {})["retry_delay_seconds"] = float(env_delay)
    if env_backoff := os.environ.get("VCP_RETRY_BACKOFF"):
        config_data.setdefault("connection", {})["retry_backoff"] = env_backoff
    if env_attempts := os.environ.get("VCP_MAX_RETRY_ATTEMPTS"):
        config_data.setdefault("connection", {})["max_retry_attempts"] = int(env_attempts)

    # Dispatch settings
    if env_sync := os.environ.get("VCP_SYNC_PROCESS_MODE"):
        config_data.setdefault("dispatch", {})["sync_process_mode"] = _env_flag(env_sync)

    # Logging settings
    if env_log := os.environ.get("VCP_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log
    if env_debug := os.environ.get("VCP_DEBUG_FRAMES"):
        config_data.setdefault("logging", {})["debug_frames"] = _env_flag(env_debug)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    # Raw frame tracing is emitted at DEBUG by the router
    if settings.logging.debug_frames:
        logging.getLogger("vcp_client.stream.router").setLevel(logging.DEBUG)
