"""Configuration and logging setup for the Akrual API client."""

import json
import logging
import os
import pathlib

import pydantic
import structlog

from .client import AkrualClient
from .transport import DEFAULT_TIMEOUT
from .types import LoginEncoding

CONFIG_ENV_VAR = "AKRUAL_CLIENT_CONFIG_PATH"
logger = structlog.get_logger(__name__)


class ClientConfig(pydantic.BaseModel):
    """Configuration for the Akrual API client."""

    endpoint: str = pydantic.Field(description="Base URL for the Akrual API")
    username: str = pydantic.Field(description="Login user name")
    password: str = pydantic.Field(description="Login password", repr=False)
    login_encoding: LoginEncoding = pydantic.Field(
        LoginEncoding.JSON,
        description="Body encoding of the login request (json or form)",
    )
    cookies_enabled: bool = pydantic.Field(
        True,
        description="Capture cookies issued at login and replay them",
    )
    timeout: float = pydantic.Field(
        DEFAULT_TIMEOUT,
        description="Request timeout in seconds",
        gt=0,
    )
    token: str | None = pydantic.Field(
        None,
        description="Previously issued access token to resume with",
        repr=False,
    )
    log_level: str = pydantic.Field("INFO", description="Logging level")


def configure_logging(log_level_name: str) -> None:
    """Configure structlog for logfmt output."""
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.EventRenamer("msg"),
            structlog.processors.format_exc_info,
            structlog.processors.LogfmtRenderer(
                key_order=("timestamp", "level", "msg"),
            ),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def load_config(config_path: str) -> ClientConfig:
    """Load configuration from JSON file."""
    path = pathlib.Path(config_path)
    if not path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with path.open("r") as f:
        data = json.load(f)

    return ClientConfig.model_validate(data)


def resolve_config_path(config_path: str | None = None) -> str:
    """Return the given path, or the one named by the environment."""
    if config_path:
        return config_path
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if not env_path:
        msg = f"No configuration path given and {CONFIG_ENV_VAR} is not set"
        raise FileNotFoundError(msg)
    return env_path


def create_client(config: ClientConfig) -> AkrualClient:
    """Construct an API client from validated config."""
    client = AkrualClient(
        endpoint=config.endpoint,
        username=config.username,
        password=config.password,
        token=config.token,
        login_encoding=config.login_encoding,
        cookies_enabled=config.cookies_enabled,
        timeout=config.timeout,
    )
    logger.info(
        "Created API client",
        endpoint=client.endpoint,
        login_encoding=config.login_encoding.value,
        cookies_enabled=config.cookies_enabled,
    )
    return client


def client_from_config_file(config_path: str | None = None) -> AkrualClient:
    """Create an API client using a config path or environment default."""
    config = load_config(resolve_config_path(config_path))
    configure_logging(config.log_level)
    return create_client(config)
