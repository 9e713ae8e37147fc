import logging
from enum import Enum
from typing import Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from couch2dynamo.core.errors import ConfigurationError

_URL_ADAPTER = TypeAdapter(AnyUrl)


DEFAULT_AWS_REGION = "us-west-2"
DEFAULT_MAX_CONCURRENCY = 8
DEFAULT_REQUEST_TIMEOUT = 60.0  # seconds
DEFAULT_READ_CAPACITY = 10
DEFAULT_WRITE_CAPACITY = 5


class DropErrorPolicy(str, Enum):
    """Which failures of the drop-table step are treated as "did not exist"."""
    IGNORE_ALL = "all"
    IGNORE_NOT_FOUND = "not-found"


def normalize_url(url: str) -> str:
    """Return ``url`` ending with exactly one trailing slash."""
    return url.rstrip("/") + "/"


def _validate_url(value: Optional[str], name: str) -> str:
    if not value:
        raise ValueError(f"{name} URL is required")
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"{name} URL is not valid: {value!r}") from e
    return normalize_url(value)


class MigrationSettings(BaseSettings):
    """Settings for one migration run.

    Built once at process start and handed to every component that needs it.
    Values come from (highest priority first) explicit keyword arguments,
    ``COUCH2DYNAMO_*`` environment variables, and a ``.env`` file.
    """

    # Endpoints
    couch: str
    dynamo: str

    # AWS
    aws_region: str = DEFAULT_AWS_REGION
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None

    # Pipeline
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    read_capacity: int = DEFAULT_READ_CAPACITY
    write_capacity: int = DEFAULT_WRITE_CAPACITY
    drop_errors: DropErrorPolicy = DropErrorPolicy.IGNORE_ALL
    skip_design_docs: bool = False

    # App
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="COUCH2DYNAMO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("couch", mode="before")
    @classmethod
    def _check_couch(cls, v):
        return _validate_url(v, "CouchDB")

    @field_validator("dynamo", mode="before")
    @classmethod
    def _check_dynamo(cls, v):
        return _validate_url(v, "DynamoDB")

    @field_validator("max_concurrency")
    @classmethod
    def _check_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v!r}")
        return level


def load_settings(**overrides) -> MigrationSettings:
    """Build MigrationSettings, turning validation failures into ConfigurationError.

    ``None`` overrides are dropped so that unset CLI flags fall through to the
    environment.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return MigrationSettings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid options: {problems}") from e
