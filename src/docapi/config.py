"""
Configuration management.

All client configuration keys are defined here; other modules take plain
constructor arguments.

Values come from a YAML file, and environment variables override them:
- DOCAPI_URL
- DOCAPI_TOKEN
- DOCAPI_TENANT
- DOCAPI_USERNAME
- DOCAPI_PASSWORD
- DOCAPI_PART_SIZE (bytes)
- DOCAPI_LEASE_SECONDS
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .uploads.parts import DEFAULT_PART_SIZE_BYTES


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class ApiConfig:
    """Document API connection settings."""

    base_url: str = "http://localhost:8080"
    timeout_seconds: int = 30
    max_retries: int = 3
    backoff_factor: float = 0.5


@dataclass
class AuthConfig:
    """Credentials.

    A static token is used as-is; otherwise username/password are used to log
    in against default_tenant.
    """

    default_tenant: str | None = None
    token: str | None = None
    username: str | None = None
    password: str | None = None


@dataclass
class LockConfig:
    """Lease-lock settings."""

    default_lease_seconds: int = 60


@dataclass
class UploadConfig:
    """Multipart upload settings."""

    # Used only when the server does not choose a part size
    default_part_size_bytes: int = DEFAULT_PART_SIZE_BYTES
    # Read/write timeout for each direct storage PUT
    storage_timeout_seconds: int = 120


@dataclass
class Config:
    """Client configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    lock: LockConfig = field(default_factory=LockConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.api.base_url:
            errors.append("api.base_url is required")
        if self.api.timeout_seconds <= 0:
            errors.append("api.timeout_seconds must be positive")
        if self.lock.default_lease_seconds <= 0:
            errors.append("lock.default_lease_seconds must be positive")
        if self.upload.default_part_size_bytes <= 0:
            errors.append("upload.default_part_size_bytes must be positive")
        if bool(self.auth.username) != bool(self.auth.password):
            errors.append("auth.username and auth.password must be set together")

        return errors


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "")
    if not value:
        return int(default)
    try:
        return int(value)
    except ValueError as e:
        raise ConfigValidationError(f"{name} must be an integer, got {value!r}") from e


def load_config(config_path: Path) -> Config:
    """Load configuration from a YAML file (missing file means defaults)."""
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    if not isinstance(data, dict):
        raise ConfigValidationError(f"{config_path} must contain a mapping")

    api_data = data.get("api", {}) or {}
    api = ApiConfig(
        base_url=os.environ.get("DOCAPI_URL", api_data.get("base_url", "http://localhost:8080")),
        timeout_seconds=api_data.get("timeout_seconds", 30),
        max_retries=api_data.get("max_retries", 3),
        backoff_factor=api_data.get("backoff_factor", 0.5),
    )

    auth_data = data.get("auth", {}) or {}
    auth = AuthConfig(
        default_tenant=os.environ.get("DOCAPI_TENANT", auth_data.get("default_tenant")),
        token=os.environ.get("DOCAPI_TOKEN", auth_data.get("token")),
        username=os.environ.get("DOCAPI_USERNAME", auth_data.get("username")),
        password=os.environ.get("DOCAPI_PASSWORD", auth_data.get("password")),
    )

    lock_data = data.get("lock", {}) or {}
    lock = LockConfig(
        default_lease_seconds=_env_int(
            "DOCAPI_LEASE_SECONDS", lock_data.get("default_lease_seconds", 60)
        ),
    )

    upload_data = data.get("upload", {}) or {}
    upload = UploadConfig(
        default_part_size_bytes=_env_int(
            "DOCAPI_PART_SIZE",
            upload_data.get("default_part_size_bytes", DEFAULT_PART_SIZE_BYTES),
        ),
        storage_timeout_seconds=upload_data.get("storage_timeout_seconds", 120),
    )

    return Config(api=api, auth=auth, lock=lock, upload=upload)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# Document API client configuration
#
# Environment variables override these values:
# DOCAPI_URL, DOCAPI_TOKEN, DOCAPI_TENANT, DOCAPI_USERNAME, DOCAPI_PASSWORD,
# DOCAPI_PART_SIZE, DOCAPI_LEASE_SECONDS

api:
  base_url: "http://localhost:8080"
  timeout_seconds: 30
  max_retries: 3                 # Retries apply to GET/PUT/DELETE only
  backoff_factor: 0.5

auth:
  default_tenant: null           # Tenant used when a command names none
  token: null                    # Static bearer token (skips login)
  username: null
  password: null

lock:
  default_lease_seconds: 60

upload:
  default_part_size_bytes: 10485760   # Used only if the server picks none
  storage_timeout_seconds: 120
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
