"""
Configuration for the clusterscope dashboard.

Two layers:
- Config: the cluster file (YAML), a list of named Elasticsearch clusters
  with their credentials. Loaded once at startup and treated as opaque input
  for building the API handlers.
- Settings: process-level knobs read from the environment with the
  CLUSTERSCOPE_ prefix (config path, logging, timeouts, transport sizes).

Example cluster file:

    elasticsearch:
      - name: prod
        endpoint: https://prod.example.com:9200
        credential:
          username: elastic
          password: changeme
"""

import base64
import binascii
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "clusterscope" / "config.yaml"


class ConfigError(Exception):
    """
    Raised when the cluster file cannot be read or validated.

    Attributes:
        path: The config file that failed
        reason: Human-readable cause
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config {path}: {reason}")


class ElasticsearchCredential(BaseModel):
    """Basic auth credential, optionally paired with an Elastic Cloud id."""

    username: str
    password: str
    cloud_id: str | None = None


class ElasticsearchConfig(BaseModel):
    """
    One named Elasticsearch cluster.

    Either endpoint or credential.cloud_id must be set. When only a cloud id
    is given the endpoint is derived from it (see resolve_endpoint).

    Attributes:
        name: Display name, also the key requests are routed by
        endpoint: Base URL of the cluster HTTP API
        credential: Basic auth credential
    """

    name: str
    endpoint: str | None = None
    credential: ElasticsearchCredential

    @model_validator(mode="after")
    def _require_location(self) -> "ElasticsearchConfig":
        if self.endpoint is None and self.credential.cloud_id is None:
            raise ValueError(
                f"cluster '{self.name}' needs an endpoint or a credential.cloud_id"
            )
        # Fails here on an undecodable cloud id
        self.resolve_endpoint()
        return self

    def resolve_endpoint(self) -> str:
        """
        Return the base URL for this cluster.

        Returns:
            endpoint if set, otherwise the URL decoded from the cloud id

        Raises:
            ValueError: If the cloud id is malformed
        """
        if self.endpoint is not None:
            return self.endpoint.rstrip("/")
        return decode_cloud_id(self.credential.cloud_id or "")


class Config(BaseModel):
    """Top-level cluster file."""

    elasticsearch: list[ElasticsearchConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> "Config":
        names = [c.name for c in self.elasticsearch]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"duplicate cluster names: {', '.join(duplicates)}")
        return self

    def cluster_names(self) -> list[str]:
        return [c.name for c in self.elasticsearch]


class Settings(BaseSettings):
    """Process settings.

    All settings can be overridden via environment variables with
    CLUSTERSCOPE_ prefix. For example:
        CLUSTERSCOPE_LOG_FILE=/tmp/clusterscope.log
        CLUSTERSCOPE_REQUEST_TIMEOUT=5
    """

    config_path: Path = DEFAULT_CONFIG_PATH

    # Logging; the dashboard owns the terminal so logs only go to a file
    log_file: Path | None = None
    log_level: str = "INFO"

    # Backend calls
    request_timeout: float = 20.0

    # Transport
    history_size: int = 100
    channel_capacity: int = 10

    model_config = {"env_prefix": "CLUSTERSCOPE_"}


def decode_cloud_id(cloud_id: str) -> str:
    """
    Decode an Elastic Cloud id into the Elasticsearch endpoint URL.

    A cloud id looks like "<label>:<base64>" where the payload decodes to
    "<host[:port]>$<es_uuid>$<kibana_uuid>".

    Args:
        cloud_id: Cloud id as shown in the Elastic Cloud console

    Returns:
        URL like "https://<es_uuid>.<host>:<port>"

    Raises:
        ValueError: If the id cannot be decoded
    """
    _, sep, payload = cloud_id.partition(":")
    if not sep or not payload:
        raise ValueError(f"malformed cloud id: {cloud_id!r}")
    try:
        decoded = base64.b64decode(payload).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"malformed cloud id: {cloud_id!r}") from e

    parts = decoded.split("$")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"malformed cloud id: {cloud_id!r}")

    host, _, port = parts[0].partition(":")
    return f"https://{parts[1]}.{host}:{port or '443'}"


def load_config(path: Path) -> Config:
    """Load and validate the cluster file.

    Args:
        path: Path to the YAML cluster file

    Returns:
        Validated Config

    Raises:
        ConfigError: If the file is missing, not YAML, or fails validation
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise ConfigError(path, "file not found") from e
    except yaml.YAMLError as e:
        raise ConfigError(path, f"not valid YAML ({e})") from e

    try:
        return Config.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(path, str(e)) from e
