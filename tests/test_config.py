"""Tests for cluster file loading and settings."""

import base64

import pytest
from pydantic import ValidationError

from clusterscope.config import (
    Config,
    ConfigError,
    ElasticsearchConfig,
    Settings,
    decode_cloud_id,
    load_config,
)

VALID_CONFIG = """
elasticsearch:
  - name: a
    endpoint: https://localhost:9200/
    credential:
      username: elastic
      password: changeme
  - name: b
    endpoint: http://b:9200
    credential: {username: reader, password: secret}
"""


def cloud_id(payload: str, label: str = "deployment") -> str:
    return f"{label}:{base64.b64encode(payload.encode()).decode()}"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_valid_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(VALID_CONFIG)

        config = load_config(path)

        assert config.cluster_names() == ["a", "b"]
        assert config.elasticsearch[0].resolve_endpoint() == "https://localhost:9200"
        assert config.elasticsearch[1].credential.username == "reader"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(path).elasticsearch == []

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.yaml"

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.path == path
        assert exc_info.value.reason == "file not found"

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("elasticsearch: [unclosed")

        with pytest.raises(ConfigError, match="not valid YAML"):
            load_config(path)

    def test_missing_credential(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("elasticsearch:\n  - name: a\n    endpoint: http://a:9200\n")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_duplicate_names(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(VALID_CONFIG.replace("name: b", "name: a"))

        with pytest.raises(ConfigError, match="duplicate cluster names: a"):
            load_config(path)

    def test_malformed_cloud_id(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "elasticsearch:\n"
            "  - name: a\n"
            "    credential: {username: elastic, password: x, cloud_id: nocolon}\n"
        )

        with pytest.raises(ConfigError, match="malformed cloud id"):
            load_config(path)


class TestElasticsearchConfig:
    """Tests for endpoint resolution."""

    def test_endpoint_or_cloud_id_required(self):
        with pytest.raises(ValidationError):
            ElasticsearchConfig(
                name="a", credential={"username": "elastic", "password": "x"}
            )

    def test_malformed_cloud_id_rejected(self):
        with pytest.raises(ValidationError, match="malformed cloud id"):
            ElasticsearchConfig(
                name="a",
                credential={"username": "elastic", "password": "x", "cloud_id": "nocolon"},
            )

    def test_cloud_id_endpoint(self):
        config = ElasticsearchConfig(
            name="a",
            credential={
                "username": "elastic",
                "password": "x",
                "cloud_id": cloud_id("us-east-1.aws.found.io:9243$abc123$kib456"),
            },
        )
        assert config.resolve_endpoint() == "https://abc123.us-east-1.aws.found.io:9243"

    def test_explicit_endpoint_wins(self):
        config = ElasticsearchConfig(
            name="a",
            endpoint="http://local:9200",
            credential={
                "username": "elastic",
                "password": "x",
                "cloud_id": cloud_id("host$es$kb"),
            },
        )
        assert config.resolve_endpoint() == "http://local:9200"

    def test_config_defaults_to_no_clusters(self):
        assert Config().cluster_names() == []


class TestDecodeCloudId:
    def test_default_port(self):
        assert decode_cloud_id(cloud_id("example.com$es$kb")) == "https://es.example.com:443"

    @pytest.mark.parametrize(
        "value",
        ["", "no-separator", "label:", "label:!!!not-base64", cloud_id("only-host")],
    )
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            decode_cloud_id(value)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CLUSTERSCOPE_REQUEST_TIMEOUT", raising=False)
        settings = Settings()

        assert settings.request_timeout == 20.0
        assert settings.history_size == 100
        assert settings.channel_capacity == 10

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CLUSTERSCOPE_REQUEST_TIMEOUT", "5")
        monkeypatch.setenv("CLUSTERSCOPE_LOG_LEVEL", "DEBUG")

        settings = Settings()

        assert settings.request_timeout == 5.0
        assert settings.log_level == "DEBUG"
