"""Tests for tinys3 configuration loading."""

from pathlib import Path

import pytest
import yaml

from tinys3.config import ClientConfig, load_config
from tinys3.region import US_EAST_1, US_WEST_2


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "tinys3.yaml"
    path.write_text(yaml.dump(data))
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_example_config(self):
        """Loading the example config file populates all fields."""
        config = load_config(Path(__file__).resolve().parent.parent / "tinys3.example.yaml")
        assert config.endpoint.url == "http://localhost:9000"
        assert config.endpoint.region == "us-east-1"
        assert config.endpoint.timeout == 30.0
        assert config.auth.access_key == "minioadmin"
        assert config.auth.secret_key == "minioadmin"
        assert config.auth.session_token is None
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"

    def test_load_empty_config(self, tmp_path):
        """An empty YAML file uses defaults for all fields."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = load_config(path)
        assert config.endpoint.url == "us-east-1"
        assert config.endpoint.timeout == 30.0
        assert config.credentials().is_anonymous

    def test_endpoint_short_form(self, tmp_path):
        config = load_config(_write(tmp_path, {"endpoint": "us-west-2"}))
        assert config.region() is US_WEST_2

    def test_blank_auth_values_ignored(self, tmp_path):
        config = load_config(_write(tmp_path, {"auth": {"access_key": "", "secret_key": None}}))
        assert config.auth.access_key is None
        assert config.credentials().is_anonymous

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_invalid_timeout(self, tmp_path):
        with pytest.raises(ValueError):
            load_config(_write(tmp_path, {"endpoint": {"timeout": "soon"}}))


class TestClientConfig:
    """Tests for resolving regions and credentials from configuration."""

    def test_default_region(self):
        assert ClientConfig().region() is US_EAST_1

    def test_custom_endpoint_with_region_name(self):
        config = ClientConfig.model_validate(
            {"endpoint": {"url": "http://localhost:9000", "region": "eu-west-1"}}
        )
        region = config.region()
        assert region.custom
        assert region.endpoint == "http://localhost:9000"
        assert region.signing_name == "eu-west-1"

    def test_known_region_ignores_region_name(self):
        config = ClientConfig.model_validate({"endpoint": {"url": "us-west-2", "region": "x"}})
        assert config.region() is US_WEST_2

    def test_credentials(self):
        config = ClientConfig.model_validate(
            {"auth": {"access_key": "ak", "secret_key": "sk", "session_token": "st"}}
        )
        creds = config.credentials()
        assert creds.can_sign
        assert creds.token == "st"
