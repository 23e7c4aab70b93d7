"""Configuration loading and Pydantic models for tinys3."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from tinys3.credentials import Credentials
from tinys3.region import Region


class EndpointConfig(BaseModel):
    """Where requests are sent."""

    url: str = "us-east-1"
    region: str | None = None
    timeout: float = 30.0


class AuthConfig(BaseModel):
    """Access credentials. All empty means anonymous."""

    access_key: str | None = None
    secret_key: str | None = None
    session_token: str | None = None
    security_token: str | None = None


class LoggingConfig(BaseModel):
    """Log level and format."""

    level: str = "INFO"
    format: str = "text"


class ClientConfig(BaseModel):
    """Top-level tinys3 configuration."""

    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def region(self) -> Region:
        """Resolve the configured endpoint into a Region.

        A well-known region literal wins over an explicit region name; a
        custom endpoint carries ``endpoint.region`` as its signing name.

        Raises:
            InvalidRegion: If the endpoint has no host.
        """
        region = Region.parse(self.endpoint.url)
        if region.custom and self.endpoint.region:
            return Region.from_endpoint(region.endpoint, self.endpoint.region)
        return region

    def credentials(self) -> Credentials:
        builder = Credentials.builder()
        if self.auth.access_key is not None:
            builder.access_key(self.auth.access_key)
        if self.auth.secret_key is not None:
            builder.secret_key(self.auth.secret_key)
        if self.auth.session_token is not None:
            builder.session_token(self.auth.session_token)
        if self.auth.security_token is not None:
            builder.security_token(self.auth.security_token)
        return builder.build()


def _parse_endpoint(data: dict[str, Any] | str | None) -> dict[str, Any]:
    """Parse the endpoint section from YAML data.

    Accepts the short form ``endpoint: http://localhost:9000``.
    """
    if data is None:
        return {}
    if isinstance(data, str):
        return {"url": data}
    result: dict[str, Any] = {"url": data.get("url", "us-east-1")}
    if data.get("region"):
        result["region"] = data["region"]
    if data.get("timeout") is not None:
        result["timeout"] = data["timeout"]
    return result


def _parse_auth(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the auth section from YAML data."""
    if data is None:
        return {}
    return {
        key: data[key]
        for key in ("access_key", "secret_key", "session_token", "security_token")
        if data.get(key)
    }


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def load_config(path: Path) -> ClientConfig:
    """Load a ClientConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated ClientConfig validated by Pydantic.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    return ClientConfig(
        endpoint=EndpointConfig(**_parse_endpoint(raw.get("endpoint"))),
        auth=AuthConfig(**_parse_auth(raw.get("auth"))),
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
    )
