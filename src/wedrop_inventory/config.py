"""Application configuration models and helpers.

The configuration is persisted in a YAML file (``config.yaml`` by default) and
validated with ``pydantic`` models.  The upstream connection (base URL and
bearer token) may also come from the ``WEDROP_API_URL`` and
``WEDROP_API_TOKEN`` environment variables, which take precedence over the
file so that secrets do not need to live next to the rest of the settings.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


DEFAULT_MOVEMENT_ENDPOINTS = [
    "/catalog/products/{product_id}/movements",
    "/products/{product_id}/stock-movements",
    "/stock/movements?product_id={product_id}",
]

ENV_API_URL = "WEDROP_API_URL"
ENV_API_TOKEN = "WEDROP_API_TOKEN"


class ApiConfig(BaseModel):
    """Connection to the Wedrop API."""

    base_url: Optional[str] = Field(default=None, description="Base URL, e.g. https://api.wedrop.com.br/v1")
    token: Optional[str] = Field(default=None, description="Bearer token sent on every request")
    timeout: float = Field(30.0, description="Timeout in seconds applied to each HTTP request")

    @field_validator("base_url", "token", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("timeout")
    @classmethod
    def _validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout must be greater than zero")
        return value

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.token)

    def fingerprint(self) -> str:
        """Stable digest of the connection, used to detect configuration changes."""

        raw = f"{self.base_url or ''}\n{self.token or ''}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class ScanConfig(BaseModel):
    """Full catalogue scan used by the aggregate views."""

    page_size: int = Field(100, description="Records requested per page")
    max_pages: int = Field(50, description="Hard cap on pages per scan")
    cache_ttl_seconds: float = Field(300.0, description="How long a completed scan is served from memory")

    @field_validator("page_size", "max_pages")
    @classmethod
    def _validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("cache_ttl_seconds")
    @classmethod
    def _validate_ttl(cls, value: float) -> float:
        if value < 0:
            raise ValueError("cache_ttl_seconds cannot be negative")
        return value


class MovementsConfig(BaseModel):
    endpoints: List[str] = Field(
        default_factory=lambda: list(DEFAULT_MOVEMENT_ENDPOINTS),
        description="Candidate movement endpoints, tried in order.  ``{product_id}`` is replaced",
    )

    @field_validator("endpoints")
    @classmethod
    def _validate_endpoints(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("at least one movement endpoint is required")
        for template in value:
            if "{product_id}" not in template:
                raise ValueError(f"Endpoint '{template}' must contain the {{product_id}} placeholder")
        return value


class PathsConfig(BaseModel):
    snapshot_file: Path = Field(Path("data/snapshots.json"), description="JSON file holding daily snapshots")

    @field_validator("snapshot_file", mode="before")
    @classmethod
    def _expand_path(cls, value: str) -> Path:
        return Path(value).expanduser().resolve()


class Settings(BaseModel):
    """Top level configuration object."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    movements: MovementsConfig = Field(default_factory=MovementsConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)

    def apply_environment(self) -> "Settings":
        base_url = os.environ.get(ENV_API_URL)
        token = os.environ.get(ENV_API_TOKEN)
        if base_url or token:
            self.api = ApiConfig(
                base_url=base_url or self.api.base_url,
                token=token or self.api.token,
                timeout=self.api.timeout,
            )
        return self

    @classmethod
    def load(cls, path: Path | str = Path("config.yaml")) -> "Settings":
        """Load the configuration from a YAML file."""

        config_path = Path(path).expanduser().resolve()
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as stream:
            data = yaml.safe_load(stream) or {}

        settings = cls.model_validate(data)
        return settings.apply_environment()


__all__ = [
    "Settings",
    "ApiConfig",
    "ScanConfig",
    "MovementsConfig",
    "PathsConfig",
    "DEFAULT_MOVEMENT_ENDPOINTS",
]
