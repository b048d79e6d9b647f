"""
Settings Management Module

Provides pydantic-based configuration management with:
- YAML configuration file loading
- Environment variable overrides (VAST_STITCH_*)
- Multi-environment support (development, production, test)

Settings are mapped onto the dataclass configurations in ``config.py``.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .config import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_DEPTH,
    FetcherConfig,
    ResolverConfig,
    SerializerConfig,
    StitcherConfig,
    VastParserConfig,
)
from .exceptions import VastConfigError


DEFAULT_CONFIG_PATH = Path("settings") / "config.yaml"


class ParserSettings(BaseModel):
    recover_on_error: bool = False
    encoding: str = "utf-8"
    huge_tree: bool = False


class FetcherSettings(BaseModel):
    """Content fetcher settings."""

    timeout: float = DEFAULT_FETCH_TIMEOUT
    base_dirs: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    verify_ssl: bool = True
    follow_redirects: bool = True


class ResolverSettings(BaseModel):
    max_depth: int = DEFAULT_MAX_DEPTH


class StitcherSettings(BaseModel):
    synthetic_creative_id: str = "wrapper-tracking"


class SerializerSettings(BaseModel):
    pretty: bool = False
    xml_declaration: bool = True


class Settings(BaseSettings):
    """
    Application settings with multi-environment support.

    Configuration hierarchy (lowest to highest precedence):
    1. settings/config.yaml (base)
    2. settings/config.{environment}.yaml (environment-specific)
    3. Environment variables (VAST_STITCH_*, nested with ``__``)

    Examples:
        >>> settings = get_settings()
        >>> settings.resolver.max_depth
        5

        Override from the environment:
        $ VAST_STITCH_RESOLVER__MAX_DEPTH=3 vast-stitch stitch -i tag.xml
    """

    model_config = SettingsConfigDict(
        env_prefix="VAST_STITCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = "development"
    log_level: str = "WARNING"
    log_json: bool = False

    parser: ParserSettings = Field(default_factory=ParserSettings)
    fetcher: FetcherSettings = Field(default_factory=FetcherSettings)
    resolver: ResolverSettings = Field(default_factory=ResolverSettings)
    stitcher: StitcherSettings = Field(default_factory=StitcherSettings)
    serializer: SerializerSettings = Field(default_factory=SerializerSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML values arrive as init kwargs; environment variables win over them
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def load_from_yaml(cls, config_path: Path | None = None) -> "Settings":
        """
        Load settings from a YAML configuration file.

        Args:
            config_path: Path to config file (default: $VAST_STITCH_CONFIG or
                settings/config.yaml in the working directory)

        Returns:
            Settings instance

        Raises:
            VastConfigError: If an explicitly given file is missing, or a file
                cannot be read or holds invalid values
        """
        if config_path is None:
            config_path = os.getenv("VAST_STITCH_CONFIG")
        explicit = config_path is not None
        config_path = Path(config_path) if explicit else DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if explicit:
                raise VastConfigError(
                    f"Settings file not found: {config_path}", config_key=str(config_path)
                )
            return cls()

        config_data = cls._read_yaml(config_path)

        env = os.getenv("VAST_STITCH_ENVIRONMENT", config_data.get("environment", "development"))
        env_config_path = config_path.parent / f"config.{env}.yaml"
        if env_config_path.exists():
            config_data = cls._deep_merge(config_data, cls._read_yaml(env_config_path))

        try:
            return cls(**config_data)
        except ValidationError as e:
            raise VastConfigError(
                f"Invalid settings in {config_path}: {e}", config_key=str(config_path)
            ) from e

    @staticmethod
    def _read_yaml(path: Path) -> dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise VastConfigError(
                f"Cannot load settings file {path}: {e}", config_key=str(path)
            ) from e
        if not isinstance(data, dict):
            raise VastConfigError(
                f"Settings file {path} must contain a mapping", config_key=str(path)
            )
        return data

    @staticmethod
    def _deep_merge(base: dict, override: dict) -> dict:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = Settings._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def parser_config(self) -> VastParserConfig:
        return VastParserConfig(**self.parser.model_dump())

    def fetcher_config(self) -> FetcherConfig:
        return FetcherConfig(
            fetch_timeout=self.fetcher.timeout,
            base_dirs=[Path(d) for d in self.fetcher.base_dirs],
            headers=dict(self.fetcher.headers),
            verify_ssl=self.fetcher.verify_ssl,
            follow_redirects=self.fetcher.follow_redirects,
        )

    def resolver_config(self) -> ResolverConfig:
        return ResolverConfig(max_depth=self.resolver.max_depth)

    def stitcher_config(self) -> StitcherConfig:
        return StitcherConfig(**self.stitcher.model_dump())

    def serializer_config(self) -> SerializerConfig:
        return SerializerConfig(**self.serializer.model_dump())


@lru_cache
def get_settings(config_path: Path | None = None) -> Settings:
    """
    Get cached settings instance.

    Args:
        config_path: Optional path to config file

    Returns:
        Settings instance
    """
    return Settings.load_from_yaml(config_path)


def reload_settings() -> Settings:
    """Reload settings by clearing cache."""
    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "Settings",
    "ParserSettings",
    "FetcherSettings",
    "ResolverSettings",
    "StitcherSettings",
    "SerializerSettings",
    "get_settings",
    "reload_settings",
]
