"""Unit tests for YAML/environment settings."""

from pathlib import Path

import pytest

from vast_stitch.config import FetcherConfig, ResolverConfig
from vast_stitch.exceptions import VastConfigError
from vast_stitch.settings import Settings, get_settings, reload_settings


@pytest.fixture
def settings_dir(tmp_path, monkeypatch) -> Path:
    directory = tmp_path / "settings"
    directory.mkdir()
    for name in ("VAST_STITCH_ENVIRONMENT", "VAST_STITCH_CONFIG", "VAST_STITCH_RESOLVER__MAX_DEPTH"):
        monkeypatch.delenv(name, raising=False)
    return directory


class TestSettings:
    def test_defaults_without_default_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("VAST_STITCH_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        settings = Settings.load_from_yaml()

        assert settings.resolver.max_depth == 5
        assert settings.fetcher.timeout == 3.0
        assert settings.fetcher.base_dirs == []

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(VastConfigError) as exc_info:
            Settings.load_from_yaml(tmp_path / "missing.yaml")
        assert "missing.yaml" in exc_info.value.config_key

    def test_missing_file_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("VAST_STITCH_CONFIG", str(tmp_path / "missing.yaml"))
        with pytest.raises(VastConfigError):
            Settings.load_from_yaml()

    def test_repository_settings_base_dirs_exist(self, tests_dir):
        settings = Settings.load_from_yaml(tests_dir.parent / "settings" / "config.yaml")
        for base_dir in settings.fetcher.base_dirs:
            assert (tests_dir.parent / base_dir).is_dir()

    def test_load_yaml(self, settings_dir):
        config = settings_dir / "config.yaml"
        config.write_text(
            "resolver:\n  max_depth: 3\nfetcher:\n  timeout: 1.5\n  base_dirs: [a, b]\n",
            encoding="utf-8",
        )
        settings = Settings.load_from_yaml(config)

        assert settings.resolver.max_depth == 3
        assert settings.fetcher.timeout == 1.5
        assert settings.fetcher.base_dirs == ["a", "b"]

    def test_environment_file_merged(self, settings_dir):
        (settings_dir / "config.yaml").write_text(
            "environment: production\nresolver:\n  max_depth: 3\nfetcher:\n  timeout: 1.5\n",
            encoding="utf-8",
        )
        (settings_dir / "config.production.yaml").write_text(
            "fetcher:\n  timeout: 0.5\n", encoding="utf-8"
        )
        settings = Settings.load_from_yaml(settings_dir / "config.yaml")

        assert settings.fetcher.timeout == 0.5
        assert settings.resolver.max_depth == 3

    def test_environment_variables_override_yaml(self, settings_dir, monkeypatch):
        (settings_dir / "config.yaml").write_text("resolver:\n  max_depth: 3\n", encoding="utf-8")
        monkeypatch.setenv("VAST_STITCH_RESOLVER__MAX_DEPTH", "7")

        settings = Settings.load_from_yaml(settings_dir / "config.yaml")
        assert settings.resolver.max_depth == 7

    def test_invalid_yaml_value(self, settings_dir):
        (settings_dir / "config.yaml").write_text("resolver:\n  max_depth: lots\n", encoding="utf-8")
        with pytest.raises(VastConfigError):
            Settings.load_from_yaml(settings_dir / "config.yaml")

    def test_non_mapping_yaml(self, settings_dir):
        (settings_dir / "config.yaml").write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(VastConfigError):
            Settings.load_from_yaml(settings_dir / "config.yaml")

    def test_dataclass_configs(self):
        settings = Settings(resolver={"max_depth": 2}, fetcher={"timeout": 2.0, "base_dirs": ["x"]})

        assert settings.resolver_config() == ResolverConfig(max_depth=2)
        fetcher_config = settings.fetcher_config()
        assert isinstance(fetcher_config, FetcherConfig)
        assert fetcher_config.fetch_timeout == 2.0
        assert fetcher_config.base_dirs == [Path("x")]
        assert settings.stitcher_config().synthetic_creative_id == "wrapper-tracking"
        assert settings.serializer_config().pretty is False
        assert settings.parser_config().recover_on_error is False

    def test_invalid_dataclass_values(self):
        settings = Settings(resolver={"max_depth": -2})
        with pytest.raises(VastConfigError):
            settings.resolver_config()


class TestGetSettings:
    def test_cached(self, settings_dir):
        config = settings_dir / "config.yaml"
        config.write_text("resolver:\n  max_depth: 4\n", encoding="utf-8")

        assert get_settings(config) is get_settings(config)

    def test_config_path_from_environment(self, settings_dir, monkeypatch):
        config = settings_dir / "config.yaml"
        config.write_text("resolver:\n  max_depth: 1\n", encoding="utf-8")
        monkeypatch.setenv("VAST_STITCH_CONFIG", str(config))

        assert reload_settings().resolver.max_depth == 1
