"""
Tests for the settings loader and XDG locations.
"""

from pathlib import Path

import pytest

from debian_bridge.core.config.loader import (
    cache_home,
    config_home,
    default_config_path,
    desktop_dir,
    load_settings,
)
from debian_bridge.core.errors import ConfigError


@pytest.fixture
def xdg(tmp_path, monkeypatch):
    """Point HOME and the XDG variables into tmp_path."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.delenv("XDG_DESKTOP_DIR", raising=False)
    monkeypatch.delenv("XDG_RUNTIME_DIR", raising=False)
    monkeypatch.delenv("DEBIAN_BRIDGE_CONFIG", raising=False)
    return tmp_path


class TestLocations:
    def test_config_and_cache_home(self, xdg):
        assert config_home() == xdg / "config" / "debian_bridge"
        assert cache_home() == xdg / "cache" / "debian_bridge"

    def test_default_config_path_override(self, xdg, monkeypatch):
        monkeypatch.setenv("DEBIAN_BRIDGE_CONFIG", str(xdg / "custom.yml"))
        assert default_config_path() == xdg / "custom.yml"

    def test_desktop_dir_fallback(self, xdg):
        assert desktop_dir() == xdg / "home" / "Desktop"

    def test_desktop_dir_from_env(self, xdg, monkeypatch):
        monkeypatch.setenv("XDG_DESKTOP_DIR", str(xdg / "Bureau"))
        assert desktop_dir() == xdg / "Bureau"

    def test_desktop_dir_from_user_dirs(self, xdg):
        (xdg / "config").mkdir()
        (xdg / "config" / "user-dirs.dirs").write_text(
            '# generated\nXDG_DESKTOP_DIR="$HOME/Schreibtisch"\nXDG_MUSIC_DIR="$HOME/Musik"\n'
        )
        assert desktop_dir() == xdg / "home" / "Schreibtisch"


class TestLoadSettings:
    def test_defaults_when_missing(self, xdg, monkeypatch):
        monkeypatch.setenv("XDG_RUNTIME_DIR", "/run/user/4242")
        settings = load_settings(xdg / "nope.yml")
        assert settings.prefix == "debian_bridge"
        assert settings.registry_path == str(xdg / "config" / "debian_bridge" / "registry.json")
        assert settings.cache_path == str(xdg / "cache" / "debian_bridge")
        assert settings.desktop_dir == str(xdg / "home" / "Desktop")
        assert settings.runtime_dir == "/run/user/4242"

    def test_yaml_values(self, xdg):
        path = xdg / "config.yml"
        path.write_text(
            "prefix: mybridge\n"
            "base_image: debian:bookworm\n"
            "uid: 1234\n"
            "registry_path: /srv/registry.json\n"
        )
        settings = load_settings(path)
        assert settings.prefix == "mybridge"
        assert settings.base_image == "debian:bookworm"
        assert settings.uid == 1234
        assert settings.registry_path == "/srv/registry.json"

    def test_empty_file(self, xdg):
        path = xdg / "config.yml"
        path.write_text("")
        assert load_settings(path).prefix == "debian_bridge"

    def test_invalid_yaml(self, xdg):
        path = xdg / "config.yml"
        path.write_text("prefix: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path)

    def test_not_a_mapping(self, xdg):
        path = xdg / "config.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path)

    def test_invalid_values(self, xdg):
        path = xdg / "config.yml"
        path.write_text("docker_timeout: 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path)

    def test_default_path_used(self, xdg):
        cfg = Path(xdg / "config" / "debian_bridge")
        cfg.mkdir(parents=True)
        (cfg / "config.yml").write_text("user: alice\n")
        assert load_settings().user == "alice"
