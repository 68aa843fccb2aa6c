"""
Settings model — per-user configuration loaded from config.yml.

Paths left unset here are filled in by the loader from the XDG base
directories, so the model itself never reads the environment.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """debian-bridge configuration."""

    # ── Runtime naming ───────────────────────────────────────────
    prefix: str = "debian_bridge"

    # ── Image ────────────────────────────────────────────────────
    base_image: str = "debian:stable-slim"
    user: str = "bridge"
    uid: int = 1000
    gid: int = 1000
    runtime_dir: str = ""  # host XDG_RUNTIME_DIR; empty = /run/user/<uid>

    # ── Locations ────────────────────────────────────────────────
    registry_path: str = ""
    cache_path: str = ""
    desktop_dir: str = ""

    # ── Runtime gateway ──────────────────────────────────────────
    docker_timeout: int = Field(default=1800, gt=0)  # seconds, image builds

    @property
    def host_runtime_dir(self) -> str:
        """Host runtime directory holding the pulse and dbus sockets."""
        return self.runtime_dir or f"/run/user/{self.uid}"

    @property
    def container_runtime_dir(self) -> str:
        """Runtime directory path inside the container."""
        return f"/run/user/{self.uid}"

    @property
    def home(self) -> str:
        """Home directory of the container user."""
        return f"/home/{self.user}"
