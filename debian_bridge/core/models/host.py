"""
HostSystem — what the prober found out about the machine we run on.

Plain data only.  The probe itself lives in
``debian_bridge.core.services.host_probe``; the core never inspects
host internals directly.
"""

from __future__ import annotations

from pydantic import BaseModel


class HostSystem(BaseModel):
    """Snapshot of the host session relevant to capability bridging."""

    window_manager: str | None = None   # desktop / display server, None = headless
    display: str | None = None          # $DISPLAY or $WAYLAND_DISPLAY
    sound_daemon: str | None = None     # pulseaudio, pipewire, None = no sound
    docker_version: str | None = None   # None = docker CLI or daemon unreachable
    uid: int = 1000
    gid: int = 1000
    user: str = ""
    runtime_dir: str = ""
    timezone: str | None = None

    def summary(self) -> list[tuple[str, str]]:
        """Label/value rows for human display."""
        return [
            ("Window manager", self.window_manager or "-"),
            ("Display", self.display or "-"),
            ("Sound daemon", self.sound_daemon or "-"),
            ("Docker", self.docker_version or "unavailable"),
            ("User", f"{self.user or '?'} ({self.uid}:{self.gid})"),
            ("Runtime dir", self.runtime_dir or "-"),
            ("Timezone", self.timezone or "-"),
        ]
