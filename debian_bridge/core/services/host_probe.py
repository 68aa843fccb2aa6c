"""
Host probe — detect the session facilities a container can borrow.

Read-only probes: environment variables, runtime sockets, the docker
daemon version.  The result is a plain HostSystem; availability of each
Capability is derived from it once per process.
"""

from __future__ import annotations

import getpass
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from debian_bridge.adapters.base import Adapter, ExecutionContext
from debian_bridge.core.models.action import Action
from debian_bridge.core.models.host import HostSystem

logger = logging.getLogger(__name__)

_LOCALTIME = Path("/etc/localtime")


def probe_host(
    adapter: Adapter | None = None,
    environ: Mapping[str, str] | None = None,
) -> HostSystem:
    """Probe the current session.

    Args:
        adapter: Runtime adapter used to ask the daemon for its version.
            None skips the docker check.
        environ: Environment to inspect (default: os.environ).
    """
    env = os.environ if environ is None else environ
    uid, gid = os.getuid(), os.getgid()
    runtime_dir = env.get("XDG_RUNTIME_DIR") or f"/run/user/{uid}"

    host = HostSystem(
        window_manager=detect_window_manager(env),
        display=env.get("DISPLAY") or env.get("WAYLAND_DISPLAY") or None,
        sound_daemon=detect_sound_daemon(Path(runtime_dir)),
        docker_version=_docker_version(adapter) if adapter is not None else None,
        uid=uid,
        gid=gid,
        user=_current_user(env),
        runtime_dir=runtime_dir,
        timezone=detect_timezone(env),
    )
    logger.debug("Host probe: %s", host.model_dump())
    return host


def detect_window_manager(env: Mapping[str, str]) -> str | None:
    """Name of the graphical session, or None when headless."""
    if not (env.get("DISPLAY") or env.get("WAYLAND_DISPLAY")):
        return None
    desktop = env.get("XDG_CURRENT_DESKTOP") or env.get("DESKTOP_SESSION")
    if desktop:
        return desktop
    return "wayland" if env.get("WAYLAND_DISPLAY") else "x11"


def detect_sound_daemon(runtime_dir: Path) -> str | None:
    """Sound server exposing a PulseAudio socket, or None."""
    if not (runtime_dir / "pulse" / "native").exists():
        return None
    if (runtime_dir / "pipewire-0").exists():
        return "pipewire-pulse"
    return "pulseaudio"


def detect_timezone(env: Mapping[str, str]) -> str | None:
    """Host timezone from $TZ or the /etc/localtime symlink."""
    if env.get("TZ"):
        return env["TZ"]
    try:
        target = os.readlink(_LOCALTIME)
    except OSError:
        return None
    _, sep, zone = target.partition("zoneinfo/")
    return zone if sep else None


def _current_user(env: Mapping[str, str]) -> str:
    if env.get("USER"):
        return env["USER"]
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def _docker_version(adapter: Adapter) -> str | None:
    if not adapter.is_available():
        logger.info("%s CLI not found on PATH", adapter.name)
        return None
    receipt = adapter.execute(
        ExecutionContext(action=Action(id="version", operation="version"), timeout=10)
    )
    if receipt.failed:
        logger.info("Container runtime unreachable: %s", receipt.error)
        return None
    return receipt.output or None
