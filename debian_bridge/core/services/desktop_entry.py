"""
Desktop entries — ``<name>.desktop`` launchers for installed programs.

Failures here are never fatal to the lifecycle: the orchestrator logs
them and reports a warning.
"""

from __future__ import annotations

import logging
from pathlib import Path

from debian_bridge.core.errors import DesktopEntryError

logger = logging.getLogger(__name__)

DEFAULT_COMMENT = "Application"

# Characters that force an Exec argument into double quotes
_EXEC_RESERVED = frozenset(" \t\"'\\><~|&;$*?#()`")

# Inside quotes these are backslash-escaped; the key file string escape
# then doubles every backslash
_EXEC_ESCAPED = ("\"", "`", "$", "\\")


def render_desktop_entry(
    name: str,
    launch_command: str,
    icon_path: str,
    description: str | None = None,
) -> str:
    """Render a freedesktop.org Desktop Entry for a program."""
    comment = _single_line(description) or DEFAULT_COMMENT
    exec_line = " ".join(launch_command.splitlines())
    return (
        "[Desktop Entry]\n"
        "Version=1.0\n"
        "Type=Application\n"
        f"Name={_single_line(name)}\n"
        f"Comment={comment}\n"
        f"Exec={exec_line}\n"
        f"Icon={_single_line(icon_path)}\n"
        "Terminal=false\n"
        "Categories=Application;\n"
    )


class DesktopEntryWriter:
    """Writes and removes launcher files in one directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    def entry_path(self, entry_name: str) -> Path:
        return self.directory / f"{entry_name}.desktop"

    def write(
        self,
        entry_name: str,
        launch_command: str,
        icon_path: str,
        description: str | None = None,
    ) -> Path:
        """Create or replace the launcher for ``entry_name``.

        Raises:
            DesktopEntryError: If the file cannot be written.
        """
        content = render_desktop_entry(entry_name, launch_command, icon_path, description)
        path = self.entry_path(entry_name)
        logger.debug("Generated new entry in '%s':\n%s", path, content)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
            path.chmod(0o755)
        except OSError as e:
            raise DesktopEntryError(f"Can't write an entry file '{path}': {e}") from e
        return path

    def remove(self, entry_name: str) -> None:
        """Delete the launcher for ``entry_name``.

        Raises:
            DesktopEntryError: If the file is missing or cannot be removed.
        """
        path = self.entry_path(entry_name)
        try:
            path.unlink()
        except OSError as e:
            raise DesktopEntryError(f"Can't remove an entry file '{path}': {e}") from e
        logger.debug("Removed entry %s", path)


def desktop_exec(args: list[str]) -> str:
    """Join a command into an Exec value, quoting arguments as launchers expect.

    ``["debian-bridge", "run", "my app"]`` becomes
    ``debian-bridge run "my app"``.
    """
    return " ".join(_exec_arg(arg) for arg in args)


def _exec_arg(arg: str) -> str:
    arg = arg.replace("%", "%%")
    if arg and not _EXEC_RESERVED.intersection(arg):
        return arg
    escaped = "".join("\\" + ch if ch in _EXEC_ESCAPED else ch for ch in arg)
    return '"' + escaped.replace("\\", "\\\\") + '"'


def _single_line(value: str | None) -> str:
    return " ".join((value or "").split())
