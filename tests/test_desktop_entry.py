"""
Tests for desktop entry rendering and writing.
"""

import stat

import pytest

from debian_bridge.core.errors import DesktopEntryError
from debian_bridge.core.services.desktop_entry import (
    DesktopEntryWriter,
    desktop_exec,
    render_desktop_entry,
)


def test_render():
    text = render_desktop_entry("hello", "debian-bridge run hello", "/icons/h.png", "Greets you")
    assert text.splitlines() == [
        "[Desktop Entry]",
        "Version=1.0",
        "Type=Application",
        "Name=hello",
        "Comment=Greets you",
        "Exec=debian-bridge run hello",
        "Icon=/icons/h.png",
        "Terminal=false",
        "Categories=Application;",
    ]


def test_render_default_comment_and_single_line():
    text = render_desktop_entry("hello", "run\nhello", "/i.png")
    assert "Comment=Application" in text
    assert "Exec=run hello" in text


@pytest.mark.parametrize("args, expected", [
    (["debian-bridge", "run", "hello"], "debian-bridge run hello"),
    (["debian-bridge", "run", "my app"], 'debian-bridge run "my app"'),
    (["debian-bridge", "run", 'a"b'], r'debian-bridge run "a\\"b"'),
    (["debian-bridge", "run", "50%"], "debian-bridge run 50%%"),
    (["debian-bridge", "run", "$HOME"], r'debian-bridge run "\\$HOME"'),
    (["debian-bridge", "run", ""], 'debian-bridge run ""'),
])
def test_desktop_exec_quoting(args, expected):
    assert desktop_exec(args) == expected


class TestDesktopEntryWriter:
    def test_write_creates_directory(self, tmp_path):
        writer = DesktopEntryWriter(tmp_path / "Desktop")
        path = writer.write("hello", "debian-bridge run hello", "/i.png")
        assert path == tmp_path / "Desktop" / "hello.desktop"
        assert path.stat().st_mode & stat.S_IXUSR

    def test_write_replaces(self, tmp_path):
        writer = DesktopEntryWriter(tmp_path)
        writer.write("hello", "a", "/i.png")
        writer.write("hello", "b", "/i.png")
        assert "Exec=b" in writer.entry_path("hello").read_text()

    def test_remove(self, tmp_path):
        writer = DesktopEntryWriter(tmp_path)
        writer.write("hello", "a", "/i.png")
        writer.remove("hello")
        assert not writer.entry_path("hello").exists()

    def test_remove_missing(self, tmp_path):
        with pytest.raises(DesktopEntryError, match="Can't remove"):
            DesktopEntryWriter(tmp_path).remove("ghost")

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        with pytest.raises(DesktopEntryError, match="Can't write"):
            DesktopEntryWriter(blocker).write("hello", "a", "/i.png")
