"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import io
import tarfile
from collections.abc import Callable
from pathlib import Path

import pytest

from debian_bridge.adapters.mock import MockAdapter
from debian_bridge.core.app import App
from debian_bridge.core.models.capability import Capability, CapabilityAvailability
from debian_bridge.core.models.program import ProgramRegistry
from debian_bridge.core.models.settings import Settings

HELLO_CONTROL = """\
Package: hello
Version: 2.10-3
Architecture: amd64
Depends: libc6 (>= 2.34), zenity | kdialog
Description: example package based on GNU hello
 The GNU hello program produces a familiar, friendly greeting.
 .
 It allows non-programmers to use a classic computer science tool.
"""


def write_ar(path: Path, members: list[tuple[str, bytes]], sizes: dict[str, int] | None = None) -> Path:
    """Write an ar archive; ``sizes`` overrides the size recorded in a member header."""
    sizes = sizes or {}
    out = bytearray(b"!<arch>\n")
    for name, blob in members:
        size = sizes.get(name, len(blob))
        header = (
            f"{name + '/':<16}{0:<12}{0:<6}{0:<6}{'100644':<8}{size:<10}`\n"
        ).encode("ascii")
        out += header + blob
        if len(blob) % 2:
            out += b"\n"
    path.write_bytes(bytes(out))
    return path


def control_tarball(control: str, compression: str = "gz") -> bytes:
    ctl = io.BytesIO()
    mode = f"w:{compression}" if compression else "w"
    with tarfile.open(fileobj=ctl, mode=mode) as tar:
        data = control.encode("utf-8")
        info = tarfile.TarInfo("./control")
        info.size = len(data)
        tar.addfile(info, io.BytesIO(data))
    return ctl.getvalue()


def build_deb(path: Path, control: str, compression: str = "gz") -> Path:
    """Write a minimal .deb (ar archive with a control tarball) to ``path``."""
    suffix = f".{compression}" if compression else ""
    return write_ar(path, [
        ("debian-binary", b"2.0\n"),
        (f"control.tar{suffix}", control_tarball(control, compression)),
        ("data.tar.gz", b""),
    ])


@pytest.fixture
def deb_factory(tmp_path: Path) -> Callable[..., Path]:
    """Create .deb files under tmp_path/debs."""
    debs = tmp_path / "debs"
    debs.mkdir()

    def _make(name: str = "hello", control: str | None = None, compression: str = "gz") -> Path:
        text = control if control is not None else HELLO_CONTROL.replace("Package: hello", f"Package: {name}")
        return build_deb(debs / f"{name}.deb", text, compression)

    return _make


@pytest.fixture
def hello_deb(deb_factory) -> Path:
    return deb_factory("hello")


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with every location inside tmp_path."""
    return Settings(
        prefix="test",
        uid=1000,
        gid=1000,
        runtime_dir="/run/user/1000",
        registry_path=str(tmp_path / "config" / "registry.json"),
        cache_path=str(tmp_path / "cache"),
        desktop_dir=str(tmp_path / "Desktop"),
    )


@pytest.fixture
def all_available() -> CapabilityAvailability:
    return CapabilityAvailability.from_mapping({c: True for c in Capability})


@pytest.fixture
def mock_adapter() -> MockAdapter:
    return MockAdapter()


@pytest.fixture
def app(settings: Settings, all_available: CapabilityAvailability, mock_adapter: MockAdapter) -> App:
    """An App wired to a mock runtime and an empty registry."""
    return App(
        settings=settings,
        registry=ProgramRegistry(),
        availability=all_available,
        adapter=mock_adapter,
    )
