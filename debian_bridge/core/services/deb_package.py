"""
Debian package reader — package metadata from a .deb artifact.

A .deb is an ``ar`` archive holding ``debian-binary``,
``control.tar.*`` and ``data.tar.*``.  We only need the ``control``
file inside ``control.tar``, which ``tarfile`` opens for the gzip, xz
and bzip2 variants.  Other compressions (zstd) fall back to
``dpkg-deb --field`` when it is installed.
"""

from __future__ import annotations

import io
import logging
import os
import shutil
import subprocess
import tarfile
from pathlib import Path
from typing import BinaryIO

from debian_bridge.core.errors import PackageExtractionError
from debian_bridge.core.models.package import PackageMetadata

logger = logging.getLogger(__name__)

AR_MAGIC = b"!<arch>\n"
_AR_HEADER_SIZE = 60
_AR_FMAG = b"`\n"

_TARFILE_SUFFIXES = ("", ".gz", ".xz", ".bz2")

# seconds
DPKG_TIMEOUT = 30


def read_deb_metadata(path: Path) -> PackageMetadata:
    """Read package name, description and dependencies from a .deb.

    Raises:
        PackageExtractionError: If the file is missing or not a valid package.
    """
    if not path.is_file():
        raise PackageExtractionError(f"Package file not found: {path}")

    try:
        with path.open("rb") as fh:
            control_name, blob = _find_control_member(fh, path)
    except OSError as e:
        raise PackageExtractionError(f"Cannot read {path}: {e}") from e

    suffix = control_name[len("control.tar"):]
    if suffix in _TARFILE_SUFFIXES:
        control = _control_from_tar(blob, path)
    else:
        control = _control_from_dpkg(path, control_name)

    fields = parse_control(control)
    package = fields.get("package", "").strip()
    if not package:
        raise PackageExtractionError(f"{path} control data has no Package field")

    description = fields.get("description", "").split("\n", 1)[0].strip() or None
    depends = [d.strip() for d in fields.get("depends", "").split(",") if d.strip()]

    metadata = PackageMetadata(
        package_name=package,
        description=description,
        dependencies=depends,
        version=fields.get("version") or None,
        architecture=fields.get("architecture") or None,
    )
    logger.debug("Read %s %s from %s", metadata.package_name, metadata.version or "", path)
    return metadata


def parse_control(text: str) -> dict[str, str]:
    """Parse a Debian control stanza into lower-cased field names.

    Continuation lines (leading whitespace) are folded into the previous
    field, separated by newlines; a lone ``.`` marks an empty line.
    """
    fields: dict[str, str] = {}
    current: str | None = None
    for line in text.splitlines():
        if not line.strip():
            if fields:
                break  # first stanza only
            continue
        if line[0] in " \t":
            if current is not None:
                value = line.strip()
                fields[current] += "\n" + ("" if value == "." else value)
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        current = key.strip().lower()
        fields[current] = value.strip()
    return fields


# ── Archive helpers ─────────────────────────────────────────────


def _find_control_member(fh: BinaryIO, path: Path) -> tuple[str, bytes]:
    """Walk the ar headers and read only the control.tar member.

    Other members (the data payload) are skipped with seek().
    """
    if fh.read(len(AR_MAGIC)) != AR_MAGIC:
        raise PackageExtractionError(f"{path} is not a Debian package (bad ar magic)")

    offset = len(AR_MAGIC)
    while True:
        header = fh.read(_AR_HEADER_SIZE)
        if len(header) < _AR_HEADER_SIZE:
            raise PackageExtractionError(f"{path} has no control archive")
        if header[58:60] != _AR_FMAG:
            raise PackageExtractionError(f"{path} has a corrupt ar header at byte {offset}")
        name = header[0:16].decode("ascii", "replace").strip().rstrip("/")
        try:
            size = int(header[48:58].decode("ascii").strip())
        except ValueError:
            raise PackageExtractionError(f"{path} has a corrupt ar member size") from None

        if name.startswith("control.tar"):
            blob = fh.read(size)
            if len(blob) < size:
                raise PackageExtractionError(f"{path} is truncated inside {name}")
            return name, blob

        padded = size + (size % 2)
        fh.seek(padded, os.SEEK_CUR)
        offset += _AR_HEADER_SIZE + padded


def _control_from_tar(blob: bytes, path: Path) -> str:
    try:
        with tarfile.open(fileobj=io.BytesIO(blob), mode="r:*") as tar:
            for member in tar.getmembers():
                if member.isfile() and member.name.lstrip("./") == "control":
                    fh = tar.extractfile(member)
                    if fh is not None:
                        return fh.read().decode("utf-8", "replace")
    except (tarfile.TarError, EOFError, OSError) as e:
        raise PackageExtractionError(f"Cannot open control archive in {path}: {e}") from e
    raise PackageExtractionError(f"{path} control archive has no control file")


def _control_from_dpkg(path: Path, member: str) -> str:
    if shutil.which("dpkg-deb") is None:
        raise PackageExtractionError(
            f"{path} uses {member}, which needs dpkg-deb to read"
        )
    try:
        result = subprocess.run(
            ["dpkg-deb", "--field", str(path)],
            capture_output=True,
            text=True,
            timeout=DPKG_TIMEOUT,
        )
    except subprocess.TimeoutExpired:
        raise PackageExtractionError(
            f"dpkg-deb timed out after {DPKG_TIMEOUT}s reading {path}"
        ) from None
    except OSError as e:
        raise PackageExtractionError(f"Cannot execute dpkg-deb: {e}") from e
    if result.returncode != 0:
        raise PackageExtractionError(
            f"dpkg-deb failed on {path}: {result.stderr.strip() or result.returncode}"
        )
    return result.stdout
