"""
Registry file persistence — atomic read/write for ProgramRegistry.

The registry is stored as JSON in registry.json.  Writes are atomic
(write to a temp file in the same directory, then rename) so a crash
mid-write never leaves a truncated registry behind.

Unlike throwaway state, the registry is the only record of what is
installed: a malformed file is a hard error, never a silent reset.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from debian_bridge.core.errors import StorageError
from debian_bridge.core.models.program import ProgramRegistry

logger = logging.getLogger(__name__)


def load_registry(path: Path) -> ProgramRegistry:
    """Load the program registry.

    A missing file is initialized with an empty registry.  A blank file
    yields an empty registry without parsing.

    Raises:
        StorageError: If the file cannot be read, created or parsed.
    """
    if not path.exists():
        logger.info("No registry at %s — creating an empty one", path)
        registry = ProgramRegistry()
        save_registry(registry, path)
        return registry

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise StorageError(f"Cannot read registry {path}: {e}") from e

    if not raw.strip():
        logger.debug("Registry %s is empty", path)
        return ProgramRegistry()

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageError(f"Corrupt registry {path}: {e}") from e

    try:
        registry = ProgramRegistry.model_validate(data)
    except ValidationError as e:
        raise StorageError(f"Invalid registry {path}: {e}") from e

    logger.debug("Loaded %d program(s) from %s", len(registry), path)
    return registry


def save_registry(registry: ProgramRegistry, path: Path) -> None:
    """Write the full registry to disk atomically.

    Raises:
        StorageError: On any serialization or filesystem failure.
    """
    try:
        content = json.dumps(
            registry.model_dump(mode="json"), indent=2, ensure_ascii=False
        ) + "\n"
    except (TypeError, ValueError) as e:
        raise StorageError(f"Cannot serialize registry: {e}") from e

    tmp: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".registry_",
            suffix=".tmp",
        )
        tmp = Path(tmp_path)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        tmp.replace(path)
        tmp = None
        logger.debug("Registry saved to %s", path)
    except OSError as e:
        raise StorageError(f"Cannot write registry {path}: {e}") from e
    finally:
        if tmp is not None:
            tmp.unlink(missing_ok=True)
