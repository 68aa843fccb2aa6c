"""
Domain errors — everything the lifecycle can refuse or fail with.

Adapters never raise (failures come back as Receipts).  The orchestrator
turns failed receipts and invalid input into one of these, and the CLI
renders them as a single red line.
"""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for every debian-bridge domain error."""


class ConfigError(BridgeError):
    """Raised when the settings file is invalid or unreadable."""


class StorageError(BridgeError):
    """Raised when the registry or a scratch directory cannot be read or written."""


class DuplicateProgramError(BridgeError):
    """A program with the same name, or the same runtime name, is already registered."""

    def __init__(self, name: str, existing: str | None = None):
        self.name = name
        self.existing = existing or name
        if self.existing == name:
            reason = f"Program with such name already exists '{name}'"
        else:
            reason = f"Program '{name}' would share its image with '{self.existing}'"
        super().__init__(f"{reason}. Remove it first or use a custom tag with --tag")


class ProgramNotFoundError(BridgeError):
    """No registered program has the requested name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Can't find a program '{name}'")


class UnsupportedFeatureError(BridgeError):
    """A requested capability is not available on this host."""

    def __init__(self, features: list[str]):
        self.features = features
        super().__init__(
            "You have set unavailable feature(s): " + ", ".join(features)
        )


class InvalidPackageMetadataError(BridgeError):
    """Package metadata lacks a field the container spec needs."""


class PackageExtractionError(BridgeError):
    """The package artifact could not be read."""


class BuildFailedError(BridgeError):
    """The runtime failed to build the program image."""


class RuntimeExecutionError(BridgeError):
    """The runtime failed to run or delete a program container."""


class RuntimeNotFoundError(RuntimeExecutionError):
    """The runtime reported the target image or container as missing."""


class DesktopEntryError(BridgeError):
    """A desktop entry could not be written or removed."""
