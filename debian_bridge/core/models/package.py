"""
PackageMetadata — what the extractor reads out of a package artifact.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class PackageMetadata(BaseModel):
    """Fields from a package's control data that the core consumes."""

    package_name: str = ""
    description: str | None = None      # first (synopsis) line only
    dependencies: list[str] = Field(default_factory=list)  # raw Depends entries
    version: str | None = None
    architecture: str | None = None
