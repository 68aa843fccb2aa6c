"""
Program models — the persisted registry of installed programs.

A ProgramRecord is everything needed to rebuild the container run
arguments for an installed program.  The ProgramRegistry is the ordered,
name-keyed collection serialized to registry.json.

All mutations here are in-memory.  Persisting is a separate, explicit
step (see ``debian_bridge.core.persistence.registry_file``) so a caller
can batch a registry change with filesystem side effects and commit
once both succeed.
"""

from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from debian_bridge.core.errors import DuplicateProgramError, ProgramNotFoundError
from debian_bridge.core.models.capability import Capability, canonical

ICON_NAME_DEFAULT = "debian_bridge_default.ico"

# Characters not allowed in an image tag; "g++" becomes "g--"
_RUNTIME_UNSAFE = re.compile(r"[^a-z0-9_.-]")


class Icon(BaseModel):
    """Reference to an icon file; the file itself is managed externally."""

    path: str

    @classmethod
    def default(cls) -> Icon:
        """The fallback icon under the user's icon directory."""
        return cls(path=str(Path.home() / ".icons" / ICON_NAME_DEFAULT))


class ProgramRecord(BaseModel):
    """One installed program."""

    name: str
    source_path: str = ""
    capabilities: list[Capability] = Field(default_factory=list)
    icon: Icon | None = None
    launch_command: str = ""
    dependency_spec: str | None = None

    @field_validator("capabilities")
    @classmethod
    def _canonical_capabilities(cls, value: list[Capability]) -> list[Capability]:
        return canonical(value)

    def model_post_init(self, __context: object) -> None:
        if not self.launch_command:
            self.launch_command = self.name

    def runtime_name(self, prefix: str) -> str:
        """Image tag and container name at the runtime layer."""
        return f"{prefix}_{_RUNTIME_UNSAFE.sub('-', self.name.lower())}"


class ProgramRegistry(BaseModel):
    """Ordered collection of ProgramRecords, unique by name."""

    schema_version: int = 1
    programs: list[ProgramRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> ProgramRegistry:
        seen: set[str] = set()
        for program in self.programs:
            if program.name in seen:
                raise ValueError(f"duplicate program name '{program.name}'")
            seen.add(program.name)
        return self

    def find_by_name(self, name: str) -> tuple[ProgramRecord, int] | None:
        """Exact-match lookup returning the record and its position."""
        for idx, program in enumerate(self.programs):
            if program.name == name:
                return program, idx
        return None

    def contains(self, name: str) -> bool:
        return self.find_by_name(name) is not None

    def find_by_runtime_name(self, runtime_name: str, prefix: str) -> ProgramRecord | None:
        """The record whose runtime name under ``prefix`` is ``runtime_name``."""
        for program in self.programs:
            if program.runtime_name(prefix) == runtime_name:
                return program
        return None

    def insert(self, record: ProgramRecord) -> None:
        """Append a record.

        Raises:
            DuplicateProgramError: If the name is already registered.
        """
        if self.contains(record.name):
            raise DuplicateProgramError(record.name)
        self.programs.append(record)

    def remove(self, record: ProgramRecord) -> None:
        """Remove the single entry with the record's name.

        Raises:
            ProgramNotFoundError: If no such entry exists.
        """
        found = self.find_by_name(record.name)
        if found is None:
            raise ProgramNotFoundError(record.name)
        del self.programs[found[1]]

    def clear(self) -> None:
        self.programs = []

    def names(self) -> list[str]:
        """Program names in registry order."""
        return [p.name for p in self.programs]

    def __len__(self) -> int:
        return len(self.programs)
