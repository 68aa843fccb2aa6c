"""
App — the program lifecycle orchestrator.

Composes the capability catalog, the registry, the container spec
generator and the runtime adapter into create / run / remove / list.

Per program the lifecycle is tiny:

    ∅ ──create──▶ Installed ──remove──▶ ∅
                  Installed ──run────▶ Installed

Ordering rules:
    - validation and lookups fail before any side effect;
    - the duplicate-name check precedes the (expensive) image build;
    - the registry entry is inserted only after a successful build, so
      the registry never references an image that was never built;
    - the scratch build context is removed on every exit path;
    - desktop entries are best-effort: failures become warnings.

Mutations are in-memory; the caller persists with ``save()`` once the
whole operation has succeeded.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from debian_bridge.adapters.base import Adapter, ExecutionContext
from debian_bridge.core.errors import (
    BuildFailedError,
    DesktopEntryError,
    DuplicateProgramError,
    InvalidPackageMetadataError,
    PackageExtractionError,
    ProgramNotFoundError,
    RuntimeExecutionError,
    RuntimeNotFoundError,
    StorageError,
    UnsupportedFeatureError,
)
from debian_bridge.core.models.action import Action, Receipt
from debian_bridge.core.models.capability import Capability, CapabilityAvailability, canonical
from debian_bridge.core.models.host import HostSystem
from debian_bridge.core.models.package import PackageMetadata
from debian_bridge.core.models.program import Icon, ProgramRecord, ProgramRegistry
from debian_bridge.core.models.settings import Settings
from debian_bridge.core.persistence.registry_file import save_registry
from debian_bridge.core.services.container_spec import (
    ARTIFACT_NAME,
    DOCKERFILE_NAME,
    ContainerSpec,
    generate_container_spec,
    generate_run_args,
)
from debian_bridge.core.services.deb_package import read_deb_metadata
from debian_bridge.core.services.desktop_entry import DesktopEntryWriter, desktop_exec

logger = logging.getLogger(__name__)

Extractor = Callable[[Path], PackageMetadata]


@dataclass
class OperationResult:
    """Outcome of a successful lifecycle operation."""

    program: ProgramRecord
    warnings: list[str] = field(default_factory=list)
    spec: ContainerSpec | None = None

    def to_dict(self) -> dict:
        result: dict = {
            "program": self.program.model_dump(mode="json"),
            "warnings": list(self.warnings),
        }
        if self.spec is not None:
            result["run_args"] = self.spec.run_args
        return result


class App:
    """Lifecycle orchestrator for containerized desktop programs.

    Args:
        settings: Resolved settings (prefix, cache path, image user...).
        registry: The registry loaded at process start; owned by the App.
        availability: Capability availability computed once from the host.
        adapter: Runtime gateway (DockerAdapter, or MockAdapter in tests).
        extractor: Package metadata reader.
        desktop: Desktop entry writer; defaults to settings.desktop_dir.
        executable: Command the desktop entry uses to launch programs.
        host: The probe the availability was derived from, for display.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        registry: ProgramRegistry,
        availability: CapabilityAvailability,
        adapter: Adapter,
        extractor: Extractor = read_deb_metadata,
        desktop: DesktopEntryWriter | None = None,
        executable: str = "debian-bridge",
        host: HostSystem | None = None,
    ):
        self.settings = settings
        self.registry = registry
        self.features = availability
        self.adapter = adapter
        self.extractor = extractor
        self.desktop = desktop or DesktopEntryWriter(Path(settings.desktop_dir))
        self.executable = executable
        self.host = host

    @property
    def prefix(self) -> str:
        return self.settings.prefix

    # ── Queries ─────────────────────────────────────────────────

    def list(self) -> list[str]:
        """Installed program names in registry order."""
        return self.registry.names()

    def find(self, name: str) -> ProgramRecord:
        """Look up a program by name.

        Raises:
            ProgramNotFoundError: If it is not registered.
        """
        found = self.registry.find_by_name(name)
        if found is None:
            raise ProgramNotFoundError(name)
        return found[0]

    def run_args(self, record: ProgramRecord) -> list[str]:
        """Regenerate the run flags for an installed program."""
        return generate_run_args(
            record.capabilities,
            runtime_name=record.runtime_name(self.prefix),
            settings=self.settings,
        )

    # ── Lifecycle ───────────────────────────────────────────────

    def create(
        self,
        artifact_path: Path,
        capabilities: Iterable[Capability],
        icon: Icon | None = None,
        command: str | None = None,
        deps: str | None = None,
        tag: str | None = None,
    ) -> OperationResult:
        """Build an image for a package and register it.

        Args:
            artifact_path: Path to the .deb package.
            capabilities: Host capabilities to bridge.
            icon: Optional icon; triggers a desktop entry.
            command: Launch command inside the container (default: package name).
            deps: Extra packages to install alongside.
            tag: Alternate program name instead of the package name.

        Raises:
            UnsupportedFeatureError: A capability is unavailable on this host.
            PackageExtractionError: The package cannot be read.
            InvalidPackageMetadataError: The package has no usable name.
            DuplicateProgramError: The name, or its runtime name, is already taken.
            BuildFailedError: The image build failed.
            StorageError: The scratch build context could not be staged.
        """
        requested = canonical(capabilities)
        missing = self.features.unavailable(requested)
        if missing:
            raise UnsupportedFeatureError([c.label for c in missing])

        metadata = self._extract(artifact_path)
        name = (tag or metadata.package_name or "").strip()
        if not name:
            raise InvalidPackageMetadataError(f"No program name in {artifact_path}")

        record = ProgramRecord(
            name=name,
            source_path=str(artifact_path),
            capabilities=requested,
            icon=icon,
            launch_command=(command or "").strip() or metadata.package_name.strip(),
            dependency_spec=deps or None,
        )
        if self.registry.contains(record.name):
            raise DuplicateProgramError(record.name)

        runtime_name = record.runtime_name(self.prefix)
        clash = self.registry.find_by_runtime_name(runtime_name, self.prefix)
        if clash is not None:
            raise DuplicateProgramError(record.name, existing=clash.name)

        spec = generate_container_spec(
            metadata,
            record.capabilities,
            record.launch_command,
            runtime_name=runtime_name,
            settings=self.settings,
            dependency_spec=record.dependency_spec,
        )
        logger.debug("Generated dockerfile:\n%s", spec.dockerfile)

        self._build(artifact_path, record, spec)
        self.registry.insert(record)
        logger.info("Program '%s' created as %s", record.name, runtime_name)

        result = OperationResult(program=record, spec=spec)
        if icon is not None:
            try:
                self._create_entry(record, icon, metadata.description)
            except DesktopEntryError as e:
                logger.warning("%s", e)
                result.warnings.append(str(e))
        return result

    def run(self, name: str) -> OperationResult:
        """Launch an installed program.

        Raises:
            ProgramNotFoundError: If it is not registered.
            RuntimeExecutionError: If the runtime fails to start it.
        """
        record = self.find(name)
        runtime_name = record.runtime_name(self.prefix)
        receipt = self._execute(
            "run",
            record,
            image=runtime_name,
            name=runtime_name,
            args=self.run_args(record),
            detach=True,
        )
        if receipt.failed:
            raise RuntimeExecutionError(f"Can't run program '{name}': {receipt.error}")
        logger.info("Program '%s' started", name)
        return OperationResult(program=record)

    def remove(self, name: str) -> OperationResult:
        """Delete a program's image and unregister it.

        A runtime "not found" counts as success: the image is already gone.

        Raises:
            ProgramNotFoundError: If it is not registered.
            RuntimeExecutionError: If the runtime fails to delete the image.
        """
        record = self.find(name)
        try:
            self._delete_runtime(record)
        except RuntimeNotFoundError as e:
            logger.info("Image for '%s' already gone: %s", name, e)

        self.registry.remove(record)
        logger.info("Program '%s' removed", name)

        result = OperationResult(program=record)
        if record.icon is not None:
            try:
                self.desktop.remove(record.name)
            except DesktopEntryError as e:
                logger.warning("%s", e)
                result.warnings.append(str(e))
        return result

    def save(self, path: Path | None = None) -> None:
        """Persist the registry (default: settings.registry_path)."""
        save_registry(self.registry, path or Path(self.settings.registry_path))
        logger.debug("Config updated")

    # ── Steps ───────────────────────────────────────────────────

    def _extract(self, artifact_path: Path) -> PackageMetadata:
        try:
            return self.extractor(artifact_path)
        except PackageExtractionError:
            raise
        except OSError as e:
            raise PackageExtractionError(f"Cannot read {artifact_path}: {e}") from e

    def _build(self, artifact_path: Path, record: ProgramRecord, spec: ContainerSpec) -> None:
        """Stage a scratch build context and build the image in it."""
        cache = Path(self.settings.cache_path)
        runtime_name = record.runtime_name(self.prefix)
        try:
            cache.mkdir(parents=True, exist_ok=True)
            scratch = tempfile.TemporaryDirectory(prefix="build_", dir=cache)
        except OSError as e:
            raise StorageError(f"Cannot create build context in {cache}: {e}") from e

        with scratch as context_dir:
            try:
                shutil.copyfile(artifact_path, Path(context_dir) / ARTIFACT_NAME)
                (Path(context_dir) / DOCKERFILE_NAME).write_text(spec.dockerfile, encoding="utf-8")
            except OSError as e:
                raise StorageError(f"Cannot stage build context for '{record.name}': {e}") from e

            receipt = self._execute(
                "build",
                record,
                context_dir=context_dir,
                tag=runtime_name,
                timeout=self.settings.docker_timeout,
            )
        if receipt.failed:
            raise BuildFailedError(f"Can't build program '{record.name}': {receipt.error}")

    def _delete_runtime(self, record: ProgramRecord) -> None:
        receipt = self._execute("delete", record, image=record.runtime_name(self.prefix))
        if receipt.not_found:
            raise RuntimeNotFoundError(receipt.error or record.runtime_name(self.prefix))
        if receipt.failed:
            raise RuntimeExecutionError(f"Can't remove program '{record.name}': {receipt.error}")

    def _create_entry(self, record: ProgramRecord, icon: Icon, description: str | None) -> None:
        self.desktop.write(
            record.name,
            desktop_exec([self.executable, "run", record.name]),
            icon.path,
            description,
        )

    def _execute(
        self,
        operation: str,
        record: ProgramRecord,
        timeout: int | None = None,
        **params: object,
    ) -> Receipt:
        action = Action(
            id=f"{operation}:{record.runtime_name(self.prefix)}",
            adapter=self.adapter.name,
            operation=operation,
            program=record.name,
            params=params,
        )
        receipt = self.adapter.execute(ExecutionContext(action=action, timeout=timeout))
        logger.debug(
            "%s → %s (%dms) %s", action.id, receipt.status, receipt.duration_ms, " ".join(receipt.command),
        )
        return receipt
