"""
Docker adapter — image build, container run, image delete.

Uses the docker CLI — never the Docker API directly.

Action params by operation:
    build:   context_dir (str), tag (str), dockerfile (str, optional)
    run:     image (str), name (str), args (list[str]), detach (bool)
    delete:  image (str)
    version: (none)
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from debian_bridge.adapters.base import Adapter, ExecutionContext
from debian_bridge.core.models.action import Receipt

logger = logging.getLogger(__name__)

OPERATIONS = frozenset({"build", "run", "delete", "version"})

# stderr fragments docker prints when the target does not exist
_NOT_FOUND_MARKERS = ("no such image", "no such container")


class DockerAdapter(Adapter):
    """Container runtime gateway over the docker CLI."""

    def __init__(self, binary: str = "docker"):
        self._binary = binary

    @property
    def name(self) -> str:
        return "docker"

    def is_available(self) -> bool:
        return shutil.which(self._binary) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        operation = context.action.operation
        if operation not in OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(OPERATIONS))}"

        required = {
            "build": ("context_dir", "tag"),
            "run": ("image", "name"),
            "delete": ("image",),
        }.get(operation, ())
        missing = [key for key in required if not context.params.get(key)]
        if missing:
            return False, f"Missing required param(s) for {operation}: {', '.join(missing)}"

        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        ok, error = self.validate(context)
        if not ok:
            return Receipt.failure(adapter=self.name, action_id=context.action.id, error=error)

        operation = context.action.operation
        if operation == "build":
            args = self._build_args(context)
        elif operation == "run":
            args = self._run_args(context)
        elif operation == "delete":
            args = ["image", "rm", "--force", context.params["image"]]
        else:
            args = ["version", "--format", "{{.Server.Version}}"]

        receipt = self._docker(args, context)
        if operation == "delete" and receipt.failed and _is_not_found(receipt.error):
            receipt.metadata["not_found"] = True
        return receipt

    # ── Command lines ───────────────────────────────────────────

    def _build_args(self, ctx: ExecutionContext) -> list[str]:
        args = ["build", "--tag", ctx.params["tag"]]
        dockerfile = ctx.params.get("dockerfile")
        if dockerfile:
            args += ["--file", dockerfile]
        args.append(ctx.params["context_dir"])
        return args

    def _run_args(self, ctx: ExecutionContext) -> list[str]:
        args = ["run", "--rm", "--name", ctx.params["name"]]
        if ctx.params.get("detach", True):
            args.append("--detach")
        args += list(ctx.params.get("args", []))
        args.append(ctx.params["image"])
        return args

    # ── Helpers ─────────────────────────────────────────────────

    def _docker(self, args: list[str], ctx: ExecutionContext) -> Receipt:
        """Run a docker command and capture the outcome as a receipt."""
        cmd = [self._binary, *args]
        logger.debug("Running %s", " ".join(cmd))
        start = time.monotonic()
        try:
            result = subprocess.run(
                cmd,
                cwd=ctx.cwd,
                capture_output=True,
                text=True,
                timeout=ctx.timeout,
            )
        except subprocess.TimeoutExpired:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"docker {args[0]} timed out after {ctx.timeout}s",
                metadata={"command": cmd, "timeout": True},
            )
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Cannot execute {self._binary}: {e}",
                metadata={"command": cmd},
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if result.returncode == 0:
            return Receipt.success(
                adapter=self.name,
                action_id=ctx.action.id,
                output=result.stdout.strip(),
                duration_ms=elapsed_ms,
                return_code=0,
                metadata={"command": cmd},
            )
        return Receipt.failure(
            adapter=self.name,
            action_id=ctx.action.id,
            error=result.stderr.strip() or f"docker {args[0]} exited with {result.returncode}",
            output=result.stdout.strip(),
            duration_ms=elapsed_ms,
            return_code=result.returncode,
            metadata={"command": cmd},
        )


def _is_not_found(error: str | None) -> bool:
    text = (error or "").lower()
    return any(marker in text for marker in _NOT_FOUND_MARKERS)
