"""
Action and Receipt models — the runtime gateway contract.

The orchestrator sends Actions (build, run, delete, ...) to an adapter;
the adapter answers with a Receipt.  Never exceptions.  Turning a failed
receipt into a domain error is the orchestrator's job.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ReceiptStatus = Literal["ok", "failed"]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()


class Action(BaseModel):
    """A requested runtime operation."""

    id: str                         # "<operation>:<runtime name>"
    adapter: str = "docker"
    operation: str                  # build, run, delete, version
    program: str | None = None      # registered program name, if any
    params: dict[str, Any] = Field(default_factory=dict)


class Receipt(BaseModel):
    """Outcome of one adapter execution.

    ``metadata`` carries adapter specifics: the executed command line,
    ``timeout`` when the runtime was too slow, ``not_found`` when a
    delete targeted an image that does not exist.
    """

    adapter: str
    action_id: str
    status: ReceiptStatus = "ok"

    started_at: str = Field(default_factory=_utc_now)
    ended_at: str = Field(default_factory=_utc_now)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def not_found(self) -> bool:
        """Whether the runtime reported the target as missing."""
        return self.failed and bool(self.metadata.get("not_found"))

    @property
    def command(self) -> list[str]:
        """The command line the adapter ran, if it recorded one."""
        return list(self.metadata.get("command", []))

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **kwargs: Any) -> Receipt:
        return cls._finish("ok", adapter, action_id, output=output, **kwargs)

    @classmethod
    def failure(cls, adapter: str, action_id: str, error: str, **kwargs: Any) -> Receipt:
        return cls._finish("failed", adapter, action_id, error=error, **kwargs)

    @classmethod
    def _finish(cls, status: ReceiptStatus, adapter: str, action_id: str, **kwargs: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, status=status, **kwargs)
