"""
Mock adapter — test double for the runtime gateway.

Used by tests and by ``--mock`` to simulate docker without touching the
daemon.  Succeeds by default; individual operations can be configured to
fail, including with a runtime "not found".
"""

from __future__ import annotations

from debian_bridge.adapters.base import Adapter, ExecutionContext
from debian_bridge.core.models.action import Receipt


class MockAdapter(Adapter):
    """Universal mock adapter, keyed by operation name."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._responses: dict[str, Receipt] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def operations(self) -> list[str]:
        """Operation names in call order."""
        return [ctx.action.operation for ctx in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_response(self, operation: str, receipt: Receipt) -> None:
        """Set a custom response for every call of an operation."""
        self._responses[operation] = receipt

    def set_failure(
        self,
        operation: str,
        error: str = "Mock failure",
        not_found: bool = False,
    ) -> None:
        """Configure an operation to fail."""
        self._responses[operation] = Receipt.failure(
            adapter=self._name,
            action_id=operation,
            error=error,
            metadata={"not_found": True} if not_found else {},
        )

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)

        custom = self._responses.get(context.action.operation)
        if custom is not None:
            return custom.model_copy(update={"action_id": context.action.id})

        output = self._default_output
        if context.action.operation == "version":
            output = "0.0.0-mock"
        return Receipt.success(
            adapter=self._name,
            action_id=context.action.id,
            output=output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log and custom responses."""
        self._call_log.clear()
        self._responses.clear()
