"""Adapters — container runtime bindings.

Public re-exports for convenient access.
"""

from debian_bridge.adapters.base import Adapter, ExecutionContext
from debian_bridge.adapters.containers.docker import DockerAdapter
from debian_bridge.adapters.mock import MockAdapter

__all__ = [
    "Adapter",
    "DockerAdapter",
    "ExecutionContext",
    "MockAdapter",
]
