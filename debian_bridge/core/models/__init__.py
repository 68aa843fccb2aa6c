"""
Domain models — Pydantic types for debian-bridge.

All models are re-exported here for convenient access:

    from debian_bridge.core.models import Capability, ProgramRecord, ProgramRegistry
"""

from debian_bridge.core.models.action import Action, Receipt
from debian_bridge.core.models.capability import (
    Capability,
    CapabilityAvailability,
    canonical,
)
from debian_bridge.core.models.host import HostSystem
from debian_bridge.core.models.package import PackageMetadata
from debian_bridge.core.models.program import Icon, ProgramRecord, ProgramRegistry
from debian_bridge.core.models.settings import Settings

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # capability.py
    "Capability",
    "CapabilityAvailability",
    "canonical",
    # host.py
    "HostSystem",
    # package.py
    "PackageMetadata",
    # program.py
    "Icon",
    "ProgramRecord",
    "ProgramRegistry",
    # settings.py
    "Settings",
]
