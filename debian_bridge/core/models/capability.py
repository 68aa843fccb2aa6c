"""
Capability catalog — host facilities a program may be granted.

The set is closed: six capabilities, declared in canonical order.  That
order is used everywhere a capability set is serialized or expanded
into container directives, so the same set always produces the same
output no matter how the caller listed it.

Availability is computed once per process from a host probe and then
passed around as an immutable value.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from debian_bridge.core.models.host import HostSystem


class Capability(StrEnum):
    """A bridgeable host capability."""

    DISPLAY = "display"
    SOUND = "sound"
    NOTIFICATION = "notification"
    DEVICES = "devices"
    PERSISTENT_HOME = "persistent_home"
    TIMEZONE = "timezone"

    @property
    def label(self) -> str:
        """Human-readable name."""
        return _LABELS[self]

    @classmethod
    def parse(cls, value: str) -> Capability:
        """Resolve a value, label or CLI flag name to a Capability.

        Raises:
            ValueError: If nothing matches.
        """
        key = value.strip().lower().replace("-", "_").replace(" ", "_")
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown capability '{value}'. Valid: {valid}") from None


_LABELS: dict[Capability, str] = {
    Capability.DISPLAY: "Display",
    Capability.SOUND: "Sound",
    Capability.NOTIFICATION: "Notification",
    Capability.DEVICES: "Devices",
    Capability.PERSISTENT_HOME: "Home persistent",
    Capability.TIMEZONE: "Timezone",
}

# CLI flag names and labels that differ from the enum value
_ALIASES: dict[str, str] = {
    "home": "persistent_home",
    "home_persistent": "persistent_home",
    "notifications": "notification",
    "time": "timezone",
}

_ORDER: tuple[Capability, ...] = tuple(Capability)

# Always bridgeable regardless of the host session
_ALWAYS_AVAILABLE = frozenset({
    Capability.DEVICES,
    Capability.NOTIFICATION,
    Capability.PERSISTENT_HOME,
    Capability.TIMEZONE,
})


def canonical(capabilities: Iterable[Capability]) -> list[Capability]:
    """Deduplicate and sort capabilities into declaration order."""
    chosen = set(capabilities)
    return [c for c in _ORDER if c in chosen]


@dataclass(frozen=True)
class CapabilityAvailability:
    """Fixed-size availability table, one flag per Capability.

    Flags are stored positionally in canonical order.
    """

    flags: tuple[bool, ...]

    def __post_init__(self) -> None:
        if len(self.flags) != len(_ORDER):
            raise ValueError(
                f"Expected {len(_ORDER)} availability flags, got {len(self.flags)}"
            )

    @classmethod
    def from_mapping(cls, mapping: dict[Capability, bool]) -> CapabilityAvailability:
        """Build from a partial mapping; missing capabilities are unavailable."""
        return cls(tuple(bool(mapping.get(c, False)) for c in _ORDER))

    @classmethod
    def from_host(cls, host: HostSystem) -> CapabilityAvailability:
        """Derive availability from a host probe."""
        mapping = {c: True for c in _ALWAYS_AVAILABLE}
        mapping[Capability.DISPLAY] = host.window_manager is not None
        mapping[Capability.SOUND] = host.sound_daemon is not None
        return cls.from_mapping(mapping)

    def __getitem__(self, capability: Capability) -> bool:
        return self.flags[_ORDER.index(capability)]

    def __iter__(self) -> Iterator[Capability]:
        return iter(_ORDER)

    def items(self) -> list[tuple[Capability, bool]]:
        """(capability, available) pairs in canonical order."""
        return list(zip(_ORDER, self.flags))

    def available(self) -> list[Capability]:
        """Capabilities that can currently be granted."""
        return [c for c, ok in self.items() if ok]

    def unavailable(self, requested: Iterable[Capability]) -> list[Capability]:
        """Requested capabilities that the host cannot provide."""
        return [c for c in canonical(requested) if not self[c]]

    def validate(self, requested: Iterable[Capability]) -> bool:
        """True iff every requested capability is available.

        The empty request is always valid.
        """
        return not self.unavailable(requested)

    def to_dict(self) -> dict[str, bool]:
        return {c.value: ok for c, ok in self.items()}
