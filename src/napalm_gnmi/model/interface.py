"""Typed models for the managed interface entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

LifecycleState = Literal["absent", "creating", "present", "updating", "deleting"]

# Declared fields that only apply to one switchport mode.
SWITCHPORT_FIELDS: tuple[str, ...] = ("access_vlan", "trunk_vlans")
ROUTED_FIELDS: tuple[str, ...] = ("ipv4_address",)


@dataclass
class InterfaceConfig:
    """Desired configuration for one interface.

    Fields belonging to the other switchport mode are ignored when the
    configuration is applied.

    Attributes:
        name: Interface name (e.g. ``"Ethernet1"``); identifies the entity and
            cannot change once created.
        description: Interface description, ``None`` to leave it empty.
        switchport: ``True`` for a layer-2 switchport, ``False`` for a routed
            port.  Cannot change once created.
        access_vlan: Access VLAN id (switchport only).
        trunk_vlans: Trunk VLAN ids in order (switchport only).
        ipv4_address: Address in CIDR notation, e.g. ``"10.0.0.1/24"``
            (routed only).
    """

    name: str
    description: str | None = None
    switchport: bool = True
    access_vlan: int | None = None
    trunk_vlans: list[int] = field(default_factory=list)
    ipv4_address: str | None = None

    def ignored_fields(self) -> list[str]:
        """Return the declared fields that do not apply to :attr:`switchport`."""
        if self.switchport:
            return [f for f in ROUTED_FIELDS if getattr(self, f) is not None]
        return [f for f in SWITCHPORT_FIELDS if getattr(self, f) not in (None, [])]


@dataclass
class InterfaceState:
    """Interface attributes as read back from the device.

    Attributes:
        name: Interface name.
        description: Configured description, if any.
        switchport: ``True`` if IPv4 is disabled on subinterface 0, ``False``
            if enabled, ``None`` if the device did not report it.
        access_vlan: Access VLAN id, if any.
        trunk_vlans: Trunk VLAN ids in the order returned.
        ipv4_address: First IPv4 address as ``"ip/prefix"``, if any.
    """

    name: str
    description: str | None = None
    switchport: bool | None = None
    access_vlan: int | None = None
    trunk_vlans: list[int] = field(default_factory=list)
    ipv4_address: str | None = None


@dataclass
class InterfaceResource:
    """Lifecycle record handed back to the host store after each call.

    Attributes:
        name: Interface name.
        id: Entity identifier; set on create, cleared on delete.
        state: Current lifecycle state.
        observed: Last successfully read device state.
    """

    name: str
    id: str | None = None
    state: LifecycleState = "absent"
    observed: InterfaceState | None = None
