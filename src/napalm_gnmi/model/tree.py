"""Typed OpenConfig interface subtree.

The same nodes describe the desired configuration built by
:func:`~napalm_gnmi.utils.assemble.assemble_interface` and the observed
configuration decoded by :mod:`napalm_gnmi.codec.rfc7951`.  A branch that does
not apply to the interface mode is ``None`` (absent), never an empty node, so a
document emitted from it cannot clear the other branch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from napalm_gnmi.client.errors import GnmiSerializationError
from napalm_gnmi.vendor.openconfig.modules import (
    ARISTA_VLAN_AUGMENTS,
    OC_ETHERNET,
    OC_INTERFACES,
    OC_IP,
    OC_VLAN,
    UINT8_MAX,
    UINT16_MAX,
    UINT32_MAX,
)


@runtime_checkable
class YangNode(Protocol):
    """Structured-document contract: a node that renders itself as RFC 7951."""

    def to_rfc7951(self, parent_module: str | None = None) -> dict[str, Any]:
        ...


def qualify(name: str, module: str, parent_module: str | None) -> str:
    """Prefix *name* with *module* when it differs from *parent_module*."""
    if module == parent_module:
        return name
    return f"{module}:{name}"


def check_uint(value: int, maximum: int, leaf: str) -> int:
    """Return *value* if it fits an unsigned leaf of the given width.

    Raises:
        GnmiSerializationError: If *value* is not an int in ``0..maximum``.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise GnmiSerializationError(f"{leaf}: expected an integer, got {value!r}")
    if not 0 <= value <= maximum:
        raise GnmiSerializationError(f"{leaf}: {value} does not fit in 0..{maximum}")
    return value


@dataclass
class InterfaceConfigNode:
    """``interface/config`` container.

    Attributes:
        name: Interface name leaf.
        description: Free-form description, or ``None`` if unset.
    """

    name: str | None = None
    description: str | None = None

    def to_rfc7951(self, parent_module: str | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.name is not None:
            out[qualify("name", OC_INTERFACES, parent_module)] = self.name
        if self.description is not None:
            out[qualify("description", OC_INTERFACES, parent_module)] = self.description
        return out


@dataclass
class SwitchedVlanNode:
    """``ethernet/switched-vlan/config`` container.

    Attributes:
        access_vlan: Untagged access VLAN id.
        trunk_vlans: Tagged VLAN ids, in declaration order.
        interface_mode: ``"ACCESS"``, ``"TRUNK"`` or ``None``.
    """

    access_vlan: int | None = None
    trunk_vlans: list[int] = field(default_factory=list)
    interface_mode: str | None = None

    def is_empty(self) -> bool:
        return self.access_vlan is None and not self.trunk_vlans

    def to_rfc7951(self, parent_module: str | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.access_vlan is not None:
            out[qualify("access-vlan", OC_VLAN, parent_module)] = check_uint(
                self.access_vlan, UINT16_MAX, "access-vlan"
            )
        if self.trunk_vlans:
            out[qualify("trunk-vlans", OC_VLAN, parent_module)] = [
                check_uint(v, UINT16_MAX, "trunk-vlans") for v in self.trunk_vlans
            ]
        if self.interface_mode is not None:
            out[qualify("interface-mode", ARISTA_VLAN_AUGMENTS, parent_module)] = (
                self.interface_mode
            )
        return out


@dataclass
class Ipv4AddressNode:
    """One ``ipv4/addresses/address`` list entry keyed by ``ip``."""

    ip: str
    prefix_length: int

    def to_rfc7951(self, parent_module: str | None = None) -> dict[str, Any]:
        return {
            qualify("ip", OC_IP, parent_module): self.ip,
            qualify("config", OC_IP, parent_module): {
                "ip": self.ip,
                "prefix-length": check_uint(self.prefix_length, UINT8_MAX, "prefix-length"),
            },
        }


@dataclass
class Ipv4Node:
    """``subinterfaces/subinterface[index=0]/ipv4`` container.

    Attributes:
        enabled: IPv4 enabled flag, ``None`` if not set.
        addresses: Configured addresses.
    """

    enabled: bool | None = None
    addresses: list[Ipv4AddressNode] = field(default_factory=list)

    def to_rfc7951(self, parent_module: str | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.enabled is not None:
            out[qualify("config", OC_IP, parent_module)] = {"enabled": self.enabled}
        if self.addresses:
            out[qualify("addresses", OC_IP, parent_module)] = {
                "address": [a.to_rfc7951(OC_IP) for a in self.addresses]
            }
        return out


@dataclass
class InterfaceNode:
    """``interfaces/interface[name=...]`` list entry.

    Attributes:
        name: List key.
        config: ``config`` container.
        switched_vlan: Switchport VLAN branch; ``None`` when absent.
        ipv4: IPv4 branch of subinterface 0; ``None`` when absent.
    """

    name: str
    config: InterfaceConfigNode = field(default_factory=InterfaceConfigNode)
    switched_vlan: SwitchedVlanNode | None = None
    ipv4: Ipv4Node | None = None
    subinterface_index: int = 0

    def to_rfc7951(self, parent_module: str | None = None) -> dict[str, Any]:
        out: dict[str, Any] = {
            qualify("name", OC_INTERFACES, parent_module): self.name,
        }
        config = self.config.to_rfc7951(OC_INTERFACES)
        if config:
            out[qualify("config", OC_INTERFACES, parent_module)] = config
        if self.switched_vlan is not None:
            out[qualify("ethernet", OC_ETHERNET, parent_module)] = {
                qualify("switched-vlan", OC_VLAN, OC_ETHERNET): {
                    "config": self.switched_vlan.to_rfc7951(OC_VLAN),
                },
            }
        if self.ipv4 is not None:
            index = check_uint(self.subinterface_index, UINT32_MAX, "subinterface index")
            out[qualify("subinterfaces", OC_INTERFACES, parent_module)] = {
                "subinterface": [
                    {
                        "index": index,
                        "config": {"index": index},
                        qualify("ipv4", OC_IP, OC_INTERFACES): self.ipv4.to_rfc7951(OC_IP),
                    }
                ]
            }
        return out
