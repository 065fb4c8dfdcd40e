"""Build the desired OpenConfig subtree from a declared interface.

Only the branch matching :attr:`InterfaceConfig.switchport` is populated: a
routed port gets an enabled IPv4 branch and no switched-VLAN node, a
switchport gets IPv4 disabled and (if any VLAN is declared) a switched-VLAN
node.
"""

from __future__ import annotations

import ipaddress
import logging

from napalm_gnmi.client.errors import GnmiValidationError
from napalm_gnmi.model.interface import InterfaceConfig
from napalm_gnmi.model.tree import (
    InterfaceConfigNode,
    InterfaceNode,
    Ipv4AddressNode,
    Ipv4Node,
    SwitchedVlanNode,
)
from napalm_gnmi.vendor.openconfig.modules import MODE_ACCESS, MODE_TRUNK

logger = logging.getLogger(__name__)


def assemble_interface(cfg: InterfaceConfig) -> InterfaceNode:
    """Return the full desired subtree for *cfg*.

    Raises:
        GnmiValidationError: If ``ipv4_address`` is not a valid IPv4 CIDR.
    """
    node = InterfaceNode(
        name=cfg.name,
        config=InterfaceConfigNode(name=cfg.name, description=cfg.description),
    )
    if not cfg.switchport:
        logger.debug("Assembling routed interface %s", cfg.name)
        node.ipv4 = build_ipv4(cfg)
    else:
        logger.debug("Assembling switchport interface %s", cfg.name)
        node.ipv4 = Ipv4Node(enabled=False)
        vlan = build_switched_vlan(cfg)
        if not vlan.is_empty():
            node.switched_vlan = vlan
    return node


def build_ipv4(cfg: InterfaceConfig) -> Ipv4Node:
    """Return an enabled IPv4 node carrying the declared address, if any."""
    ipv4 = Ipv4Node(enabled=True)
    if cfg.ipv4_address:
        ip, prefix_length = parse_ipv4_cidr(cfg.ipv4_address)
        ipv4.addresses.append(Ipv4AddressNode(ip=ip, prefix_length=prefix_length))
    return ipv4


def build_switched_vlan(cfg: InterfaceConfig) -> SwitchedVlanNode:
    """Return the switched-VLAN config node for the declared VLANs.

    All trunk VLANs are carried every time.  When both an access VLAN and
    trunk VLANs are declared, both are set and the mode is ``TRUNK``.
    """
    vlan = SwitchedVlanNode()
    if cfg.access_vlan is not None:
        vlan.access_vlan = cfg.access_vlan
        vlan.interface_mode = MODE_ACCESS
    if cfg.trunk_vlans:
        vlan.trunk_vlans = list(cfg.trunk_vlans)
        vlan.interface_mode = MODE_TRUNK
    return vlan


def parse_ipv4_cidr(value: str) -> tuple[str, int]:
    """Split ``"10.0.0.1/24"`` into ``("10.0.0.1", 24)``.

    The prefix is mandatory; a dotted netmask (``10.0.0.1/255.255.255.0``) is
    accepted and converted to its length.

    Raises:
        GnmiValidationError: If *value* is not an IPv4 address with a prefix.
    """
    if "/" not in value:
        raise GnmiValidationError(f"Failed to parse IPv4 address {value!r}: missing prefix length")
    try:
        iface = ipaddress.ip_interface(value.strip())
    except ValueError as exc:
        raise GnmiValidationError(f"Failed to parse IPv4 address {value!r}: {exc}") from exc
    if iface.version != 4:
        raise GnmiValidationError(f"Failed to parse IPv4 address {value!r}: not an IPv4 address")
    return str(iface.ip), iface.network.prefixlen
