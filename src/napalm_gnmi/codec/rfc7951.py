"""RFC 7951 (JSON encoding of YANG data) codec for the interface subtree.

Emitting qualifies member names with their YANG module wherever the module
changes and sorts keys, so the same subtree always renders to the same
document.  Loading accepts module-qualified or bare member names and merges a
fragment into an existing node: a member present in the fragment overwrites
the node's field, a missing member leaves it alone.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from napalm_gnmi.client.errors import GnmiDecodeError, GnmiSerializationError
from napalm_gnmi.model.tree import (
    InterfaceNode,
    Ipv4AddressNode,
    Ipv4Node,
    SwitchedVlanNode,
    YangNode,
)


_VLAN_RANGE_RE = re.compile(r"^([0-9]+)\.\.([0-9]+)$")


# ---------------------------------------------------------------------------
# Emit
# ---------------------------------------------------------------------------

def emit_json(node: YangNode) -> str:
    """Render *node* as an indented RFC 7951 document with sorted keys.

    Raises:
        GnmiSerializationError: If a leaf does not fit its YANG type or the
            document cannot be encoded.
    """
    try:
        document = node.to_rfc7951()
        return json.dumps(document, sort_keys=True, indent=2)
    except (TypeError, ValueError) as exc:
        raise GnmiSerializationError(
            f"Failed to emit RFC 7951 document for {type(node).__name__}: {exc}"
        ) from exc


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

def decode_document(text: str) -> Any:
    """Parse *text* as JSON, raising :exc:`.GnmiDecodeError` on failure."""
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError) as exc:
        raise GnmiDecodeError(f"Invalid JSON document: {str(text)[:200]!r}") from exc


def load_interface(
    value: Any,
    into: InterfaceNode | None = None,
    name: str | None = None,
) -> InterfaceNode:
    """Merge an ``interface`` document into *into* (or a new node).

    Accepts either the list entry itself or a wrapper of the form
    ``{"openconfig-interfaces:interface": [entry, ...]}``; with a wrapper the
    entry named *name* is used, falling back to the first one.
    """
    data = _container(value, "interface")
    if set(data) == {"interface"}:
        entries = data["interface"]
        if not isinstance(entries, list):
            raise GnmiDecodeError(f"interface: expected a list, got {type(entries).__name__}")
        if not entries:
            return into if into is not None else InterfaceNode(name=name or "")
        chosen = entries[0]
        for entry in entries:
            if _container(entry, "interface").get("name") == name:
                chosen = entry
                break
        data = _container(chosen, "interface")

    node = into if into is not None else InterfaceNode(name=name or "")
    if "name" in data:
        node.name = _str(data["name"], "name")
    if "config" in data:
        load_config(data["config"], node)
    if "ethernet" in data:
        ethernet = _container(data["ethernet"], "ethernet")
        if "switched-vlan" in ethernet:
            switched = _container(ethernet["switched-vlan"], "switched-vlan")
            if "config" in switched:
                load_switched_vlan(switched["config"], node)
    if "subinterfaces" in data:
        subinterfaces = _container(data["subinterfaces"], "subinterfaces")
        entries = subinterfaces.get("subinterface", [])
        if not isinstance(entries, list):
            raise GnmiDecodeError("subinterface: expected a list")
        for entry in entries:
            sub = _container(entry, "subinterface")
            if _int(sub.get("index", 0), "index") != node.subinterface_index:
                continue
            if "ipv4" in sub:
                load_ipv4(sub["ipv4"], node)
    return node


def load_config(value: Any, node: InterfaceNode) -> InterfaceNode:
    """Merge an ``interface/config`` container into *node*."""
    data = _container(value, "config")
    if "name" in data:
        node.config.name = _str(data["name"], "config/name")
    if "description" in data:
        node.config.description = _str(data["description"], "config/description")
    return node


def load_description(value: Any, node: InterfaceNode) -> InterfaceNode:
    """Merge a ``config/description`` leaf (bare or wrapped) into *node*."""
    if isinstance(value, Mapping):
        data = _strip(value)
        if "description" not in data:
            raise GnmiDecodeError("description: leaf missing from wrapped value")
        value = data["description"]
    node.config.description = _str(value, "description")
    return node


def load_switched_vlan(value: Any, node: InterfaceNode) -> InterfaceNode:
    """Merge a ``switched-vlan/config`` container into *node*."""
    data = _container(value, "switched-vlan/config")
    if set(data) == {"config"}:
        data = _container(data["config"], "switched-vlan/config")
    vlan = node.switched_vlan if node.switched_vlan is not None else SwitchedVlanNode()
    if "access-vlan" in data:
        vlan.access_vlan = _int(data["access-vlan"], "access-vlan")
    if "trunk-vlans" in data:
        vlan.trunk_vlans = _vlan_list(data["trunk-vlans"])
    if "interface-mode" in data:
        vlan.interface_mode = _identity(data["interface-mode"], "interface-mode")
    node.switched_vlan = vlan
    return node


def load_ipv4(value: Any, node: InterfaceNode) -> InterfaceNode:
    """Merge a ``subinterface/ipv4`` container into *node*."""
    data = _container(value, "ipv4")
    ipv4 = node.ipv4 if node.ipv4 is not None else Ipv4Node()
    if "config" in data:
        config = _container(data["config"], "ipv4/config")
        if "enabled" in config:
            enabled = config["enabled"]
            if not isinstance(enabled, bool):
                raise GnmiDecodeError(f"ipv4/config/enabled: expected a boolean, got {enabled!r}")
            ipv4.enabled = enabled
    if "addresses" in data:
        addresses = _container(data["addresses"], "addresses")
        entries = addresses.get("address", [])
        if not isinstance(entries, list):
            raise GnmiDecodeError("address: expected a list")
        ipv4.addresses = [_address(entry) for entry in entries]
    node.ipv4 = ipv4
    return node


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _strip(data: Mapping[str, Any]) -> dict[str, Any]:
    """Drop ``module:`` prefixes from member names."""
    return {str(k).rsplit(":", 1)[-1]: v for k, v in data.items()}


def _container(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise GnmiDecodeError(f"{where}: expected an object, got {type(value).__name__}")
    return _strip(value)


def _str(value: Any, where: str) -> str:
    if not isinstance(value, str):
        raise GnmiDecodeError(f"{where}: expected a string, got {value!r}")
    return value


def _int(value: Any, where: str) -> int:
    # RFC 7951 carries 64-bit integers as strings; accept numeric strings throughout.
    if isinstance(value, bool):
        raise GnmiDecodeError(f"{where}: expected an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    raise GnmiDecodeError(f"{where}: expected an integer, got {value!r}")


def _identity(value: Any, where: str) -> str:
    return _str(value, where).rsplit(":", 1)[-1]


def _vlan_list(value: Any) -> list[int]:
    """Decode ``trunk-vlans``: ints, numeric strings and ``"a..b"`` ranges."""
    if not isinstance(value, list):
        value = [value]
    vlans: list[int] = []
    for item in value:
        if isinstance(item, str):
            m = _VLAN_RANGE_RE.match(item)
            if m:
                lo, hi = int(m.group(1)), int(m.group(2))
                if lo > hi:
                    raise GnmiDecodeError(f"trunk-vlans: reversed range {item!r}")
                vlans.extend(range(lo, hi + 1))
                continue
        vlans.append(_int(item, "trunk-vlans"))
    return vlans


def _address(entry: Any) -> Ipv4AddressNode:
    data = _container(entry, "address")
    config = _container(data.get("config", {}), "address/config")
    ip = config.get("ip", data.get("ip"))
    prefix_length = config.get("prefix-length")
    if ip is None or prefix_length is None:
        raise GnmiDecodeError(f"address: ip and prefix-length are required, got {entry!r}")
    return Ipv4AddressNode(
        ip=_str(ip, "address/ip"),
        prefix_length=_int(prefix_length, "address/prefix-length"),
    )
