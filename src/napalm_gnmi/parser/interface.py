"""Parser for gNMI Get responses of an OpenConfig interface."""

from __future__ import annotations

import logging
from typing import Any

from napalm_gnmi.client.errors import GnmiDecodeError
from napalm_gnmi.codec.rfc7951 import (
    decode_document,
    load_config,
    load_description,
    load_interface,
    load_ipv4,
    load_switched_vlan,
)
from napalm_gnmi.model.gnmi import GetResponse
from napalm_gnmi.model.interface import InterfaceState
from napalm_gnmi.model.tree import InterfaceNode
from napalm_gnmi.vendor.openconfig.paths import (
    DEFAULT_PATHS,
    PathTable,
    join_path,
    normalise_path,
)

logger = logging.getLogger(__name__)


def parse_get_response(
    response: GetResponse,
    name: str,
    paths: PathTable = DEFAULT_PATHS,
) -> InterfaceNode:
    """Decode every update of *response* into one subtree for *name*.

    Each update is decoded on its own and merged into the same node in
    arrival order, so a later fragment overwrites the fields it carries.
    Updates at paths outside the interface groups are skipped.

    Args:
        response: Get response from the transport.
        name: Interface name the Get was issued for.
        paths: Path table used to recognise update paths.

    Returns:
        The merged :class:`~napalm_gnmi.model.tree.InterfaceNode`.

    Raises:
        GnmiDecodeError: If any update value is malformed.
    """
    node = InterfaceNode(name=name)
    config_path = normalise_path(paths.resolve("global", name) + "/config")

    for notif in response.notifications:
        for update in notif.updates:
            full = join_path(notif.prefix, update.path)
            logger.debug("Read path: %s", full)
            logger.debug("JSON: %s", update.value)
            try:
                value = decode_document(update.value)
                _merge_update(node, full, value, name, paths, config_path)
            except GnmiDecodeError as exc:
                raise GnmiDecodeError(f"get of {full!r}: {exc}") from exc

    return node


def extract_state(node: InterfaceNode) -> InterfaceState:
    """Map a decoded subtree to the entity's observed attributes."""
    state = InterfaceState(name=node.name, description=node.config.description)

    if node.ipv4 is not None and node.ipv4.enabled is not None:
        state.switchport = not node.ipv4.enabled
    elif node.switched_vlan is not None:
        state.switchport = True

    if node.switched_vlan is not None:
        state.access_vlan = node.switched_vlan.access_vlan
        state.trunk_vlans = list(node.switched_vlan.trunk_vlans)

    if node.ipv4 is not None and node.ipv4.addresses:
        first = node.ipv4.addresses[0]
        state.ipv4_address = f"{first.ip}/{first.prefix_length}"

    return state


def read_interface_state(
    response: GetResponse,
    name: str,
    paths: PathTable = DEFAULT_PATHS,
) -> InterfaceState:
    """Parse *response* and return the observed state of interface *name*."""
    return extract_state(parse_get_response(response, name, paths))


def _unwrap_root(value: dict[str, object]) -> object:
    for key, inner in value.items():
        if key.rsplit(":", 1)[-1] == "interfaces":
            return inner
    return value


def _merge_update(
    node: InterfaceNode,
    full: str,
    value: Any,
    name: str,
    paths: PathTable,
    config_path: str,
) -> None:
    """Merge one decoded update at *full* into *node* by its path group."""
    group = paths.match(full, name)
    if group == "global":
        load_interface(value, node, name)
    elif group == "description":
        load_description(value, node)
    elif group == "vlan":
        load_switched_vlan(value, node)
    elif group == "ipv4":
        load_ipv4(value, node)
    elif full == config_path:
        load_config(value, node)
    elif full in ("/", "/interfaces"):
        if full == "/" and isinstance(value, dict):
            value = _unwrap_root(value)
        load_interface(value, node, name)
    else:
        logger.debug("Skipping update outside interface %s: %s", name, full)
