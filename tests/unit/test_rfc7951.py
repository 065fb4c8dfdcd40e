"""Unit tests for napalm_gnmi.codec.rfc7951 and the tree node emitters."""

from __future__ import annotations

import json

import pytest

from napalm_gnmi.client.errors import GnmiDecodeError, GnmiSerializationError
from napalm_gnmi.codec.rfc7951 import (
    decode_document,
    emit_json,
    load_description,
    load_interface,
    load_ipv4,
    load_switched_vlan,
)
from napalm_gnmi.model.tree import (
    InterfaceConfigNode,
    InterfaceNode,
    Ipv4AddressNode,
    Ipv4Node,
    SwitchedVlanNode,
    YangNode,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _routed_node() -> InterfaceNode:
    return InterfaceNode(
        name="Ethernet1",
        config=InterfaceConfigNode(name="Ethernet1", description="uplink"),
        ipv4=Ipv4Node(
            enabled=True,
            addresses=[Ipv4AddressNode(ip="10.0.0.1", prefix_length=24)],
        ),
    )


def _switch_node() -> InterfaceNode:
    return InterfaceNode(
        name="Ethernet2",
        config=InterfaceConfigNode(name="Ethernet2"),
        switched_vlan=SwitchedVlanNode(trunk_vlans=[10, 20], interface_mode="TRUNK"),
        ipv4=Ipv4Node(enabled=False),
    )


# ---------------------------------------------------------------------------
# Emit
# ---------------------------------------------------------------------------

def test_nodes_satisfy_document_protocol() -> None:
    assert isinstance(_routed_node(), YangNode)
    assert isinstance(SwitchedVlanNode(), YangNode)


def test_emit_routed_interface() -> None:
    doc = json.loads(emit_json(_routed_node()))
    assert doc == {
        "openconfig-interfaces:name": "Ethernet1",
        "openconfig-interfaces:config": {"name": "Ethernet1", "description": "uplink"},
        "openconfig-interfaces:subinterfaces": {
            "subinterface": [
                {
                    "index": 0,
                    "config": {"index": 0},
                    "openconfig-if-ip:ipv4": {
                        "config": {"enabled": True},
                        "addresses": {
                            "address": [
                                {
                                    "ip": "10.0.0.1",
                                    "config": {"ip": "10.0.0.1", "prefix-length": 24},
                                }
                            ]
                        },
                    },
                }
            ]
        },
    }


def test_emit_switchport_interface() -> None:
    doc = json.loads(emit_json(_switch_node()))
    assert doc["openconfig-if-ethernet:ethernet"] == {
        "openconfig-vlan:switched-vlan": {
            "config": {
                "trunk-vlans": [10, 20],
                "arista-vlan-augments:interface-mode": "TRUNK",
            }
        }
    }
    ipv4 = doc["openconfig-interfaces:subinterfaces"]["subinterface"][0]["openconfig-if-ip:ipv4"]
    assert ipv4 == {"config": {"enabled": False}}


def test_emit_omits_absent_branches() -> None:
    node = InterfaceNode(name="Ethernet3", config=InterfaceConfigNode(name="Ethernet3"))
    doc = json.loads(emit_json(node))
    assert set(doc) == {"openconfig-interfaces:name", "openconfig-interfaces:config"}


def test_emit_standalone_vlan_node_is_qualified() -> None:
    doc = json.loads(emit_json(SwitchedVlanNode(access_vlan=10, interface_mode="ACCESS")))
    assert doc == {
        "openconfig-vlan:access-vlan": 10,
        "arista-vlan-augments:interface-mode": "ACCESS",
    }


def test_emit_standalone_ipv4_node_is_qualified() -> None:
    doc = json.loads(emit_json(Ipv4Node(enabled=True)))
    assert doc == {"openconfig-if-ip:config": {"enabled": True}}


def test_emit_is_deterministic() -> None:
    assert emit_json(_routed_node()) == emit_json(_routed_node())


def test_emit_sorts_keys() -> None:
    text = emit_json(SwitchedVlanNode(access_vlan=10, trunk_vlans=[20], interface_mode="TRUNK"))
    keys = list(json.loads(text))
    assert keys == sorted(keys)


@pytest.mark.parametrize(
    "node",
    [
        SwitchedVlanNode(access_vlan=70000),
        SwitchedVlanNode(access_vlan=-1),
        SwitchedVlanNode(trunk_vlans=[10, 65536]),
        Ipv4Node(addresses=[Ipv4AddressNode(ip="10.0.0.1", prefix_length=256)]),
        InterfaceNode(name="Ethernet1", ipv4=Ipv4Node(), subinterface_index=-1),
    ],
)
def test_emit_rejects_out_of_range_leaves(node: YangNode) -> None:
    with pytest.raises(GnmiSerializationError):
        emit_json(node)


def test_emit_rejects_bool_as_integer() -> None:
    with pytest.raises(GnmiSerializationError, match="access-vlan"):
        emit_json(SwitchedVlanNode(access_vlan=True))  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Load
# ---------------------------------------------------------------------------

def test_decode_document_invalid_json() -> None:
    with pytest.raises(GnmiDecodeError):
        decode_document("{not json")


def test_load_interface_reverses_emit() -> None:
    for original in (_routed_node(), _switch_node()):
        decoded = load_interface(json.loads(emit_json(original)), name=original.name)
        assert decoded == original


def test_load_interface_accepts_bare_names() -> None:
    node = load_interface(
        {"name": "Ethernet1", "config": {"name": "Ethernet1", "description": "x"}},
        name="Ethernet1",
    )
    assert node.config.description == "x"


def test_load_interface_picks_named_entry_from_wrapper() -> None:
    value = {
        "openconfig-interfaces:interface": [
            {"name": "Ethernet1", "config": {"description": "one"}},
            {"name": "Ethernet2", "config": {"description": "two"}},
        ]
    }
    assert load_interface(value, name="Ethernet2").config.description == "two"


def test_load_interface_ignores_other_subinterfaces() -> None:
    value = {
        "subinterfaces": {
            "subinterface": [
                {"index": 1, "ipv4": {"config": {"enabled": True}}},
                {"index": "0", "ipv4": {"config": {"enabled": False}}},
            ]
        }
    }
    node = load_interface(value, name="Ethernet1")
    assert node.ipv4 == Ipv4Node(enabled=False)


def test_load_interface_rejects_non_object() -> None:
    with pytest.raises(GnmiDecodeError):
        load_interface(["not", "an", "object"], name="Ethernet1")


def test_load_merges_into_existing_node() -> None:
    node = _routed_node()
    load_description("new", node)
    assert node.config.description == "new"
    assert node.ipv4 is not None and node.ipv4.addresses


def test_load_description_wrapped() -> None:
    node = InterfaceNode(name="Ethernet1")
    load_description({"openconfig-interfaces:description": "core"}, node)
    assert node.config.description == "core"


def test_load_description_rejects_number() -> None:
    with pytest.raises(GnmiDecodeError):
        load_description(5, InterfaceNode(name="Ethernet1"))


def test_load_switched_vlan_ranges_and_identity_prefix() -> None:
    node = InterfaceNode(name="Ethernet1")
    load_switched_vlan(
        {
            "openconfig-vlan:config": {
                "trunk-vlans": [5, "10..12", "20"],
                "interface-mode": "openconfig-vlan-types:TRUNK",
            }
        },
        node,
    )
    assert node.switched_vlan == SwitchedVlanNode(
        trunk_vlans=[5, 10, 11, 12, 20], interface_mode="TRUNK"
    )


def test_load_switched_vlan_reversed_range_rejected() -> None:
    with pytest.raises(GnmiDecodeError, match="30..10"):
        load_switched_vlan({"trunk-vlans": ["30..10"]}, InterfaceNode(name="Ethernet1"))


@pytest.mark.parametrize("value", ["²", "١٢"])
def test_non_ascii_digits_rejected(value: str) -> None:
    with pytest.raises(GnmiDecodeError):
        load_ipv4(
            {"addresses": {"address": [{"config": {"ip": "10.0.0.1", "prefix-length": value}}]}},
            InterfaceNode(name="Ethernet1"),
        )


def test_non_ascii_digit_range_rejected() -> None:
    with pytest.raises(GnmiDecodeError):
        load_switched_vlan({"trunk-vlans": ["١..٣"]}, InterfaceNode(name="Ethernet1"))


def test_load_switched_vlan_rejects_bool() -> None:
    with pytest.raises(GnmiDecodeError):
        load_switched_vlan({"access-vlan": True}, InterfaceNode(name="Ethernet1"))


def test_load_ipv4_replaces_address_list() -> None:
    node = _routed_node()
    load_ipv4(
        {
            "openconfig-if-ip:addresses": {
                "address": [{"ip": "192.0.2.1", "config": {"ip": "192.0.2.1", "prefix-length": 30}}]
            }
        },
        node,
    )
    assert node.ipv4 == Ipv4Node(
        enabled=True, addresses=[Ipv4AddressNode(ip="192.0.2.1", prefix_length=30)]
    )


def test_load_ipv4_enabled_must_be_boolean() -> None:
    with pytest.raises(GnmiDecodeError, match="enabled"):
        load_ipv4({"config": {"enabled": "true"}}, InterfaceNode(name="Ethernet1"))


def test_load_ipv4_address_requires_prefix() -> None:
    with pytest.raises(GnmiDecodeError, match="prefix-length"):
        load_ipv4(
            {"addresses": {"address": [{"ip": "10.0.0.1"}]}},
            InterfaceNode(name="Ethernet1"),
        )
