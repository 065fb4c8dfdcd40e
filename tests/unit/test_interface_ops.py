"""Unit tests for napalm_gnmi.client.interface_ops."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from napalm_gnmi.client.context import CallContext
from napalm_gnmi.client.errors import GnmiDeleteError, GnmiTransportError
from napalm_gnmi.client.interface_ops import apply_operations, delete_groups
from napalm_gnmi.model.gnmi import Operation

IPV4_PATH = "/interfaces/interface[name=Ethernet1]/subinterfaces/subinterface[index=0]/ipv4"
DESC_PATH = "/interfaces/interface[name=Ethernet1]/config/description"


def _ipv4_pair() -> list[Operation]:
    return [
        Operation("delete", IPV4_PATH, group="ipv4"),
        Operation("replace", IPV4_PATH, '{"openconfig-if-ip:config": {"enabled": true}}', "ipv4"),
    ]


def test_apply_sends_one_set_per_operation_in_order() -> None:
    transport = MagicMock()
    ops = _ipv4_pair()
    applied = apply_operations(transport, CallContext(), ops)
    assert applied == ops
    assert [c.args[1] for c in transport.set.call_args_list] == [[ops[0]], [ops[1]]]


def test_apply_stops_at_first_failure() -> None:
    transport = MagicMock()
    transport.set.side_effect = GnmiTransportError("delete", IPV4_PATH)
    with pytest.raises(GnmiTransportError):
        apply_operations(transport, CallContext(), _ipv4_pair())
    assert transport.set.call_count == 1


def test_apply_cancelled_between_operations() -> None:
    transport = MagicMock()
    ctx = CallContext()
    transport.set.side_effect = lambda *_: ctx.cancel()
    with pytest.raises(GnmiTransportError, match="cancelled"):
        apply_operations(transport, ctx, _ipv4_pair())
    assert transport.set.call_count == 1


def test_delete_groups_returns_deleted_paths() -> None:
    transport = MagicMock()
    ops = [Operation("delete", DESC_PATH, group="description"),
           Operation("delete", IPV4_PATH, group="ipv4")]
    assert delete_groups(transport, CallContext(), ops) == [DESC_PATH, IPV4_PATH]


def test_delete_groups_wraps_failure() -> None:
    transport = MagicMock()
    transport.set.side_effect = [None, GnmiTransportError("delete", IPV4_PATH)]
    ops = [Operation("delete", DESC_PATH, group="description"),
           Operation("delete", IPV4_PATH, group="ipv4")]
    with pytest.raises(GnmiDeleteError) as excinfo:
        delete_groups(transport, CallContext(), ops)
    assert excinfo.value.group == "ipv4"
    assert excinfo.value.deleted == [DESC_PATH]
