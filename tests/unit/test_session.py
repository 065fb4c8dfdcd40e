"""Unit tests for napalm_gnmi.client.session and napalm_gnmi.client.errors."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import grpc
import pytest

import napalm_gnmi.client.session as session_mod
from napalm_gnmi.client.context import CallContext
from napalm_gnmi.client.errors import (
    GnmiCancelledError,
    GnmiDeleteError,
    GnmiError,
    GnmiSerializationError,
    GnmiTransportError,
)
from napalm_gnmi.client.session import GnmiCredentials, GnmiSession
from napalm_gnmi.model.gnmi import Operation

HOST = "192.0.2.10"
CREDS = GnmiCredentials(username="admin", password="secret")
IF_PATH = "/interfaces/interface[name=Ethernet1]"
DESC_PATH = IF_PATH + "/config/description"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture()
def client(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Patch gNMIclient and return the instance every session will use."""
    instance = MagicMock()
    factory = MagicMock(return_value=instance)
    monkeypatch.setattr(session_mod, "gNMIclient", factory)
    instance.factory = factory
    return instance


def _make_session(**kwargs: object) -> GnmiSession:
    return GnmiSession(host=HOST, credentials=CREDS, **kwargs)  # type: ignore[arg-type]


def _connected(**kwargs: object) -> GnmiSession:
    session = _make_session(**kwargs)
    session.connect()
    return session


# ---------------------------------------------------------------------------
# errors.py
# ---------------------------------------------------------------------------

def test_transport_error_message() -> None:
    err = GnmiTransportError("replace", DESC_PATH, RuntimeError("boom"))
    assert "replace" in str(err)
    assert DESC_PATH in str(err)
    assert "boom" in str(err)
    assert isinstance(err, GnmiError)


def test_delete_error_message() -> None:
    err = GnmiDeleteError(group="vlan", path="/p", deleted=["/d"], cause=RuntimeError("x"))
    assert "vlan" in str(err)
    assert "1 path(s) already deleted" in str(err)
    assert isinstance(err, GnmiError)


# ---------------------------------------------------------------------------
# connect / close
# ---------------------------------------------------------------------------

def test_connect_plaintext_defaults(client: MagicMock) -> None:
    session = _connected()
    kwargs = client.factory.call_args.kwargs
    assert kwargs["target"] == (HOST, 6030)
    assert kwargs["username"] == "admin"
    assert kwargs["password"] == "secret"
    assert kwargs["insecure"] is True
    assert kwargs["gnmi_timeout"] == 30
    assert "path_root" not in kwargs
    client.connect.assert_called_once()
    assert session.connected is True
    assert session.target == f"{HOST}:6030"


def test_connect_tls_passes_certificates(client: MagicMock) -> None:
    _connected(tls=True, port=57400, path_root="/ca.pem", override="sw1")
    kwargs = client.factory.call_args.kwargs
    assert kwargs["target"] == (HOST, 57400)
    assert kwargs["insecure"] is False
    assert kwargs["path_root"] == "/ca.pem"
    assert kwargs["override"] == "sw1"
    assert "path_key" not in kwargs


def test_connect_failure_raises_transport_error(client: MagicMock) -> None:
    client.connect.side_effect = grpc.FutureTimeoutError()
    session = _make_session()
    with pytest.raises(GnmiTransportError) as excinfo:
        session.connect()
    assert excinfo.value.kind == "connect"
    assert session.connected is False


def test_close(client: MagicMock) -> None:
    session = _connected()
    session.close()
    client.close.assert_called_once()
    assert session.connected is False


def test_close_without_connect_is_noop(client: MagicMock) -> None:
    _make_session().close()
    client.close.assert_not_called()


def test_context_manager(client: MagicMock) -> None:
    with _make_session() as session:
        assert session.connected is True
    client.close.assert_called_once()


def test_ensure_connected_connects_lazily(client: MagicMock) -> None:
    session = _make_session()
    assert session.ensure_connected() is client
    assert session.ensure_connected() is client
    client.connect.assert_called_once()


# ---------------------------------------------------------------------------
# get
# ---------------------------------------------------------------------------

def test_get_converts_notifications(client: MagicMock) -> None:
    client.get.return_value = {
        "notification": [
            {
                "prefix": "openconfig-interfaces:interfaces",
                "update": [
                    {"path": "interface[name=Ethernet1]/config", "val": {"description": "x"}},
                    {"path": "interface[name=Ethernet1]/config/description", "val": "x"},
                ],
            }
        ]
    }
    response = _connected().get(CallContext(), [IF_PATH])
    client.get.assert_called_once_with(path=[IF_PATH], encoding="json_ietf")
    notif = response.notifications[0]
    assert notif.prefix == "openconfig-interfaces:interfaces"
    assert [u.path for u in notif.updates] == [
        "interface[name=Ethernet1]/config",
        "interface[name=Ethernet1]/config/description",
    ]
    assert json.loads(notif.updates[0].value) == {"description": "x"}
    assert json.loads(notif.updates[1].value) == "x"


def test_get_empty_result(client: MagicMock) -> None:
    client.get.return_value = None
    assert _connected().get(CallContext(), [IF_PATH]).notifications == []


def test_get_rpc_error(client: MagicMock) -> None:
    client.get.side_effect = grpc.RpcError()
    with pytest.raises(GnmiTransportError) as excinfo:
        _connected().get(CallContext(), [IF_PATH])
    assert excinfo.value.kind == "get"
    assert excinfo.value.path == IF_PATH


def test_get_cancelled_before_call(client: MagicMock) -> None:
    ctx = CallContext()
    ctx.cancel()
    with pytest.raises(GnmiCancelledError):
        _connected().get(ctx, [IF_PATH])
    client.get.assert_not_called()


def test_get_cancelled_during_call_fails(client: MagicMock) -> None:
    ctx = CallContext()

    def _slow_get(**_: object) -> dict[str, object]:
        ctx.cancel()
        return {"notification": []}

    client.get.side_effect = _slow_get
    with pytest.raises(GnmiCancelledError):
        _connected().get(ctx, [IF_PATH])


# ---------------------------------------------------------------------------
# set
# ---------------------------------------------------------------------------

def test_set_replace_sends_decoded_value(client: MagicMock) -> None:
    _connected().set(CallContext(), [Operation("replace", DESC_PATH, '"uplink"')])
    client.set.assert_called_once_with(encoding="json_ietf", replace=[(DESC_PATH, "uplink")])


def test_set_update_and_delete(client: MagicMock) -> None:
    ops = [
        Operation("delete", DESC_PATH),
        Operation("update", IF_PATH, json.dumps({"openconfig-interfaces:name": "Ethernet1"})),
    ]
    _connected().set(CallContext(), ops)
    client.set.assert_called_once_with(
        encoding="json_ietf",
        delete=[DESC_PATH],
        update=[(IF_PATH, {"openconfig-interfaces:name": "Ethernet1"})],
    )


def test_set_nothing_is_noop(client: MagicMock) -> None:
    _connected().set(CallContext(), [])
    client.set.assert_not_called()


def test_set_missing_value(client: MagicMock) -> None:
    with pytest.raises(GnmiSerializationError, match="no value"):
        _connected().set(CallContext(), [Operation("replace", DESC_PATH)])
    client.set.assert_not_called()


def test_set_invalid_json_value(client: MagicMock) -> None:
    with pytest.raises(GnmiSerializationError, match="invalid JSON"):
        _connected().set(CallContext(), [Operation("update", IF_PATH, "{oops")])


def test_set_rpc_error_carries_kind_and_path(client: MagicMock) -> None:
    client.set.side_effect = grpc.RpcError()
    with pytest.raises(GnmiTransportError) as excinfo:
        _connected().set(CallContext(), [Operation("delete", DESC_PATH)])
    assert excinfo.value.kind == "delete"
    assert excinfo.value.path == DESC_PATH


def test_set_past_deadline(client: MagicMock) -> None:
    with pytest.raises(GnmiCancelledError, match="deadline exceeded"):
        _connected().set(CallContext(timeout_s=0), [Operation("delete", DESC_PATH)])
    client.set.assert_not_called()
