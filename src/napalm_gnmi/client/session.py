"""gNMI session to a single device.

:class:`GnmiTransport` is the narrow interface the reconciler depends on;
:class:`GnmiSession` implements it on top of :class:`pygnmi.client.gNMIclient`.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import grpc
from pygnmi.client import gNMIclient, gNMIException

from napalm_gnmi.client.context import CallContext
from napalm_gnmi.client.errors import GnmiSerializationError, GnmiTransportError
from napalm_gnmi.model.gnmi import GetResponse, Notification, Operation, Update
from napalm_gnmi.vendor.openconfig.modules import ENCODING

logger = logging.getLogger(__name__)

_GRPC_ERRORS: tuple[type[Exception], ...] = (gNMIException, grpc.RpcError, grpc.FutureTimeoutError)


class GnmiTransport(Protocol):
    """Blocking gNMI Get/Set used by the reconciler."""

    def get(self, ctx: CallContext, paths: list[str]) -> GetResponse:
        ...

    def set(self, ctx: CallContext, operations: list[Operation]) -> None:
        ...


@dataclass(frozen=True)
class GnmiCredentials:
    """Immutable credential pair for a gNMI target.

    Args:
        username: Login username.
        password: Login password.
    """

    username: str
    password: str


class GnmiSession:
    """Manages one gNMI channel to a device.

    The channel is opened by :meth:`connect` and reused for every call until
    :meth:`close`.  Calls are not retried; every failure surfaces as
    :exc:`.GnmiTransportError`.

    Args:
        host: Device address.
        port: gNMI port (default 6030).
        credentials: Username/password pair.
        timeout_s: Connect and RPC timeout in seconds (default 30).
        tls: Use TLS; ``False`` opens a plaintext channel (default).
        path_root: CA certificate file for TLS.
        path_cert: Client certificate file for TLS.
        path_key: Client key file for TLS.
        override: TLS server name override.
    """

    def __init__(
        self,
        host: str,
        credentials: GnmiCredentials,
        port: int = 6030,
        timeout_s: float = 30.0,
        tls: bool = False,
        path_root: str | None = None,
        path_cert: str | None = None,
        path_key: str | None = None,
        override: str | None = None,
    ) -> None:
        self.host: str = host
        self.port: int = port
        self.timeout_s: float = timeout_s
        self._credentials: GnmiCredentials = credentials
        self._tls: bool = tls
        self._tls_files: dict[str, str] = {
            k: v
            for k, v in (
                ("path_root", path_root),
                ("path_cert", path_cert),
                ("path_key", path_key),
                ("override", override),
            )
            if v is not None
        }
        self._client: gNMIclient | None = None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Open the gNMI channel.

        Raises:
            GnmiTransportError: If the device cannot be reached.
        """
        client = gNMIclient(
            target=(self.host, self.port),
            username=self._credentials.username,
            password=self._credentials.password,
            insecure=not self._tls,
            gnmi_timeout=int(self.timeout_s),
            **self._tls_files,
        )
        try:
            client.connect()
        except _GRPC_ERRORS as exc:
            raise GnmiTransportError("connect", self.target, exc) from exc
        self._client = client
        logger.debug("Connected to %s", self.target)

    def close(self) -> None:
        """Close the gNMI channel."""
        if self._client is not None:
            try:
                self._client.close()
            finally:
                self._client = None
                logger.debug("Disconnected from %s", self.target)

    def ensure_connected(self) -> gNMIclient:
        """Connect if needed and return the underlying client."""
        if self._client is None:
            self.connect()
        assert self._client is not None
        return self._client

    # ------------------------------------------------------------------
    # GnmiTransport
    # ------------------------------------------------------------------

    def get(self, ctx: CallContext, paths: list[str]) -> GetResponse:
        """Issue a Get for *paths* and return the decoded response.

        Each update value is re-serialized to a JSON document so the caller
        decodes every fragment the same way.

        Raises:
            GnmiCancelledError: If *ctx* is cancelled before or during the call.
            GnmiTransportError: If the Get fails.
        """
        joined = ", ".join(paths)
        ctx.check("get", joined)
        client = self.ensure_connected()
        try:
            raw: dict[str, Any] = client.get(path=list(paths), encoding=ENCODING)
        except _GRPC_ERRORS as exc:
            raise GnmiTransportError("get", joined, exc) from exc
        ctx.check("get", joined)
        return _to_get_response(raw or {})

    def set(self, ctx: CallContext, operations: list[Operation]) -> None:
        """Send *operations* in one Set request.

        Raises:
            GnmiCancelledError: If *ctx* is cancelled before or during the call.
            GnmiSerializationError: If an update/replace carries no value.
            GnmiTransportError: If the Set fails.
        """
        if not operations:
            return
        kind = operations[0].kind if len(operations) == 1 else "set"
        joined = ", ".join(op.path for op in operations)
        ctx.check(kind, joined)

        delete: list[str] = []
        replace: list[tuple[str, Any]] = []
        update: list[tuple[str, Any]] = []
        for op in operations:
            if op.kind == "delete":
                delete.append(op.path)
                continue
            if op.value is None:
                raise GnmiSerializationError(f"{op.kind} of {op.path!r} has no value to send")
            try:
                value = json.loads(op.value)
            except ValueError as exc:
                raise GnmiSerializationError(
                    f"{op.kind} of {op.path!r} carries invalid JSON: {op.value[:200]!r}"
                ) from exc
            (replace if op.kind == "replace" else update).append((op.path, value))

        kwargs: dict[str, Any] = {"encoding": ENCODING}
        if delete:
            kwargs["delete"] = delete
        if replace:
            kwargs["replace"] = replace
        if update:
            kwargs["update"] = update

        client = self.ensure_connected()
        logger.debug("Set on %s: %s", self.target, joined)
        try:
            client.set(**kwargs)
        except _GRPC_ERRORS as exc:
            raise GnmiTransportError(kind, joined, exc) from exc
        ctx.check(kind, joined)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def connected(self) -> bool:
        """True while the channel is open."""
        return self._client is not None

    @property
    def target(self) -> str:
        return f"{self.host}:{self.port}"

    def __enter__(self) -> GnmiSession:
        self.connect()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def _to_get_response(raw: dict[str, Any]) -> GetResponse:
    """Convert pygnmi's Get result dict into a :class:`GetResponse`."""
    notifications: list[Notification] = []
    for notif in raw.get("notification", []):
        updates = [
            Update(path=str(u.get("path", "")), value=json.dumps(u.get("val")))
            for u in notif.get("update", [])
        ]
        notifications.append(Notification(prefix=notif.get("prefix"), updates=updates))
    return GetResponse(notifications=notifications)
