"""gNMI NAPALM driver — top-level NetworkDriver implementation."""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from napalm.base.base import NetworkDriver

from napalm_gnmi.client.context import CallContext
from napalm_gnmi.client.errors import GnmiSessionError, GnmiValidationError
from napalm_gnmi.client.session import GnmiCredentials, GnmiSession
from napalm_gnmi.model.interface import InterfaceConfig, InterfaceResource, InterfaceState
from napalm_gnmi.reconciler import InterfaceReconciler, ReconcileResult
from napalm_gnmi.utils.interface_diff import (
    InterfacePlan,
    plan_create,
    plan_delete,
    plan_update,
)
from napalm_gnmi.utils.render import render_plan
from napalm_gnmi.vendor.openconfig.paths import DEFAULT_PATHS

logger = logging.getLogger(__name__)

_DEFAULT_PORT: int = 6030


class GnmiDriver(NetworkDriver):  # type: ignore[misc]
    """NAPALM driver managing OpenConfig interfaces over gNMI.

    Args:
        hostname: IP address or hostname of the device.
        username: Login username.
        password: Login password.
        timeout: Connect timeout and default per-call deadline in seconds.
        optional_args: Optional driver configuration overrides.
            Supported keys:

            - ``port`` (int): gNMI port (default 6030).
            - ``tls`` (bool): Use a TLS channel (default ``False``).
            - ``path_root`` / ``path_cert`` / ``path_key`` (str): TLS
              certificate files.
            - ``override`` (str): TLS server name override.
    """

    def __init__(
        self,
        hostname: str,
        username: str,
        password: str,
        timeout: int = 60,
        optional_args: dict[str, Any] | None = None,
    ) -> None:
        self.hostname = hostname
        self.username = username
        self.password = password
        self.timeout = timeout
        self.optional_args: dict[str, Any] = optional_args or {}

        self._port: int = int(self.optional_args.get("port", _DEFAULT_PORT))
        self._tls: bool = bool(self.optional_args.get("tls", False))
        self._paths = DEFAULT_PATHS
        self._session: GnmiSession | None = None
        self._reconciler: InterfaceReconciler | None = None

        logger.debug(
            "GnmiDriver initialised: host=%s port=%d user=%s tls=%s",
            self.hostname,
            self._port,
            self.username,
            self._tls,
        )

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Open the gNMI channel to the device.

        Raises:
            GnmiTransportError: If the device cannot be reached.
        """
        logger.info("Opening gNMI connection to %s:%d", self.hostname, self._port)
        session = GnmiSession(
            host=self.hostname,
            port=self._port,
            credentials=GnmiCredentials(username=self.username, password=self.password),
            timeout_s=float(self.timeout),
            tls=self._tls,
            path_root=self.optional_args.get("path_root"),
            path_cert=self.optional_args.get("path_cert"),
            path_key=self.optional_args.get("path_key"),
            override=self.optional_args.get("override"),
        )
        session.connect()
        self._session = session
        self._reconciler = InterfaceReconciler(session, self._paths)

    def close(self) -> None:
        """Close the gNMI channel (best-effort; never raises)."""
        if self._session is not None:
            logger.info("Closing connection to %s", self.hostname)
            try:
                self._session.close()
            except Exception:  # noqa: BLE001
                logger.debug("Session close failed (ignored)", exc_info=True)
            finally:
                self._session = None
                self._reconciler = None

    def is_alive(self) -> dict[str, bool]:
        """Return liveness status of the gNMI channel."""
        return {"is_alive": bool(self._session is not None and self._session.connected)}

    # ------------------------------------------------------------------
    # Interface lifecycle
    # ------------------------------------------------------------------

    def create_interface(
        self,
        desired: InterfaceConfig,
        *,
        check_mode: bool = False,
    ) -> dict[str, Any]:
        """Create an interface from *desired*.

        Args:
            desired: Interface declaration.
            check_mode: If ``True``, return the plan without applying it.

        Returns:
            A dict with keys:

            - ``"changed"`` — ``True`` if the device was (or would be) changed.
            - ``"diff"`` — rendered plan from :func:`~napalm_gnmi.utils.render.render_plan`.
            - ``"applied"`` — ``"kind:path"`` of each applied operation.
            - ``"stale"`` — ``True`` if the follow-up read failed.
            - ``"resource"`` — the lifecycle record (``None`` in check mode).

        Raises:
            GnmiSessionError: If the session is not open.
            GnmiValidationError: If *desired* is invalid.
            GnmiTransportError: If the Set fails.
        """
        reconciler = self._require_reconciler()
        if check_mode:
            return _check_result(plan_create(desired, self._paths))
        return _apply_result(reconciler.create(desired, self._context()))

    def read_interface(self, resource: InterfaceResource) -> dict[str, Any]:
        """Read the interface and return its observed attributes.

        *resource* is updated in place with the observed state.

        Raises:
            GnmiSessionError: If the session is not open.
            GnmiTransportError: If the Get fails.
            GnmiDecodeError: If the response cannot be decoded.
        """
        reconciler = self._require_reconciler()
        observed = reconciler.read(resource, self._context())
        return dataclasses.asdict(observed)

    def update_interface(
        self,
        resource: InterfaceResource,
        desired: InterfaceConfig,
        *,
        current: InterfaceConfig | InterfaceState | None = None,
        check_mode: bool = False,
    ) -> dict[str, Any]:
        """Move a present interface to *desired*.

        Args:
            resource: Lifecycle record of the interface.
            desired: New declaration.
            current: Attributes to diff against; defaults to the record's
                observed state.
            check_mode: If ``True``, return the plan without applying it.

        Returns:
            Same shape as :meth:`create_interface`.

        Raises:
            GnmiSessionError: If the session is not open.
            GnmiValidationError: If the change is not allowed or invalid.
            GnmiTransportError: On the first failing Set.
        """
        reconciler = self._require_reconciler()
        if check_mode:
            baseline = current if current is not None else resource.observed
            if baseline is None:
                raise GnmiValidationError(
                    f"No recorded state for {resource.name}; read the interface first"
                )
            return _check_result(plan_update(baseline, desired, self._paths))
        return _apply_result(
            reconciler.update(resource, desired, self._context(), current=current)
        )

    def delete_interface(
        self,
        resource: InterfaceResource,
        *,
        check_mode: bool = False,
    ) -> dict[str, Any]:
        """Delete the description, VLAN and IPv4 configuration of the interface.

        Returns:
            Same shape as :meth:`create_interface`.

        Raises:
            GnmiSessionError: If the session is not open.
            GnmiDeleteError: If one of the group deletes fails.
        """
        reconciler = self._require_reconciler()
        if check_mode:
            return _check_result(plan_delete(resource.id or resource.name, self._paths))
        return _apply_result(reconciler.delete(resource, self._context()))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _context(self) -> CallContext:
        return CallContext(timeout_s=float(self.timeout))

    def _require_reconciler(self) -> InterfaceReconciler:
        """Return the active reconciler or raise :exc:`.GnmiSessionError`."""
        if self._reconciler is None:
            raise GnmiSessionError("Session not open — call open() first.")
        return self._reconciler


def _check_result(plan: InterfacePlan) -> dict[str, Any]:
    return {
        "changed": bool(plan.operations),
        "diff": render_plan(plan),
        "applied": [],
        "stale": False,
        "resource": None,
    }


def _apply_result(result: ReconcileResult) -> dict[str, Any]:
    return {
        "changed": bool(result.applied),
        "diff": render_plan(result.plan),
        "applied": [f"{op.kind}:{op.path}" for op in result.applied],
        "stale": result.stale,
        "resource": result.resource,
    }
