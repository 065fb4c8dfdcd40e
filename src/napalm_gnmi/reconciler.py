"""Interface lifecycle reconciler.

Drives one interface through ``absent -> creating -> present -> updating ->
present -> deleting -> absent`` against a single gNMI transport.  Every call
plans first (so validation and serialization errors surface before the device
is touched), then sends the plan one Set at a time, then re-reads the
interface to refresh its observed state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from napalm_gnmi.client.context import CallContext
from napalm_gnmi.client.errors import GnmiError, GnmiValidationError
from napalm_gnmi.client.interface_ops import apply_operations, delete_groups
from napalm_gnmi.client.session import GnmiTransport
from napalm_gnmi.model.gnmi import Operation
from napalm_gnmi.model.interface import (
    InterfaceConfig,
    InterfaceResource,
    InterfaceState,
    LifecycleState,
)
from napalm_gnmi.parser.interface import read_interface_state
from napalm_gnmi.utils.interface_diff import (
    InterfacePlan,
    plan_create,
    plan_delete,
    plan_update,
)
from napalm_gnmi.vendor.openconfig.paths import DEFAULT_PATHS, PathTable

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Outcome of one mutating lifecycle call.

    Attributes:
        resource: Updated lifecycle record.
        plan: Plan that was applied.
        applied: Operations acknowledged by the device.
        stale: ``True`` if the follow-up read failed, so
            ``resource.observed`` may not reflect the device.
        read_error: The follow-up read failure, if any.
    """

    resource: InterfaceResource
    plan: InterfacePlan
    applied: list[Operation] = field(default_factory=list)
    stale: bool = False
    read_error: GnmiError | None = None


class InterfaceReconciler:
    """Create, read, update and delete one interface at a time.

    The reconciler holds no per-interface state between calls; everything it
    knows about an interface comes in and goes out through
    :class:`~napalm_gnmi.model.interface.InterfaceResource`.  Calls are
    sequential and never retried.

    Args:
        transport: Open gNMI transport shared by all calls.
        paths: Path table, built once and shared.
    """

    def __init__(self, transport: GnmiTransport, paths: PathTable = DEFAULT_PATHS) -> None:
        self._transport = transport
        self._paths = paths

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create(self, desired: InterfaceConfig, ctx: CallContext | None = None) -> ReconcileResult:
        """Create *desired* with a single update of the whole interface.

        Raises:
            GnmiValidationError: If *desired* cannot be assembled.
            GnmiTransportError: If the Set fails; the interface stays absent.
        """
        ctx = ctx or CallContext()
        resource = InterfaceResource(name=desired.name)
        plan = plan_create(desired, self._paths)

        self._transition(resource, "creating")
        try:
            applied = apply_operations(self._transport, ctx, plan.operations)
        except GnmiError:
            self._transition(resource, "absent")
            raise
        resource.id = desired.name
        self._transition(resource, "present")
        logger.info("Created interface %s", desired.name)

        result = ReconcileResult(resource=resource, plan=plan, applied=applied)
        self._refresh(result, ctx)
        return result

    def read(self, resource: InterfaceResource, ctx: CallContext | None = None) -> InterfaceState:
        """Get the interface and store its observed state on *resource*.

        On failure *resource* is left untouched.

        Raises:
            GnmiTransportError: If the Get fails.
            GnmiDecodeError: If the response cannot be decoded.
        """
        ctx = ctx or CallContext()
        name = resource.id or resource.name
        response = self._transport.get(ctx, [self._paths.resolve("global", name)])
        observed = read_interface_state(response, name, self._paths)
        resource.observed = observed
        self._transition(resource, "present")
        return observed

    def update(
        self,
        resource: InterfaceResource,
        desired: InterfaceConfig,
        ctx: CallContext | None = None,
        current: InterfaceConfig | InterfaceState | None = None,
    ) -> ReconcileResult:
        """Apply the changes between *current* and *desired*.

        Args:
            resource: Record of a present interface.
            desired: New declaration.
            ctx: Call context.
            current: Attributes to diff against; defaults to
                ``resource.observed``.

        Raises:
            GnmiValidationError: If the interface is absent, nothing is
                recorded to diff against, or *desired* is invalid.
            GnmiTransportError: On the first failing Set; operations already
                sent stay applied.
        """
        ctx = ctx or CallContext()
        if resource.state == "absent":
            raise GnmiValidationError(f"Interface {resource.name} is absent; create it first")
        if current is None:
            current = resource.observed
        if current is None:
            raise GnmiValidationError(
                f"No recorded state for {resource.name}; read the interface before updating"
            )

        plan = plan_update(current, desired, self._paths)
        result = ReconcileResult(resource=resource, plan=plan)
        if not plan.operations:
            logger.debug("Interface %s already up to date", desired.name)
            return result

        self._transition(resource, "updating")
        try:
            result.applied = apply_operations(self._transport, ctx, plan.operations)
        except GnmiError:
            self._transition(resource, "present")
            raise
        self._transition(resource, "present")
        logger.info("Updated interface %s: %s", desired.name, plan.summary)

        self._refresh(result, ctx)
        return result

    def delete(self, resource: InterfaceResource, ctx: CallContext | None = None) -> ReconcileResult:
        """Delete every attribute group of the interface.

        The interface entry itself is left in place.

        Raises:
            GnmiDeleteError: If a group delete fails; the record stays in
                ``deleting`` and the delete can be re-run.
        """
        ctx = ctx or CallContext()
        name = resource.id or resource.name
        plan = plan_delete(name, self._paths)

        self._transition(resource, "deleting")
        delete_groups(self._transport, ctx, plan.operations)
        resource.id = None
        resource.observed = None
        self._transition(resource, "absent")
        logger.info("Deleted interface %s", name)
        return ReconcileResult(resource=resource, plan=plan, applied=list(plan.operations))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _refresh(self, result: ReconcileResult, ctx: CallContext) -> None:
        """Re-read after a successful apply; a failure only marks state stale."""
        try:
            self.read(result.resource, ctx)
        except GnmiError as exc:
            result.stale = True
            result.read_error = exc
            logger.warning(
                "Changes to %s were applied but the follow-up read failed; "
                "observed state may be stale: %s",
                result.resource.name,
                exc,
            )

    @staticmethod
    def _transition(resource: InterfaceResource, state: LifecycleState) -> None:
        logger.debug("Interface %s: %s -> %s", resource.name, resource.state, state)
        resource.state = state
