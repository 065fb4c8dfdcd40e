"""Send planned interface operations through a gNMI transport.

Each operation goes out in its own Set request and must succeed before the
next one is sent.  The ipv4 delete/replace pair targets the same path, so the
delete has to be acknowledged before the replace is issued.
"""

from __future__ import annotations

import logging

from napalm_gnmi.client.context import CallContext
from napalm_gnmi.client.errors import GnmiDeleteError, GnmiError
from napalm_gnmi.client.session import GnmiTransport
from napalm_gnmi.model.gnmi import Operation

logger = logging.getLogger(__name__)


def apply_operations(
    transport: GnmiTransport,
    ctx: CallContext,
    operations: list[Operation],
) -> list[Operation]:
    """Send *operations* one Set at a time, in order.

    Args:
        transport: Open gNMI transport.
        ctx: Call context checked before every Set.
        operations: Operations in apply order.

    Returns:
        The operations that were applied (all of them on success).

    Raises:
        GnmiCancelledError: If *ctx* is cancelled between operations.
        GnmiTransportError: On the first failing Set; later operations are
            not sent.
    """
    applied: list[Operation] = []
    for op in operations:
        ctx.check(op.kind, op.path)
        transport.set(ctx, [op])
        applied.append(op)
        logger.info("Applied %s on %s", op.kind, op.path)
    return applied


def delete_groups(
    transport: GnmiTransport,
    ctx: CallContext,
    operations: list[Operation],
) -> list[str]:
    """Send group ``delete`` operations, reporting which group failed.

    Returns:
        Paths deleted, in order.

    Raises:
        GnmiDeleteError: On the first failing delete, carrying the group,
            its path and the paths already deleted.
    """
    deleted: list[str] = []
    for op in operations:
        try:
            ctx.check(op.kind, op.path)
            transport.set(ctx, [op])
        except GnmiError as exc:
            raise GnmiDeleteError(
                group=op.group or "unknown",
                path=op.path,
                deleted=list(deleted),
                cause=exc,
            ) from exc
        deleted.append(op.path)
        logger.info("Deleted %s path %s", op.group, op.path)
    return deleted
