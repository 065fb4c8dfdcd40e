"""Build single gNMI Set operations from a kind, a path and a payload."""

from __future__ import annotations

import logging

from napalm_gnmi.client.errors import GnmiSerializationError
from napalm_gnmi.codec.rfc7951 import emit_json
from napalm_gnmi.model.gnmi import (
    DocumentPayload,
    NoPayload,
    Operation,
    OperationKind,
    Payload,
    RawPayload,
)

logger = logging.getLogger(__name__)

_KINDS: frozenset[str] = frozenset({"update", "replace", "delete"})


def build_operation(
    kind: OperationKind,
    path: str,
    payload: Payload | None = None,
    group: str | None = None,
) -> Operation:
    """Return one :class:`Operation` of *kind* at *path*.

    Args:
        kind: ``"update"``, ``"replace"`` or ``"delete"``.
        path: Target gNMI string path.
        payload: Value to attach.  Ignored for ``delete``.  A
            :class:`DocumentPayload` is emitted as RFC 7951 JSON, a
            :class:`RawPayload` is attached unchanged and :class:`NoPayload`
            (or ``None``) attaches nothing.
        group: Attribute group of *path*, carried for error reporting.

    Raises:
        ValueError: If *kind* is unknown.
        TypeError: If *payload* is not one of the payload variants.
        GnmiSerializationError: If the document cannot be emitted.
    """
    if kind not in _KINDS:
        raise ValueError(f"kind must be one of {sorted(_KINDS)}, got {kind!r}")

    value: str | None = None
    if kind != "delete":
        if isinstance(payload, DocumentPayload):
            try:
                value = emit_json(payload.node)
            except GnmiSerializationError as exc:
                raise GnmiSerializationError(f"{kind} of {path!r}: {exc}") from exc
        elif isinstance(payload, RawPayload):
            value = payload.text
        elif payload is None or isinstance(payload, NoPayload):
            value = None
        else:
            raise TypeError(f"Unsupported payload type {type(payload).__name__}")

    logger.debug("%s path %s with: %s", kind, path, value)
    return Operation(kind=kind, path=path, value=value, group=group)
