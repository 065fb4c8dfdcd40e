"""Typed models for gNMI operations and Get responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Union

from napalm_gnmi.model.tree import YangNode

OperationKind = Literal["update", "replace", "delete"]


@dataclass(frozen=True)
class DocumentPayload:
    """Payload rendered from a subtree node as an RFC 7951 document."""

    node: YangNode


@dataclass(frozen=True)
class RawPayload:
    """Payload that is already a serialized JSON document."""

    text: str


@dataclass(frozen=True)
class NoPayload:
    """Explicitly absent payload."""


Payload = Union[DocumentPayload, RawPayload, NoPayload]


@dataclass(frozen=True)
class Operation:
    """One gNMI Set operation.

    Attributes:
        kind: ``"update"`` (merge), ``"replace"`` (overwrite subtree) or
            ``"delete"`` (remove subtree).
        path: Target gNMI string path.
        value: Serialized JSON document, or ``None`` when nothing is attached.
        group: Attribute group the path was resolved from, for reporting.
    """

    kind: OperationKind
    path: str
    value: str | None = None
    group: str | None = None


@dataclass
class Update:
    """One update of a Get notification.

    Attributes:
        path: Path relative to the notification prefix.
        value: JSON document carried by the update.
    """

    path: str
    value: str


@dataclass
class Notification:
    """One notification of a Get response."""

    prefix: str | None = None
    updates: list[Update] = field(default_factory=list)


@dataclass
class GetResponse:
    """Decoded gNMI GetResponse."""

    notifications: list[Notification] = field(default_factory=list)
