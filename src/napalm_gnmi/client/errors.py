"""Custom exceptions for napalm-gnmi."""

from __future__ import annotations

from dataclasses import dataclass, field


class GnmiError(Exception):
    """Base exception for all napalm-gnmi errors."""


class GnmiSessionError(GnmiError):
    """Raised when the driver is used without an open gNMI session."""


class GnmiValidationError(GnmiError):
    """Raised when a declared attribute cannot be turned into a subtree.

    Raised during assembly or planning, before any Set is sent.
    """


class GnmiSerializationError(GnmiError):
    """Raised when a subtree cannot be emitted as an RFC 7951 document."""


class GnmiDecodeError(GnmiError):
    """Raised when a Get response value cannot be decoded into a subtree."""


class GnmiTransportError(GnmiError):
    """Raised when a gNMI Get or Set call fails.

    Args:
        kind: Operation kind (``"get"``, ``"update"``, ``"replace"``,
            ``"delete"`` or ``"connect"``).
        path: Path (or comma-joined paths) targeted by the failed call.
        cause: Underlying exception, if any.
    """

    def __init__(self, kind: str, path: str, cause: Exception | None = None) -> None:
        self.kind = kind
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"gNMI {kind} of {path!r} failed{detail}")


class GnmiCancelledError(GnmiTransportError):
    """Raised when the call context is cancelled or past its deadline.

    A call cancelled while in flight is treated as failed, never as applied.
    """

    def __init__(self, kind: str, path: str, reason: str = "cancelled") -> None:
        self.kind = kind
        self.path = path
        self.cause = None
        self.reason = reason
        GnmiError.__init__(self, f"gNMI {kind} of {path!r} {reason}")


@dataclass(eq=False)
class GnmiDeleteError(GnmiError):
    """Raised when one group of an interface delete fails.

    The interface is left partially deleted; callers re-run the delete.

    Attributes:
        group: Attribute group whose delete failed.
        path: Path of the failed delete.
        deleted: Paths already deleted before the failure.
        cause: Underlying transport error.
    """

    group: str
    path: str
    deleted: list[str] = field(default_factory=list)
    cause: Exception | None = None

    def __post_init__(self) -> None:
        super().__init__(
            f"Failed to delete {self.group} path {self.path!r} "
            f"({len(self.deleted)} path(s) already deleted): {self.cause}"
        )
