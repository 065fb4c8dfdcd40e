"""Cancellation-capable execution context shared by every gNMI call."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field

from napalm_gnmi.client.errors import GnmiCancelledError


@dataclass
class CallContext:
    """Deadline and cancellation flag passed through every transport call.

    One context covers one lifecycle call (create, read, update or delete).
    Another thread (e.g. a timeout wrapper) may call :meth:`cancel`; the next
    check then fails the call.  A cancelled context is never reset.

    Args:
        timeout_s: Seconds from construction until the deadline, or ``None``
            for no deadline.
    """

    timeout_s: float | None = None
    _cancelled: threading.Event = field(default_factory=threading.Event, repr=False)
    _deadline: float | None = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.timeout_s is not None:
            self._deadline = time.monotonic() + self.timeout_s

    def cancel(self) -> None:
        """Cancel every current and future call made with this context."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        """True once :meth:`cancel` was called."""
        return self._cancelled.is_set()

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return self._deadline is not None and time.monotonic() >= self._deadline

    def check(self, kind: str, path: str) -> None:
        """Raise :exc:`.GnmiCancelledError` if cancelled or expired.

        Args:
            kind: Operation kind being guarded, for the error message.
            path: Path being guarded, for the error message.
        """
        if self.cancelled:
            raise GnmiCancelledError(kind, path, "cancelled")
        if self.expired:
            raise GnmiCancelledError(kind, path, "deadline exceeded")
