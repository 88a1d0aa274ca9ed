from __future__ import annotations

import threading
from contextlib import AbstractContextManager, nullcontext
from enum import Enum


class LockMode(Enum):
    """Select locking behavior for registry access and injection.

    The container is built for a single thread of control. Pick ``THREAD``
    when several threads resolve or inject through the same container.
    """

    THREAD = "thread"
    """Guard ``set``/``get``/``once`` and the injection marker with one ``threading.RLock``."""

    NONE = "none"
    """Disable locking."""

    def create_lock(self) -> AbstractContextManager[object]:
        """Return the lock object used for this mode.

        The lock is re-entrant because providers resolve and inject other
        names while the lock is held.
        """
        if self is LockMode.THREAD:
            return threading.RLock()
        return nullcontext()
