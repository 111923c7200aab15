"""Guard against running server lookups on the foreground thread."""

import threading
from typing import Optional


class WrongThreadError(RuntimeError):
    """Raised when a background-only operation is called on the foreground thread."""

    pass


class ThreadGuard:
    """Asserts that the caller is not on the registered foreground thread.

    Hosts with a UI loop register that thread; lookups that perform network
    I/O must then be dispatched elsewhere. With no foreground thread
    registered, every thread is allowed.
    """

    def __init__(self, foreground_thread: Optional[threading.Thread] = None):
        self.foreground_thread = foreground_thread

    def assert_background_thread(self) -> None:
        """Raise WrongThreadError if called from the foreground thread."""
        if self.foreground_thread is None:
            return

        if threading.current_thread() is self.foreground_thread:
            raise WrongThreadError(
                f"This operation must not run on the foreground thread "
                f"'{self.foreground_thread.name}'"
            )
