"""Event Channel - single-slot push surface for connectivity snapshots."""

import threading
from typing import Callable, Optional

from loguru import logger

from netclass.core.constants import EVENT_CHANNEL


class EventChannel:
    """
    Holds at most one listener and forwards payloads to it.

    Sending with no listener attached is a no-op. Listener failures are
    logged and swallowed so a departed subscriber never breaks the sender.
    Listening and cancelling never affect whether monitoring runs.
    """

    def __init__(self, name: str = EVENT_CHANNEL):
        self.name = name
        self._sink: Optional[Callable[[dict], None]] = None
        self._lock = threading.Lock()

    def listen(self, sink: Callable[[dict], None]) -> None:
        """Attach a listener, replacing any previous one."""
        with self._lock:
            self._sink = sink
        logger.debug(f"[EventChannel] Listener attached on '{self.name}'")

    def cancel(self) -> None:
        """Detach the current listener, if any."""
        with self._lock:
            self._sink = None
        logger.debug(f"[EventChannel] Listener detached from '{self.name}'")

    @property
    def has_listener(self) -> bool:
        with self._lock:
            return self._sink is not None

    def send(self, payload: dict) -> bool:
        """
        Deliver a payload to the listener.

        Returns:
            True if a listener accepted the payload, False otherwise
        """
        with self._lock:
            sink = self._sink

        if sink is None:
            return False

        try:
            sink(payload)
            return True
        except Exception as e:
            logger.debug(f"[EventChannel] Delivery on '{self.name}' failed: {e}")
            return False
