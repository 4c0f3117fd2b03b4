"""Connectivity Monitor - fixed-interval poll loop emitting snapshots on change."""

import threading
import time
from typing import Callable, Optional

from loguru import logger

from netclass.core.constants import CANCELLABLE_SLEEP, POLL_INTERVAL_MS
from netclass.core.protocols import InterfaceProvider
from netclass.core.types import ConnectivityClass, ConnectivitySnapshot
from netclass.services.classifier import classify


class ConnectivityMonitor:
    """
    Polls the platform for its interface set and pushes a snapshot whenever
    the classified connectivity changes.

    Lifecycle:
    - start() emits one snapshot synchronously, then spawns the loop
    - stop() joins the loop; nothing is emitted once it returns
    - both are idempotent and may be cycled any number of times

    The last emitted snapshot is handed to the loop thread at start and is
    only touched by that thread afterwards.
    """

    POLL_INTERVAL = POLL_INTERVAL_MS / 1000.0  # seconds between ticks

    def __init__(
        self,
        provider: InterfaceProvider,
        sink: Optional[Callable[[dict], None]] = None,
        poll_interval: Optional[float] = None,
        cancellable_sleep: bool = CANCELLABLE_SLEEP,
    ):
        """
        Initialize the monitor.

        Args:
            provider: Platform capability supplying interfaces
            sink: Receiver of snapshot records (e.g. an EventChannel)
            poll_interval: Seconds between ticks (defaults to POLL_INTERVAL)
            cancellable_sleep: Wake the loop as soon as stop() is called
                               instead of finishing the current sleep
        """
        self._provider = provider
        self._sink = sink
        self._poll_interval = poll_interval if poll_interval is not None else self.POLL_INTERVAL
        self._cancellable_sleep = cancellable_sleep

        self._lock = threading.RLock()  # Guards the running transition
        self._running = False
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self._retired_thread: Optional[threading.Thread] = None

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    def set_sink(self, sink: Optional[Callable[[dict], None]]) -> None:
        """Replace the snapshot receiver."""
        self._sink = sink

    def is_running(self) -> bool:
        """Check if monitor is currently running."""
        # Lock-free so a sink may call this while stop() is joining the loop
        return self._running

    def current_snapshot(self) -> ConnectivitySnapshot:
        """Query the platform and classify now, independent of the loop."""
        return ConnectivitySnapshot.capture(self._sample())

    def start(self) -> None:
        """Emit the current state and start the monitoring thread."""
        # A loop stopped from its own sink may still be unwinding
        retired = self._retired_thread
        if retired is not None and retired is not threading.current_thread():
            retired.join()

        with self._lock:
            if self._running:
                logger.debug("[ConnectivityMonitor] Already running")
                return

            # Published before emitting so a sink re-entering start() is a no-op
            self._running = True
            stop_event = threading.Event()
            self._stop_event = stop_event

            initial = self.current_snapshot()
            self._emit(initial)

            if stop_event.is_set():
                # The sink stopped the monitor during the initial emission
                return

            self._thread = threading.Thread(
                target=self._monitor_loop,
                args=(stop_event, initial),
                daemon=True,
                name="ConnectivityMonitor",
            )
            self._thread.start()

            logger.info(
                f"[ConnectivityMonitor] Started (interval={self._poll_interval}s, "
                f"initial={initial.network_type.value})"
            )

    def stop(self) -> None:
        """Stop the monitoring thread and wait for it to exit."""
        with self._lock:
            if not self._running:
                return

            self._running = False
            self._stop_event.set()

            thread = self._thread
            self._thread = None
            self._stop_event = None
            self._retired_thread = thread

        # Joined outside the lock so a sink calling stop() or start() cannot block it.
        # A sink stopping the monitor from inside the loop cannot join itself.
        if thread is not None and thread is not threading.current_thread():
            thread.join()
            if self._retired_thread is thread:
                self._retired_thread = None

        logger.info("[ConnectivityMonitor] Stopped")

    def close(self) -> None:
        """Release the monitor; stops the loop if it is still running."""
        self.stop()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _sample(self) -> ConnectivityClass:
        """Provider -> classifier. Platform failures read as NONE."""
        try:
            if not self._provider.has_any_connectivity():
                return ConnectivityClass.NONE
            return classify(self._provider.list_active_interfaces())
        except Exception as e:
            logger.warning(f"[ConnectivityMonitor] Interface query failed: {e}")
            return ConnectivityClass.NONE

    def _sleep(self, stop_event: threading.Event) -> None:
        if self._cancellable_sleep:
            stop_event.wait(self._poll_interval)
        else:
            time.sleep(self._poll_interval)

    def _monitor_loop(self, stop_event: threading.Event, last_snapshot: ConnectivitySnapshot):
        """Main monitoring loop."""
        while True:
            self._sleep(stop_event)
            if stop_event.is_set():
                break

            try:
                candidate = self.current_snapshot()
                if candidate.state_key() == last_snapshot.state_key():
                    continue

                logger.info(
                    f"[ConnectivityMonitor] Network changed: "
                    f"{last_snapshot.network_type.value} -> {candidate.network_type.value}"
                )
                last_snapshot = candidate

                if not stop_event.is_set():
                    self._emit(candidate)
            except Exception as e:
                logger.error(f"[ConnectivityMonitor] Error in monitor loop: {e}")

    def _emit(self, snapshot: ConnectivitySnapshot) -> None:
        """Push a snapshot to the sink; a missing or failing sink is ignored."""
        sink = self._sink
        if sink is None:
            return
        try:
            sink(snapshot.to_dict())
        except Exception as e:
            logger.debug(f"[ConnectivityMonitor] Emission dropped: {e}")
