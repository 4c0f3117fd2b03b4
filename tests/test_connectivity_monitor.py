"""Unit tests for ConnectivityMonitor."""
import threading
import time
from unittest.mock import MagicMock

import pytest

from netclass.core.types import ConnectivityClass, Medium, NetworkInterface, OperationalState
from netclass.services.connectivity_monitor import ConnectivityMonitor

FAST_INTERVAL = 0.02


def up(name, medium):
    return NetworkInterface(
        name=name,
        has_valid_address=True,
        operational_state=OperationalState.UP,
        medium_hint=medium,
    )


WIFI = [up("wlan0", Medium.WIFI)]
ETHERNET = [up("eth0", Medium.ETHERNET)]
MOBILE = [up("wwan0", Medium.MOBILE)]
NONE = []


class ScriptedProvider:
    """Returns one scripted interface list per call, repeating the last one."""

    def __init__(self, script):
        self._script = list(script)
        self._lock = threading.Lock()
        self.calls = 0
        self.exhausted = threading.Event()

    def has_any_connectivity(self):
        return True

    def list_active_interfaces(self):
        with self._lock:
            index = min(self.calls, len(self._script) - 1)
            self.calls += 1
            if self.calls >= len(self._script):
                self.exhausted.set()
            return self._script[index]


class Recorder:
    """Thread-safe sink collecting emitted records."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records = []

    def __call__(self, payload):
        with self._lock:
            self._records.append(payload)

    @property
    def records(self):
        with self._lock:
            return list(self._records)

    @property
    def types(self):
        return [r["networkType"] for r in self.records]


def run_script(script, settle_ticks=3):
    """Start a monitor over a script, wait for it to be consumed, then stop."""
    provider = ScriptedProvider(script)
    sink = Recorder()
    monitor = ConnectivityMonitor(provider, sink=sink, poll_interval=FAST_INTERVAL)

    monitor.start()
    assert provider.exhausted.wait(timeout=5)
    time.sleep(FAST_INTERVAL * settle_ticks)
    monitor.stop()
    return sink


class TestConnectivityMonitor:
    """Test suite for ConnectivityMonitor."""

    def test_initialization(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]))

        assert monitor.is_running() is False
        assert monitor.poll_interval == ConnectivityMonitor.POLL_INTERVAL
        assert monitor._thread is None

    def test_default_interval_is_one_second(self):
        assert ConnectivityMonitor.POLL_INTERVAL == pytest.approx(1.0)

    def test_start_emits_immediately(self):
        sink = Recorder()
        monitor = ConnectivityMonitor(ScriptedProvider([ETHERNET]), sink=sink, poll_interval=10)

        monitor.start()
        try:
            # Emitted synchronously, before start() returned
            assert sink.types == ["ethernet"]
            assert sink.records[0]["isConnected"] is True
            assert sink.records[0]["isWifiOrEthernet"] is True
            assert isinstance(sink.records[0]["timestamp"], int)
        finally:
            monitor.stop()

    def test_unchanged_state_is_suppressed(self):
        sink = run_script([WIFI, WIFI, ETHERNET])

        assert sink.types == ["wifi", "ethernet"]

    def test_one_notification_per_change(self):
        script = [WIFI, WIFI, ETHERNET, ETHERNET, NONE, NONE, NONE, WIFI, MOBILE, MOBILE]
        sink = run_script(script)

        assert sink.types == ["wifi", "ethernet", "none", "wifi", "mobile"]

    def test_emitted_records_are_consistent(self):
        sink = run_script([NONE, MOBILE, WIFI, ETHERNET, NONE])

        for record in sink.records:
            assert record["isConnected"] == (record["networkType"] != "none")
            assert record["isWifiOrEthernet"] == (record["networkType"] in ("wifi", "ethernet"))

    def test_start_twice_is_noop(self):
        sink = Recorder()
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), sink=sink, poll_interval=10)

        monitor.start()
        first_thread = monitor._thread
        monitor.start()
        second_thread = monitor._thread

        try:
            assert first_thread is second_thread
            assert sink.types == ["wifi"]
        finally:
            monitor.stop()

    def test_stop_twice_is_noop(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), poll_interval=FAST_INTERVAL)
        monitor.start()

        monitor.stop()
        monitor.stop()

        assert monitor.is_running() is False

    def test_stop_without_start_is_noop(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]))
        monitor.stop()
        assert monitor.is_running() is False

    def test_stop_joins_loop_thread(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), poll_interval=FAST_INTERVAL)
        monitor.start()
        thread = monitor._thread

        monitor.stop()

        assert thread.is_alive() is False
        assert monitor._thread is None

    def test_stop_is_prompt_with_cancellable_sleep(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), poll_interval=30)
        monitor.start()

        started = time.monotonic()
        monitor.stop()

        assert time.monotonic() - started < 5

    def test_stop_joins_with_plain_sleep(self):
        monitor = ConnectivityMonitor(
            ScriptedProvider([WIFI]), poll_interval=0.1, cancellable_sleep=False
        )
        monitor.start()
        thread = monitor._thread

        monitor.stop()

        assert thread.is_alive() is False

    def test_no_emissions_after_stop(self):
        script = [WIFI, ETHERNET, NONE, WIFI, ETHERNET, NONE, WIFI, ETHERNET]
        provider = ScriptedProvider(script)
        sink = Recorder()
        monitor = ConnectivityMonitor(provider, sink=sink, poll_interval=FAST_INTERVAL)

        monitor.start()
        time.sleep(FAST_INTERVAL * 2)
        monitor.stop()
        count = len(sink.records)

        time.sleep(FAST_INTERVAL * 10)
        assert len(sink.records) == count

    def test_restart_cycles(self):
        sink = Recorder()
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), sink=sink, poll_interval=FAST_INTERVAL)

        threads = []
        for _ in range(3):
            monitor.start()
            threads.append(monitor._thread)
            monitor.stop()

        # Each start emits its initial state once
        assert sink.types == ["wifi", "wifi", "wifi"]
        assert all(not t.is_alive() for t in threads)
        assert len({id(t) for t in threads}) == 3

    def test_concurrent_start_spawns_one_loop(self):
        sink = Recorder()
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), sink=sink, poll_interval=10)

        callers = [threading.Thread(target=monitor.start) for _ in range(8)]
        for t in callers:
            t.start()
        for t in callers:
            t.join()

        try:
            assert sink.types == ["wifi"]
            loops = [t for t in threading.enumerate() if t.name == "ConnectivityMonitor" and t.is_alive()]
            assert len(loops) == 1
        finally:
            monitor.stop()

    def test_sink_failure_is_swallowed(self):
        provider = ScriptedProvider([WIFI, ETHERNET, NONE])
        sink = MagicMock(side_effect=RuntimeError("subscriber gone"))
        monitor = ConnectivityMonitor(provider, sink=sink, poll_interval=FAST_INTERVAL)

        monitor.start()
        assert provider.exhausted.wait(timeout=5)
        time.sleep(FAST_INTERVAL * 3)

        # The loop survived the failing sink and kept emitting changes
        assert monitor._thread.is_alive()
        assert sink.call_count == 3
        monitor.stop()

    def test_no_sink_is_silent(self):
        provider = ScriptedProvider([WIFI, ETHERNET])
        monitor = ConnectivityMonitor(provider, poll_interval=FAST_INTERVAL)

        monitor.start()
        assert provider.exhausted.wait(timeout=5)
        monitor.stop()

    def test_sink_may_stop_monitor_from_loop(self):
        provider = ScriptedProvider([WIFI, ETHERNET])
        stopped = threading.Event()
        monitor = ConnectivityMonitor(provider, poll_interval=FAST_INTERVAL)

        def sink(payload):
            if payload["networkType"] == "ethernet":
                monitor.stop()
                stopped.set()

        monitor.set_sink(sink)
        monitor.start()

        assert stopped.wait(timeout=5)
        assert monitor.is_running() is False

    def test_owner_stop_while_sink_stops(self):
        provider = ScriptedProvider([WIFI, ETHERNET])
        in_sink = threading.Event()
        monitor = ConnectivityMonitor(provider, poll_interval=FAST_INTERVAL)

        def sink(payload):
            if payload["networkType"] == "ethernet":
                in_sink.set()
                time.sleep(0.2)
                monitor.stop()

        monitor.set_sink(sink)
        monitor.start()
        assert in_sink.wait(timeout=5)
        thread = monitor._thread

        done = threading.Event()

        def owner_stop():
            monitor.stop()
            done.set()

        threading.Thread(target=owner_stop, daemon=True).start()

        assert done.wait(timeout=3), "owner stop() did not return"
        assert monitor.is_running() is False
        assert thread.is_alive() is False

    def test_sink_restarting_during_initial_emission_keeps_one_loop(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), poll_interval=FAST_INTERVAL)
        payloads = []

        def sink(payload):
            payloads.append(payload)
            monitor.start()

        monitor.set_sink(sink)
        monitor.start()
        thread = monitor._thread

        loops = [t for t in threading.enumerate() if t.name == "ConnectivityMonitor" and t.is_alive()]
        assert loops == [thread]
        assert len(payloads) == 1

        monitor.stop()
        assert thread.is_alive() is False
        assert monitor.is_running() is False

    def test_sink_stopping_during_initial_emission_spawns_no_loop(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]), poll_interval=FAST_INTERVAL)
        monitor.set_sink(lambda payload: monitor.stop())

        monitor.start()

        assert monitor.is_running() is False
        assert monitor._thread is None

    def test_restart_after_sink_stop(self):
        provider = ScriptedProvider([WIFI, ETHERNET])
        stopped = threading.Event()
        monitor = ConnectivityMonitor(provider, poll_interval=FAST_INTERVAL)

        def sink(payload):
            if payload["networkType"] == "ethernet" and not stopped.is_set():
                monitor.stop()
                stopped.set()

        monitor.set_sink(sink)
        monitor.start()
        assert stopped.wait(timeout=5)
        retired = monitor._retired_thread

        monitor.start()
        try:
            assert retired.is_alive() is False
            assert monitor.is_running() is True
        finally:
            monitor.stop()

    def test_context_manager_stops_loop(self):
        with ConnectivityMonitor(ScriptedProvider([WIFI]), poll_interval=FAST_INTERVAL) as monitor:
            monitor.start()
            thread = monitor._thread
            assert monitor.is_running() is True

        assert monitor.is_running() is False
        assert thread.is_alive() is False


class TestCurrentSnapshot:
    """On-demand queries."""

    def test_current_snapshot_without_loop(self):
        monitor = ConnectivityMonitor(ScriptedProvider([WIFI]))

        snapshot = monitor.current_snapshot()

        assert snapshot.network_type == ConnectivityClass.WIFI
        assert monitor.is_running() is False

    def test_enumeration_failure_reads_as_none(self):
        provider = MagicMock()
        provider.has_any_connectivity.return_value = True
        provider.list_active_interfaces.side_effect = OSError("getifaddrs failed")

        snapshot = ConnectivityMonitor(provider).current_snapshot()

        assert snapshot.network_type == ConnectivityClass.NONE
        assert snapshot.is_connected is False

    def test_no_connectivity_skips_interface_walk(self):
        provider = MagicMock()
        provider.has_any_connectivity.return_value = False

        snapshot = ConnectivityMonitor(provider).current_snapshot()

        assert snapshot.network_type == ConnectivityClass.NONE
        provider.list_active_interfaces.assert_not_called()

    def test_connectivity_check_failure_reads_as_none(self):
        provider = MagicMock()
        provider.has_any_connectivity.side_effect = RuntimeError("boom")

        snapshot = ConnectivityMonitor(provider).current_snapshot()

        assert snapshot.network_type == ConnectivityClass.NONE
