"""Unit tests for NetworkService (method-call and event surfaces)."""
import threading
from unittest.mock import MagicMock, patch

import pytest

from netclass.core.config import Config
from netclass.core.types import Medium, NetworkInterface, OperationalState
from netclass.services.network_service import MethodResult, MethodStatus, NetworkService


def make_provider(*interfaces):
    provider = MagicMock()
    provider.has_any_connectivity.return_value = bool(interfaces)
    provider.list_active_interfaces.return_value = list(interfaces)
    return provider


def up(name, medium=Medium.UNKNOWN):
    return NetworkInterface(name, True, OperationalState.UP, medium)


class TestNetworkService:
    """Test suite for NetworkService."""

    @pytest.fixture
    def ethernet_service(self):
        service = NetworkService(provider=make_provider(up("eth0", Medium.ETHERNET)), poll_interval=0.02)
        yield service
        service.dispose()

    def test_ethernet_scenario(self, ethernet_service):
        assert ethernet_service.handle("getNetworkType").value == "ethernet"
        assert ethernet_service.handle("isConnected").value is True
        assert ethernet_service.handle("isConnectedToWifiOrEthernet").value is True

    def test_wifi_with_loopback_scenario(self):
        service = NetworkService(provider=make_provider(up("wlan0", Medium.WIFI), up("lo")))
        assert service.get_network_type() == "wifi"

    def test_no_interfaces_scenario(self):
        service = NetworkService(provider=make_provider())

        assert service.handle("getNetworkType").value == "none"
        assert service.handle("isConnected").value is False
        assert service.handle("isConnectedToWifiOrEthernet").value is False

    def test_mobile_is_connected_but_not_wifi_or_ethernet(self):
        service = NetworkService(provider=make_provider(up("wwan0", Medium.MOBILE)))

        assert service.is_connected() is True
        assert service.is_connected_to_wifi_or_ethernet() is False

    def test_unknown_method_not_implemented(self, ethernet_service):
        result = ethernet_service.handle("getSignalStrength")

        assert result.status == MethodStatus.NOT_IMPLEMENTED
        assert result.ok is False
        assert "getSignalStrength" in result.message

    def test_handler_exception_becomes_error_result(self, ethernet_service):
        with patch.object(ethernet_service.monitor, "current_snapshot", side_effect=RuntimeError("boom")):
            result = ethernet_service.handle("getNetworkType")

        assert result.status == MethodStatus.ERROR
        assert result.message == "boom"

    def test_start_and_stop_through_methods(self, ethernet_service):
        assert ethernet_service.handle("startNetworkMonitoring") == MethodResult.success(None)
        assert ethernet_service.monitor.is_running() is True

        assert ethernet_service.handle("stopNetworkMonitoring").ok
        assert ethernet_service.monitor.is_running() is False

    def test_start_pushes_initial_snapshot_to_listener(self, ethernet_service):
        received = []
        ethernet_service.events.listen(received.append)

        ethernet_service.start_network_monitoring()

        assert len(received) == 1
        assert received[0]["networkType"] == "ethernet"
        assert set(received[0]) == {"isConnected", "isWifiOrEthernet", "networkType", "timestamp"}

    def test_listening_does_not_start_monitoring(self, ethernet_service):
        ethernet_service.events.listen(MagicMock())
        assert ethernet_service.monitor.is_running() is False

        ethernet_service.start_network_monitoring()
        ethernet_service.events.cancel()
        assert ethernet_service.monitor.is_running() is True

    def test_monitoring_without_listener(self, ethernet_service):
        ethernet_service.start_network_monitoring()
        assert ethernet_service.monitor.is_running() is True

    def test_dispose_stops_monitoring(self):
        service = NetworkService(provider=make_provider(up("eth0")), poll_interval=0.02)
        service.start_network_monitoring()
        thread = service.monitor._thread

        service.dispose()

        assert service.monitor.is_running() is False
        assert thread.is_alive() is False
        assert service.events.has_listener is False

    def test_context_manager_disposes(self):
        with NetworkService(provider=make_provider(up("eth0")), poll_interval=0.02) as service:
            service.start_network_monitoring()

        assert service.monitor.is_running() is False

    def test_change_reaches_listener(self):
        provider = make_provider(up("wlan0", Medium.WIFI))
        service = NetworkService(provider=provider, poll_interval=0.02)
        changed = threading.Event()
        received = []

        def on_event(payload):
            received.append(payload["networkType"])
            if payload["networkType"] == "ethernet":
                changed.set()

        service.events.listen(on_event)
        service.start_network_monitoring()
        provider.list_active_interfaces.return_value = [up("eth0", Medium.ETHERNET)]

        try:
            assert changed.wait(timeout=5)
        finally:
            service.dispose()
        assert received == ["wifi", "ethernet"]

    def test_methods_listing(self, ethernet_service):
        assert ethernet_service.methods == [
            "isConnectedToWifiOrEthernet",
            "getNetworkType",
            "isConnected",
            "startNetworkMonitoring",
            "stopNetworkMonitoring",
        ]

    def test_from_config(self, tmp_path):
        config = Config(tmp_path / "config.json")
        config.set("poll_interval_ms", 250)
        config.set("monitor.cancellable_sleep", False)

        service = NetworkService.from_config(config, provider=make_provider())

        assert service.monitor.poll_interval == pytest.approx(0.25)
        assert service.monitor._cancellable_sleep is False

    @patch("netclass.services.network_service.get_interface_provider")
    def test_default_provider_comes_from_platform(self, mock_get_provider):
        mock_get_provider.return_value = make_provider()

        NetworkService()

        mock_get_provider.assert_called_once()
