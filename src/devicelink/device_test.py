import unittest
from unittest.mock import Mock, call

from hamcrest import assert_that, is_, calling, raises, empty

from devicelink.device import Device
from devicelink.manager.base import ConnectionStatusEvent, LineReceivedEvent
from devicelink.manager.loopback import LoopbackCommunicationManager
from devicelink.support.events import EventSource


class DeviceDelegationTest(unittest.TestCase):
    """ the device delegates to a mock manager """

    def setUp(self):
        self.manager = Mock()
        self.manager.data_received = EventSource()
        self.manager.connection_status_changed = EventSource()
        self.sut = Device(self.manager)

    def test_requires_manager(self):
        assert_that(calling(Device).with_args(None), raises(ValueError))

    def test_subscribes_once(self):
        assert_that(len(self.manager.data_received), is_(1))
        assert_that(len(self.manager.connection_status_changed), is_(1))

    def test_id(self):
        self.manager.id = "COM3"
        assert_that(self.sut.id, is_("COM3"))

    def test_is_running(self):
        self.manager.connected = True
        assert_that(self.sut.is_running, is_(True))
        self.manager.connected = False
        assert_that(self.sut.is_running, is_(False))

    def test_start(self):
        self.sut.start()
        self.manager.connect.assert_called_once_with()

    def test_stop(self):
        self.sut.stop()
        self.manager.disconnect.assert_called_once_with()

    def test_send_data(self):
        self.sut.send_data("LED ON")
        self.manager.send_data.assert_called_once_with("LED ON")

    def test_events_are_relayed_unchanged(self):
        lines = Mock()
        status = Mock()
        self.sut.data_received += lines
        self.sut.status_changed += status
        line_event = LineReceivedEvent(self.manager, "PING")
        status_event = ConnectionStatusEvent(self.manager, False)
        self.manager.data_received.fire(line_event)
        self.manager.connection_status_changed.fire(status_event)
        lines.assert_called_once()
        assert_that(lines.call_args[0][0], is_(line_event))
        assert_that(status.call_args[0][0], is_(status_event))

    def test_close_stops_and_unsubscribes(self):
        self.sut.close()
        self.manager.close.assert_called_once_with()
        assert_that(self.manager.data_received.handlers(), is_(empty()))
        assert_that(self.manager.connection_status_changed.handlers(), is_(empty()))

    def test_str(self):
        self.manager.id = "10.0.0.2:80"
        assert_that(str(self.sut), is_("Device(10.0.0.2:80)"))


class DeviceWithLoopbackTest(unittest.TestCase):
    """ the device over a deterministic manager, as an application would use it """

    def setUp(self):
        self.manager = LoopbackCommunicationManager("esp32")
        self.sut = Device(self.manager)
        self.lines = Mock()
        self.status = Mock()
        self.sut.data_received += self.lines
        self.sut.status_changed += self.status

    def test_session(self):
        self.sut.start()
        assert_that(self.sut.is_running, is_(True))
        self.sut.send_data("GET TEMP")
        self.manager.feed(b"TEMP 21.5\r\n")
        self.sut.stop()

        assert_that(self.manager.sent, is_(["GET TEMP"]))
        self.lines.assert_called_once_with(LineReceivedEvent(self.manager, "TEMP 21.5"))
        assert_that(self.status.call_args_list, is_([call(ConnectionStatusEvent(self.manager, True)),
                                                     call(ConnectionStatusEvent(self.manager, False))]))
        assert_that(self.sut.is_running, is_(False))

    def test_start_twice_fires_once(self):
        self.sut.start()
        self.sut.start()
        self.status.assert_called_once_with(ConnectionStatusEvent(self.manager, True))

    def test_stop_when_stopped_fires_nothing(self):
        self.sut.stop()
        self.status.assert_not_called()

    def test_failed_start(self):
        self.manager.fail_connect = True
        self.sut.start()
        assert_that(self.sut.is_running, is_(False))
        self.status.assert_called_once_with(ConnectionStatusEvent(self.manager, False))

    def test_lost_connection_is_reported(self):
        self.sut.start()
        self.manager.drop()
        assert_that(self.sut.is_running, is_(False))
        self.status.assert_called_with(ConnectionStatusEvent(self.manager, False))

    def test_send_while_stopped_is_dropped(self):
        self.sut.send_data("GET TEMP")
        assert_that(self.manager.sent, is_(empty()))

    def test_is_running_is_current_inside_status_handler(self):
        seen = []
        self.sut.status_changed += lambda e: seen.append((e.connected, self.sut.is_running))
        self.sut.start()
        self.sut.stop()
        assert_that(seen, is_([(True, True), (False, False)]))

    def test_context_manager(self):
        with self.sut as device:
            assert_that(device.is_running, is_(True))
        assert_that(self.sut.is_running, is_(False))
        assert_that(self.manager.data_received.handlers(), is_(empty()))
