import logging

from devicelink.manager.base import CommunicationManager
from devicelink.support.events import EventSource

logger = logging.getLogger(__name__)


class Device:
    """
    The application's handle on one device. A thin delegate over the communication manager
    it is given, so that a serial, TCP or loopback manager can be used interchangeably.

    Events from the manager are re-fired unchanged to the device's own listeners:
    LineReceivedEvent to data_received and ConnectionStatusEvent to status_changed.
    """

    def __init__(self, manager: CommunicationManager):
        if manager is None:
            raise ValueError("a communication manager is required")
        self._manager = manager
        self.data_received = EventSource()
        self.status_changed = EventSource()
        manager.data_received.add(self._manager_data_received)
        manager.connection_status_changed.add(self._manager_status_changed)

    @property
    def manager(self):
        return self._manager

    @property
    def id(self) -> str:
        return self._manager.id

    @property
    def is_running(self) -> bool:
        return self._manager.connected

    def start(self):
        self._manager.connect()

    def stop(self):
        self._manager.disconnect()

    def send_data(self, data: str):
        self._manager.send_data(data)

    def close(self):
        """ stops the device and detaches it from the manager. """
        manager = self._manager
        manager.close()
        manager.data_received.remove(self._manager_data_received)
        manager.connection_status_changed.remove(self._manager_status_changed)
        logger.debug("closed device %s" % self.id)

    def _manager_data_received(self, event):
        self.data_received.fire(event)

    def _manager_status_changed(self, event):
        self.status_changed.fire(event)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __str__(self):
        return "Device(%s)" % self.id
