import logging
from abc import abstractmethod

from devicelink.support.events import EventSource

logger = logging.getLogger(__name__)


class ManagerError(Exception):
    """ Indicates misuse of a communication manager. """


class ConnectionNotConnectedError(ManagerError):
    """ Indicates a manager is in the disconnected state when a connection is required. """


class ManagerEvent:
    """ base class for manager events. Events are values: equal when their class and attributes are. """
    def __init__(self, source):
        self.source = source

    def __eq__(self, other):
        return type(other) is type(self) and other.__dict__ == self.__dict__

    def __ne__(self, other):
        return not self.__eq__(other)

    __hash__ = None

    def __repr__(self):
        values = ", ".join("%s=%r" % (k, v) for k, v in sorted(self.__dict__.items()))
        return "%s(%s)" % (type(self).__name__, values)


class LineReceivedEvent(ManagerEvent):
    """ A complete line was received from the device. """
    def __init__(self, source, line: str):
        super().__init__(source)
        self.line = line


class ConnectionStatusEvent(ManagerEvent):
    """ The connection was established (connected=True) or lost/closed (connected=False). """
    def __init__(self, source, connected: bool):
        super().__init__(source)
        self.connected = connected


class CommunicationManager:
    """
    The contract shared by all transports.

    Transport failures never propagate out of connect(), disconnect() or send_data(). They are
    logged, and when the connection state changes a ConnectionStatusEvent is fired.
    Calling connect() when connected, or disconnect() when disconnected, does nothing and fires nothing.
    send_data() while disconnected is silently dropped.

    :param log: the logger for transport diagnostics
    """

    def __init__(self, log=logger):
        self.data_received = EventSource()
        self.connection_status_changed = EventSource()
        self.logger = log

    @property
    @abstractmethod
    def id(self) -> str:
        """ a stable identifier for the endpoint, e.g. 'COM3' or '192.168.1.101:8080' """
        raise NotImplementedError

    @property
    @abstractmethod
    def connected(self) -> bool:
        """
        :return: True if connected. This always agrees with the last ConnectionStatusEvent fired.
        :rtype: bool
        """
        raise NotImplementedError

    @abstractmethod
    def connect(self):
        """
        Establishes the connection. Success fires ConnectionStatusEvent(connected=True);
        failure is logged and fires ConnectionStatusEvent(connected=False).
        """
        raise NotImplementedError

    @abstractmethod
    def disconnect(self):
        """
        Closes the connection and fires ConnectionStatusEvent(connected=False) exactly once,
        even if closing the underlying handle fails.
        """
        raise NotImplementedError

    @abstractmethod
    def send_data(self, data: str):
        """
        Writes one line to the device. The line terminator is appended by the transport.
        """
        raise NotImplementedError

    def close(self):
        """ Disconnects and releases the underlying handle. """
        self.disconnect()

    def check_connected(self):
        if not self.connected:
            raise ConnectionNotConnectedError("%s is not connected" % self.id)

    def _fire_line(self, line):
        self.data_received.fire(LineReceivedEvent(self, line))

    def _fire_status(self, connected):
        self.connection_status_changed.fire(ConnectionStatusEvent(self, connected))

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __str__(self):
        return "%s(%s)" % (type(self).__name__, self.id)

    __repr__ = __str__
