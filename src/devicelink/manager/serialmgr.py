import logging
import threading

from serial.threaded import Protocol, ReaderThread

from devicelink.conduit.base import Conduit
from devicelink.conduit.serial_conduit import open_serial, serial_ports
from devicelink.framing import LineFramer, LineTooLongError, default_terminator
from devicelink.manager.base import CommunicationManager

logger = logging.getLogger(__name__)


class SerialLineProtocol(Protocol):
    """
    Receives the bytes read by pyserial's reader thread and passes each complete line to the manager.
    One protocol instance is created per connection.
    """

    def __init__(self, manager, framer: LineFramer):
        self.manager = manager
        self.framer = framer
        self.transport = None

    def connection_made(self, transport):
        self.transport = transport

    def data_received(self, data):
        """
        Called on the reader thread whenever bytes are available. All complete lines in the
        buffer are delivered in order. Errors are logged and do not close the port.
        """
        try:
            lines = self.framer.feed(data)
        except LineTooLongError as e:
            self.manager.logger.error("error receiving data from %s: %s" % (self.manager.id, e))
            lines = e.lines
        except Exception as e:
            self.manager.logger.error("error receiving data from %s: %s" % (self.manager.id, e))
            return
        for line in lines:
            try:
                self.manager._deliver(self.transport, line)
            except Exception as e:
                self.manager.logger.error("error receiving data from %s: %s" % (self.manager.id, e))

    def connection_lost(self, exc):
        """ exc is None when the reader was stopped by disconnect(), otherwise the port failed. """
        if exc is not None:
            self.manager.logger.warning("serial port %s lost: %s" % (self.manager.id, exc))
            self.manager._disconnect(self.transport)


class SerialCommunicationManager(CommunicationManager):
    """
    A communication manager for a device on a local serial port.

    The port is opened 8-N-1 without flow control. Received data is handled on pyserial's reader
    thread, one callback at a time. A glitch while handling received data is logged and
    otherwise ignored; only a failure of the port itself (such as the device being unplugged)
    ends the connection. Write failures are logged and leave the port open.
    """

    def __init__(self, port: str, baudrate: int, terminator=default_terminator, log=logger):
        """
        :param port: the name of the serial port, e.g. 'COM3' or '/dev/ttyUSB0'
        :param baudrate: the baud rate of the device
        :param terminator: the line terminator used by the device firmware
        """
        super().__init__(log)
        if not port:
            raise ValueError("a serial port name is required")
        if baudrate is None or baudrate <= 0:
            raise ValueError("baudrate must be positive, was %s" % baudrate)
        self._port = port
        self._baudrate = baudrate
        self._terminator = terminator
        self._encoder = LineFramer(terminator)
        self._conduit = None
        self._reader = None
        self._announcing = None     # the thread firing the connected event, while it holds _lock
        self._lock = threading.RLock()              # guards the handle and line delivery
        self._transition_lock = threading.RLock()   # serializes connect and disconnect

    @property
    def id(self):
        return self._port

    @property
    def baudrate(self):
        return self._baudrate

    @property
    def connected(self):
        return self._reader is not None

    @property
    def conduit(self) -> Conduit:
        self.check_connected()
        return self._conduit

    def connect(self):
        with self._transition_lock, self._lock:
            if self._reader is not None:
                return
            try:
                conduit = open_serial(self._port, self._baudrate)
            except (OSError, ValueError) as e:
                self.logger.warning("error connecting to serial port %s: %s" % (self.id, e))
                self._fire_status(False)
                return
            self._conduit = conduit
            self._reader = ReaderThread(conduit.target, self._create_protocol)
            self._reader.start()
            self._announcing = threading.current_thread()
            try:
                self._fire_status(True)
            finally:
                self._announcing = None

    def _create_protocol(self):
        return SerialLineProtocol(self, LineFramer(self._terminator))

    def disconnect(self):
        self._disconnect()

    def _disconnect(self, reader=None):
        """
        Closes the port. When reader is given, only that connection's reader may be closed;
        this ignores a late report from a reader that has already been replaced.
        """
        if reader is not None and reader is not self._reader:
            return
        this_thread = threading.current_thread()
        if this_thread in (reader, self._reader, self._announcing):
            # on the reader thread, or in a handler of the connected event. Either may hold _lock,
            # which the reader needs to finish a delivery, so it is stopped without joining it.
            with self._lock:
                released = self._release(reader)
                if released:
                    current, conduit = released
                    self._close_port(lambda: self._stop_reader(current, conduit))
            return
        with self._transition_lock:
            released = self._release(reader)
            if released:
                current, conduit = released
                # joined outside _lock, so a line in delivery can finish
                self._close_port(current.close)

    def _release(self, reader):
        """
        Clears the handles of the current connection. Lines still in flight are discarded by
        _deliver() from here on.
        :return: the (reader, conduit) released, or None when there is nothing to release
        """
        with self._lock:
            current = self._reader
            if current is None or (reader is not None and reader is not current):
                return None
            released = current, self._conduit
            self._reader = None
            self._conduit = None
            return released

    @staticmethod
    def _stop_reader(reader, conduit):
        """ stops the reader thread without waiting for it. It exits once the port is closed. """
        reader.alive = False
        port = conduit.target
        if hasattr(port, 'cancel_read'):
            port.cancel_read()
        conduit.close()

    def _close_port(self, close):
        try:
            close()
            self.logger.info("closed serial port %s" % self.id)
        except Exception as e:
            self.logger.error("error disconnecting from serial port %s: %s" % (self.id, e))
        finally:
            self._fire_status(False)

    def _deliver(self, reader, line):
        with self._lock:
            if reader is self._reader:
                self._fire_line(line)

    def send_data(self, data: str):
        reader = self._reader
        if reader is None:
            return
        try:
            reader.write(self._encoder.encode(data))
        except Exception as e:
            self.logger.error("error sending data to %s: %s" % (self.id, e))

    @staticmethod
    def list_available_endpoints():
        """
        :return: the names of the serial ports currently present
        """
        return list(serial_ports())
