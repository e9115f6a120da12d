import logging
import threading

from devicelink.conduit.base import Conduit
from devicelink.conduit.socket_conduit import open_socket
from devicelink.framing import LineFramer, LineTooLongError
from devicelink.manager.base import CommunicationManager
from devicelink.support.background import BackgroundLoop

logger = logging.getLogger(__name__)

default_connect_timeout = 5


class TCPServerEndpoint:
    """
    Describes a TCP server endpoint.
    At least one of name or ip_address should be given. If both are given, the ip_address is used
    to connect.
    """
    def __init__(self, hostname, ip_address, port):
        self.hostname = hostname
        self.ip_address = ip_address
        self.port = port

    @property
    def address(self):
        return self.ip_address or self.hostname, self.port

    def key(self):
        """
        >>> TCPServerEndpoint(None, 'ipaddr', 55).key()
        'ipaddr:55'
        >>> TCPServerEndpoint('name', 'ipaddr', 55).key()
        'name:55'
        """
        return str(self.hostname or self.ip_address) + ':' + str(self.port)


class SocketReadLoop(BackgroundLoop):
    """
    Connects the socket and then reads lines from it until cancelled or the connection is lost.
    Each connection attempt has its own loop; its stop_event is the cancellation token for the
    connection.
    """

    def __init__(self, manager, log=logger):
        super().__init__(name="tcp-%s" % manager.id, log=log)
        self.manager = manager
        self.conduit = None
        self.framer = LineFramer()

    def cancel(self):
        self.stop_event.set()

    @property
    def cancelled(self):
        return self.stop_event.is_set()

    def startup(self):
        return self.manager._open(self)

    def loop(self):
        try:
            raw = self.conduit.input.readline(self.framer.max_length + 1)
        except OSError:
            # reset by peer, broken pipe or the socket closed by disconnect()
            return False
        if not raw.endswith(self.framer.terminator):
            if len(raw) > self.framer.max_length:
                raise LineTooLongError("line from %s exceeds %d bytes" % (self.manager.id, self.framer.max_length))
            # end of stream. A trailing fragment without its terminator is not a line.
            if not self.cancelled:
                self.logger.info("connection closed by %s" % self.manager.id)
            return False
        return self.manager._deliver(self, self.framer.decode(raw))

    def exception_handler(self, e):
        if not self.cancelled:
            self.logger.exception("error reading data from %s: %s" % (self.manager.id, e))

    def shutdown(self):
        if self.conduit is not None:
            self.manager._disconnect(self)


class TcpCommunicationManager(CommunicationManager):
    """
    A communication manager for a device reached over a TCP client socket, such as an ESP32
    on the local network. The wire format is UTF-8 text, one line per message, terminated by '\\n'.

    connect() returns at once; the connection is made on a background thread, which then
    reads lines from the socket. Any read or write failure, and the server closing the
    connection, disconnects the manager. There is no automatic reconnection.
    """

    def __init__(self, host: str, port: int, connect_timeout=default_connect_timeout, log=logger):
        """
        :param host: the hostname or IP address of the device
        :param port: the TCP port the device listens on
        :param connect_timeout: the time allowed for the connection handshake, in seconds
        """
        super().__init__(log)
        if not host:
            raise ValueError("a host name or address is required")
        if not isinstance(port, int) or not 0 < port < 65536:
            raise ValueError("invalid TCP port %r" % (port,))
        self._endpoint = TCPServerEndpoint(None, host, port)
        self._encoder = LineFramer()
        self._connect_timeout = connect_timeout
        self._conduit = None
        self._loop = None      # the loop for the connection being made or currently open
        self._lock = threading.RLock()
        self._write_lock = threading.Lock()

    @property
    def id(self):
        return self._endpoint.key()

    @property
    def endpoint(self):
        return self._endpoint

    @property
    def connected(self):
        return self._conduit is not None

    @property
    def conduit(self) -> Conduit:
        self.check_connected()
        return self._conduit

    def connect(self):
        """
        Starts connecting on a background thread and returns immediately. Calls made while
        connected or while an attempt is in flight are ignored.
        """
        with self._lock:
            if self._loop is not None:
                return
            loop = SocketReadLoop(self, log=self.logger)
            self._loop = loop
        loop.start()

    def _open(self, loop):
        """ Makes the connection for the given loop. Runs on the loop's thread. """
        try:
            conduit = open_socket(self._endpoint.address, self._connect_timeout)
        except Exception as e:
            self.logger.warning("error connecting via TCP/IP to %s: %s" % (self.id, e))
            with self._lock:
                if self._loop is not loop:
                    return False
                self._loop = None
                self._fire_status(False)
            return False

        with self._lock:
            if self._loop is not loop or loop.cancelled:
                # abandoned by close() while connecting
                conduit.close()
                return False
            loop.conduit = conduit
            self._conduit = conduit
            self._fire_status(True)
        return True

    def disconnect(self):
        self._disconnect()

    def _disconnect(self, loop=None):
        """
        Closes the connection. When loop is given, only that loop's connection may be closed,
        so a loop ending late never closes a newer connection.
        Order: cancel the loop, close the socket, clear the handle and finally fire the event.
        """
        with self._lock:
            current = self._loop
            if self._conduit is None or (loop is not None and loop is not current):
                return
            conduit = self._conduit
            try:
                current.cancel()
                conduit.close()
            except Exception as e:
                self.logger.error("error disconnecting from %s: %s" % (self.id, e))
            finally:
                self._conduit = None
                self._loop = None
                self.logger.info("disconnected from %s" % self.id)
                self._fire_status(False)

    def close(self):
        """ Disconnects, and abandons any connection attempt in flight. """
        with self._lock:
            loop = self._loop
            if self._conduit is None and loop is not None:
                loop.cancel()
                self._loop = None
        self.disconnect()

    def _deliver(self, loop, line):
        with self._lock:
            if loop.cancelled or loop is not self._loop:
                return False
            self._fire_line(line)
        return True

    def send_data(self, data: str):
        conduit = self._conduit
        if conduit is None:
            return
        try:
            with self._write_lock:
                out = conduit.output
                out.write(self._encoder.encode(data))
                out.flush()
        except (OSError, ValueError) as e:
            self.logger.error("error sending data to %s: %s" % (self.id, e))
            self._disconnect_conduit(conduit)

    def _disconnect_conduit(self, conduit):
        with self._lock:
            if conduit is self._conduit:
                self._disconnect()
