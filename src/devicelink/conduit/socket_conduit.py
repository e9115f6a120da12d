import logging
import socket

from devicelink.conduit.base import Conduit

logger = logging.getLogger(__name__)


class SocketConduit(Conduit):
    """
    A conduit that provides communication via a connected client socket.
    """
    def __init__(self, sock: socket.socket):
        """
        :param sock: the client socket that represents the connection
        :type sock: socket
        """
        self.sock = sock
        self.read = sock.makefile('rb')
        self.write = sock.makefile('wb')

    @property
    def open(self) -> bool:
        return self.sock.fileno() >= 0

    @property
    def target(self):
        return self.sock

    @property
    def output(self):
        return self.write

    @property
    def input(self):
        return self.read

    def close(self):
        # shutdown first - it wakes any thread blocked in readline(), which
        # holds the reader's lock and would stall closing the file
        try:
            self.sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass    # the peer may have closed the socket already
        try:
            self.read.close()
            self.write.close()
        finally:
            self.sock.close()


def open_socket(address, timeout=None) -> SocketConduit:
    """
    Connects a new TCP client socket to the given address.
    :param address: a (host, port) tuple
    :param timeout: the time allowed for the connection handshake, in seconds.
        Once connected the socket is blocking.
    :return: the conduit for the connected socket
    :raises OSError: when the connection cannot be established
    """
    sock = socket.create_connection(address, timeout=timeout)
    sock.settimeout(None)
    logger.info("opened socket to %s:%s" % address)
    return SocketConduit(sock)
