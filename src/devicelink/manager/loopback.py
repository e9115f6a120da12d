from devicelink.framing import LineFramer
from devicelink.manager.base import CommunicationManager


class LoopbackCommunicationManager(CommunicationManager):
    """
    An in-memory manager for testing code written against the CommunicationManager contract
    without any I/O. Everything happens synchronously on the calling thread.

    - connect() succeeds unless fail_connect is set, in which case it fires connected=False.
    - sent records each command passed to send_data() while connected.
    - feed() plays bytes or text as if received from the device.
    - drop() plays the transport closing underneath the manager.
    """

    def __init__(self, id='loopback', fail_connect=False):
        super().__init__()
        self._id = id
        self.fail_connect = fail_connect
        self.framer = LineFramer()
        self.sent = []
        self._connected = False

    @property
    def id(self):
        return self._id

    @property
    def connected(self):
        return self._connected

    def connect(self):
        if self._connected:
            return
        if self.fail_connect:
            self._fire_status(False)
            return
        self.framer.reset()
        self._connected = True
        self._fire_status(True)

    def disconnect(self):
        if not self._connected:
            return
        self._connected = False
        self._fire_status(False)

    def drop(self):
        self.disconnect()

    def send_data(self, data: str):
        if self._connected:
            self.sent.append(data)

    def feed(self, data):
        """
        Receives data as though it came from the device. Ignored while disconnected.
        :param data: bytes, or text which is encoded as utf-8
        """
        if not self._connected:
            return
        if isinstance(data, str):
            data = data.encode('utf-8')
        for line in self.framer.feed(data):
            self._fire_line(line)
