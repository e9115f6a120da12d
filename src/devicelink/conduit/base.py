from abc import abstractmethod
from io import IOBase


class Conduit:
    """
    A conduit is one exclusively owned, bi-directional OS handle.
    It exposes file-like input and output endpoints over the handle. Once closed
    a conduit cannot be reopened; a new one is created for each connection.
    """

    @property
    @abstractmethod
    def target(self):
        """ the underlying OS object, such as the serial port or socket. """
        raise NotImplementedError

    @property
    @abstractmethod
    def input(self) -> IOBase:
        """ fetches the binary stream that provides input.
            Callers can use the usual readXXX() methods. """
        raise NotImplementedError

    @property
    @abstractmethod
    def output(self) -> IOBase:
        """ fetches the binary stream that receives output.
            Callers can use the usual writeXXX() methods. """
        raise NotImplementedError

    @property
    @abstractmethod
    def open(self) -> bool:
        """ determines if this conduit is open. When open, the streams provided by
            input and output can be read from/written to."""
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """
        Releases the handle. Any read blocked on the input stream is woken.
        """
        raise NotImplementedError
