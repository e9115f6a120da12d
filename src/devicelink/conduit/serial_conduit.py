"""
Implements a conduit over a serial port.
"""

import logging

import serial
from serial.tools import list_ports

from devicelink.conduit.base import Conduit

logger = logging.getLogger(__name__)

# timeouts for reads and writes, in seconds
read_timeout = 0.5
write_timeout = 0.5


class SerialConduit(Conduit):
    """
    A conduit that provides comms via a serial port.
    """

    def __init__(self, ser: serial.Serial):
        self.ser = ser
        # patch flushing since this causes a lockup if the serial is disconnected during
        # the flush.
        ser.flush = self._no_flush

    def _no_flush(self, *args, **kwargs):
        pass

    @property
    def target(self):
        return self.ser

    @property
    def input(self):
        return self.ser

    @property
    def output(self):
        return self.ser

    @property
    def open(self) -> bool:
        return self.ser.is_open

    def close(self):
        self.ser.close()


def open_serial(port, baudrate) -> SerialConduit:
    """
    Opens a serial port with the framing the device firmware expects:
    8 data bits, no parity, 1 stop bit and no flow control.
    :param port: a port name such as 'COM3' or '/dev/ttyUSB0', or any pyserial URL such as 'loop://'
    :raises serial.SerialException: when the port is missing or busy
    :raises ValueError: when the baudrate is not supported
    """
    ser = serial.serial_for_url(port, baudrate=baudrate,
                                bytesize=serial.EIGHTBITS, parity=serial.PARITY_NONE, stopbits=serial.STOPBITS_ONE,
                                xonxoff=False, rtscts=False, dsrdtr=False,
                                timeout=read_timeout, write_timeout=write_timeout)
    logger.info("opened serial port %s at %d baud" % (port, baudrate))
    return SerialConduit(ser)


def serial_port_info():
    """
    :return: a tuple of the ListPortInfo of each serial port present
    """
    return tuple(list_ports.comports())


def serial_ports():
    """
    Returns a generator for all available serial port device names.
    """
    for port in serial_port_info():
        yield port[0]
