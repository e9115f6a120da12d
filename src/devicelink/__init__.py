"""

Device Links

Line-oriented, bidirectional communication with a hardware peripheral over a serial port
or a TCP socket.

- Conduit: the one OS handle (serial port, socket) owned by a connection.
- CommunicationManager: connects to an endpoint, frames the traffic into lines and
  fires events. Variants:
  - SerialCommunicationManager - local serial port, 8-N-1, lines delivered from pyserial's
    reader thread
  - TcpCommunicationManager - TCP client socket, connected and read on a background thread
  - LoopbackCommunicationManager - in memory, for tests
- Device: the application-facing facade over one manager. Start/stop the connection,
  send commands, and listen to data_received and status_changed.

Events
- LineReceivedEvent(source, line) - one per line, in arrival order.
- ConnectionStatusEvent(source, connected) - after each connect and disconnect, and after
  a failed connection attempt.

A manager never raises for transport failures: they are logged, and a lost connection
is reported by ConnectionStatusEvent(connected=False). Reconnecting is left to the application.


## Threading

Serial data is delivered on pyserial's reader thread, one callback at a time per port.
TCP data is delivered on the connection's background thread, which is also the thread
that makes the connection. connect(), disconnect() and send_data() may be called from any
thread, including from an event handler.

No line event is fired after the ConnectionStatusEvent(connected=False) that ends its connection.

"""
