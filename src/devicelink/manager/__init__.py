"""
A communication manager owns the connection to one device over one transport and
turns the line-oriented traffic on it into events.

Every manager offers the same contract - connect(), disconnect(), send_data(), the
connected state and the data_received and connection_status_changed event sources -
while the read strategy and the policy for transport errors belong to each variant:

- SerialCommunicationManager: lines are delivered from pyserial's reader thread.
  Errors while handling received data are logged and the port stays open.
- TcpCommunicationManager: connects and reads on a background thread.
  Any read or write failure closes the connection.
- LoopbackCommunicationManager: in-memory and synchronous, for tests.
"""
