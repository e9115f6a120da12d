"""
The conduit package wraps the single OS handle a communication manager owns
while it is connected: an open serial port or a connected client socket.
"""
