"""
A simple configuration helper built on top of ConfigObj that allows configuration files to be
layered - neutral / os-specific, with a schema to validate the types of the config data.

Used to configure global values in modules, such as the serial port and server used by integration tests.
"""
