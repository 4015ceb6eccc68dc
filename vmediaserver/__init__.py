"""NBD wire format, server options, disk access, login requests, drive discovery and host scanning."""

__version__ = "2.0.0"