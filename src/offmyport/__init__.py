"""offmyport: find processes listening on TCP ports, inspect them, kill them."""

__version__ = "0.4.0"
