"""NetDrive — local-network file manager backend."""

__version__ = "0.1.0"
