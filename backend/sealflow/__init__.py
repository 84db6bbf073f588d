"""SealFlow - seal usage and creation approval service."""

__version__ = "0.1.0"
