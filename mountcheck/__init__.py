"""mountcheck - filesystem mount state check for monitoring systems."""

__version__ = "0.1.0"
