"""Registers users across an external identity provider and the local record store."""

__version__ = "0.1.0"
