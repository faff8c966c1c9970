"""Typed view of the Linux rfkill subsystem."""

__version__ = "0.1.0"
