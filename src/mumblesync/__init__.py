"""Shared server lists and live session status for Mumble widgets."""

__version__ = "0.3.0"
