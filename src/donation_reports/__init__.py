"""Donation reporting and export tool for alumni association donations."""

__version__ = "0.1.0"
