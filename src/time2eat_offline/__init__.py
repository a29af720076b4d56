"""Offline cache and background sync agent for the Time2Eat web app."""

__version__ = "0.1.0"
