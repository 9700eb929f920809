"""Relay TeamSpeak client join/leave events to a Telegram chat."""

__version__ = "0.1.0"
