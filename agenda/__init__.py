"""Agenda assistant: chat messages in, Google Calendar events out."""

__version__ = "0.1.0"
