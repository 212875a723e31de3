"""
Due-date contact reminder scheduler.

Periodically reconciles externally stored contact records against the clock
and decides whether a call, a text message or a flag reset is due.
"""

__version__ = "0.1.0"
