"""
Custom exceptions for the news client data layer.
"""

from typing import Optional


class NewsClientError(Exception):
    """Base exception class for news client errors."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self):
        if self.status_code:
            return f"[Code: {self.status_code}] {self.message}"
        return self.message


class ConnectivityFailure(NewsClientError):
    """No network path to the news API (DNS, refused connection, timeout)."""


class RemoteProtocolFailure(NewsClientError):
    """The API was reachable but answered with a non-2xx status or an unreadable body."""
    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message, status_code=status_code)
        self.body = body


class PersistenceFailure(NewsClientError):
    """Local storage (SQLite cache or QSettings) could not be read or written."""


class SummaryError(NewsClientError):
    """A news summary could not be requested (missing API key, nothing to summarize)."""
