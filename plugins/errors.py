from __future__ import annotations

from typing import Optional


class PluginError(Exception):
    """Base class for failures reported back to the host."""


class ConfigurationError(PluginError):
    """A required setting is missing or empty."""


class FetchError(PluginError):
    """Loading the current catalog location failed."""


class TransportError(FetchError):
    """Network failure or non-success HTTP status."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ParseError(FetchError):
    """Server markup could not be turned into catalog items."""
