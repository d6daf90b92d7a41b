"""Exceptions raised by provider clients."""

from __future__ import annotations


class ProviderError(Exception):
    """An external geocoding or distance provider could not answer."""


class ProviderStatusError(ProviderError):
    """The provider answered with a non-OK status."""

    def __init__(self, status: str, message: str | None = None) -> None:
        self.status = status
        detail = f"{status}: {message}" if message else status
        super().__init__(detail)
