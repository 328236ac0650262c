"""Registry error taxonomy."""

from __future__ import annotations


class RegistryError(Exception):
    """Base class for every failure raised by the registry."""


class Unauthorized(RegistryError):
    """Caller identity does not match the owner."""


class NotFound(RegistryError):
    """Lookup by account identifier or comment id found nothing."""


class AlreadyInitialized(RegistryError):
    """``initialize`` was called on a registry that already has state."""


class NotInitialized(RegistryError):
    """The registry was used before ``initialize``."""


class InvalidArgument(RegistryError):
    """An argument failed validation (e.g. a zero page limit)."""
