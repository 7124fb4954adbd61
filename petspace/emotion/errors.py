"""Emotion pipeline errors."""


class ProviderError(Exception):
    """A provider attempt failed; the engine moves on to the next provider."""


class ProviderNotConfiguredError(ProviderError):
    """The provider has no credential configured."""


class NoSignalError(ProviderError):
    """The provider answered, but nothing usable could be scored."""


class InvalidImageError(ValueError):
    """The uploaded payload is not a decodable image."""


class StorageError(RuntimeError):
    """The image could not be written to storage."""
