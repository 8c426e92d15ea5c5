"""Exception types raised by the Quick.ai service."""

from __future__ import annotations

from typing import Optional


class QuickAIError(Exception):
    """Base class for errors raised by this package."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ImageInputError(QuickAIError):
    """Base class for failures in the background-removal pipeline."""


class InvalidInput(ImageInputError):
    """The caller supplied an unusable ``imageUrl``."""


class UpstreamFetchError(ImageInputError):
    """A remote image could not be downloaded."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RemovalFailure(ImageInputError):
    """Both the in-memory and the file-based removal attempts failed."""


class EmptyResult(ImageInputError):
    """The removal backend returned nothing."""


class UnsupportedResultShape(ImageInputError):
    """The removal backend returned an object we cannot turn into bytes."""


class CompletionError(QuickAIError):
    """The chat-completions API call failed or returned garbage."""


class CompletionConfigurationError(CompletionError):
    """The completions client is missing required configuration."""
