from __future__ import annotations


class NarrationError(Exception):
    """Base class for errors that abort a forecast request."""


class ConfigurationError(NarrationError):
    """Required configuration is missing or invalid."""


class InputValidationError(NarrationError):
    """The requested forecast date cannot be served."""


class UpstreamDataError(NarrationError):
    """The weather provider failed or returned data we cannot use."""
