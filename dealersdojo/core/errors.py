"""Error taxonomy shared by the relay server and the game client."""

from typing import Optional


class DojoError(Exception):
    """Base class for every error raised by dealersdojo."""


class ConfigError(DojoError):
    """A required backend setting (usually the model API key) is missing."""


class ValidationError(DojoError):
    """A relay request was rejected before contacting the model."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class ExternalModelError(DojoError):
    """The model call failed or its output could not be parsed."""

    def __init__(self, message: str, details: Optional[str] = None):
        super().__init__(message)
        self.details = details


class CatalogLoadError(DojoError):
    """The level catalog could not be fetched or is malformed."""


class CorruptProgressError(DojoError):
    """The stored progress record could not be parsed."""


class RelayError(DojoError):
    """A chat turn could not be completed through the relay."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
