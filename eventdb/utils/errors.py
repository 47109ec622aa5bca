class ConfigurationError(RuntimeError):
    """Required configuration is missing; raised once at startup."""


class RecordError(Exception):
    """Base class for errors that abort a save before anything is written."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.message = message
        self.field = field


class RecordValidationError(RecordError):
    pass


class NormalizationError(RecordError):
    pass


class ReferentialError(RecordError):
    pass
