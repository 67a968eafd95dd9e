"""Domain errors and failure typing."""


class SyncError(Exception):
    """Base class for sync failures."""

    error_code = "SYNC_ERROR"


class ConfigError(SyncError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class TransportError(SyncError):
    """Raised when a remote resource cannot be retrieved."""

    error_code = "TRANSPORT_ERROR"


class DecodeError(SyncError):
    """Raised for malformed HTML, CSV or JSON payloads."""

    error_code = "DECODE_ERROR"


class ValidationError(SyncError):
    """Raised when data is present but semantically unusable."""

    error_code = "VALIDATION_ERROR"


class InvalidRow(ValidationError):
    error_code = "INVALID_ROW"


class MissingTimestamp(ValidationError):
    error_code = "MISSING_TIMESTAMP"


class EmptyDataSet(ValidationError):
    error_code = "EMPTY_DATASET"


class IntegerParseError(ValidationError):
    error_code = "PARSE_INT"


class TimestampParseError(ValidationError):
    error_code = "PARSE_TIMESTAMP"


class PersistenceError(SyncError):
    """Raised for ledger read/write failures."""

    error_code = "PERSISTENCE_ERROR"
