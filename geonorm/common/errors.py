"""Domain errors and failure typing."""


class PipelineError(Exception):
    """Base class for pipeline failures."""

    error_code = "PIPELINE_ERROR"


class ConfigError(PipelineError):
    """Raised for invalid or missing configuration."""

    error_code = "CONFIG_ERROR"


class DelimiterDetectionFailed(ConfigError):
    """Raised when the degrees/minutes delimiter cannot be sniffed from a sample."""

    error_code = "DELIMITER_DETECTION_FAILED"


class InvalidBreakpoints(ConfigError):
    """Raised when depth breakpoints are not strictly descending."""

    error_code = "INVALID_BREAKPOINTS"


class StageError(PipelineError):
    """Raised for stage failures that should halt in strict mode."""

    error_code = "STAGE_ERROR"


class RecordRejected(PipelineError):
    """Base class for failures scoped to a single input record."""

    error_code = "RECORD_REJECTED"


class MalformedCoordinate(RecordRejected):
    error_code = "MALFORMED_COORDINATE"


class MalformedDepth(RecordRejected):
    error_code = "MALFORMED_DEPTH"


class DuplicateRecordId(RecordRejected):
    error_code = "DUPLICATE_RECORD_ID"
