"""Exception taxonomy for the speech recognition pipeline."""


class PipelineError(Exception):
    """Base class for every failure a pipeline run can report."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class ValidationFailure(PipelineError):
    """Raised when the request carries no usable source reference."""

    def __init__(self, message: str = "Blob file URL is required."):
        super().__init__(message)


class ConversionFailure(PipelineError):
    """Raised when the source cannot be turned into canonical audio."""

    def __init__(self, source_url: str, cause: Exception | None = None):
        self.source_url = source_url
        super().__init__(f"Failed to convert '{source_url}' to canonical audio", cause)


class FetchFailure(ConversionFailure):
    """Raised when downloading the source file fails."""

    def __init__(
        self,
        source_url: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        self.status_code = status_code
        super().__init__(source_url, cause)


class TranscodeFailure(ConversionFailure):
    """Raised when the transcoder exits non-zero or cannot be launched."""

    def __init__(
        self,
        source_url: str,
        returncode: int | None = None,
        stderr: str = "",
        cause: Exception | None = None,
    ):
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(source_url, cause)


class TimeoutFailure(PipelineError):
    """Raised when recognition does not finish before its deadline."""

    def __init__(self, timeout_sec: float, pending: int = 0):
        self.timeout_sec = timeout_sec
        self.pending = pending
        super().__init__(f"Recognition did not finish within {timeout_sec}s ({pending} pending)")


class RecognitionFailure(PipelineError):
    """Raised when a recognition session cannot be driven to completion."""

    def __init__(self, segment_index: int, cause: Exception | None = None):
        self.segment_index = segment_index
        super().__init__(f"Recognition failed for segment {segment_index}", cause)
