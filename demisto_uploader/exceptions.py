"""
Custom exception hierarchy for the Demisto uploader.

Per-file failures are reported and swallowed by the fingerprinting layer;
only the limit control and upload failures escape the directory walk.
"""


class UploaderError(Exception):
    """Base exception for all uploader errors."""
    pass


class ConfigurationError(UploaderError):
    """Raised when required settings are missing or invalid."""
    pass


class FileHashError(UploaderError):
    """Raised when the exact-digest pass over a file fails."""
    pass


class IncompleteWriteError(FileHashError):
    """Raised when a digest accumulator does not consume a whole chunk."""
    pass


class FuzzyHashError(UploaderError):
    """Raised when the fuzzy hash of a file cannot be computed."""
    pass


class ClientError(UploaderError):
    """Raised when a request to the Demisto server fails."""
    pass


class UploadError(UploaderError):
    """Raised when a batch cannot be persisted to its case."""
    pass


class LimitReachedError(UploaderError):
    """Raised when the configured file limit has been reached."""
    pass
