"""Photo Sorter errors."""


class SorterError(Exception):
    """Base exception for unrecoverable Photo Sorter failures."""


class CacheDirError(SorterError):
    """Raised when no per-user cache directory can be determined."""


class SourceUnavailableError(SorterError):
    """Raised when the source folder cannot be listed."""
