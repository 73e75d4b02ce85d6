"""
Exceptions raised by r2-local-sync operations
"""


class SyncError(Exception):
    """Base exception for sync errors."""

    pass


class ConfigError(SyncError):
    """Raised when required configuration (credentials) is missing."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class RuntimeUnavailableError(SyncError):
    """Raised when the wrangler CLI cannot be executed."""

    pass


class RemoteListError(SyncError):
    """Raised when listing the remote bucket fails."""

    pass


class DownloadError(SyncError):
    """Raised when an object cannot be downloaded from the remote bucket."""

    pass


class LocalListError(SyncError):
    """Raised when the local Miniflare database cannot be read."""

    pass


class UploadError(SyncError):
    """Raised when an object cannot be written into the local bucket."""

    pass


class ToolError(SyncError):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ScratchDirectoryError(SyncError):
    """Raised when the scratch directory cannot be used safely."""

    pass
