"""Custom exceptions for package conversion."""


class ConversionError(Exception):
    """Base exception for all conversion errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class PackageIOError(ConversionError):
    """Raised when reading or writing storage or a stream fails."""

    pass


class PackageFormatError(ConversionError):
    """Raised when an input archive is not a valid package of the expected type."""

    def __init__(self, message: str, path: str | None = None, *args, **kwargs):
        self.path = path
        super().__init__(message, *args, **kwargs)


class InternalInconsistencyError(ConversionError):
    """Raised on a defect: the pipeline reached a state it should never reach."""

    pass


class PackageBuildError(InternalInconsistencyError):
    """Raised when a package model cannot be serialized to a directory."""

    pass


class ManifestPatchError(InternalInconsistencyError):
    """Raised when the built manifest no longer contains the text to patch."""

    def __init__(self, message: str, manifest_path: str | None = None):
        self.manifest_path = manifest_path
        super().__init__(message)
