"""Error types for uepack.

Every component raises one of the errors below so the CLI can report a
failure with a single handler:

- ValidationError: malformed input (version string, settings, descriptor)
- ResolutionError: no installed engine matches a requested version
- FileSystemError: a directory or file could not be read or removed
- ExternalToolError: the build tool or the archiver failed
"""


class UEPackError(Exception):
    """Base class for all uepack errors."""

    pass


class ValidationError(UEPackError):
    """Raised when user-supplied or on-disk input is malformed."""

    pass


class ResolutionError(UEPackError):
    """Raised when a requested engine version has no matching installation."""

    pass


class FileSystemError(UEPackError):
    """Raised when a path cannot be read, listed, or removed."""

    pass


class ExternalToolError(UEPackError):
    """Raised when an external tool cannot be launched or exits nonzero."""

    pass
