"""
Exceptions raised by clipfiles.
"""


class ClipfilesError(Exception):
    """Base exception for clipfiles errors."""
    pass


class ConfigFileError(ClipfilesError):
    """Raised when there are issues with config files."""
    pass


class InvalidPatternError(ClipfilesError):
    """Raised when an ignore pattern is not a valid glob."""
    pass


class ClipboardUnavailableError(ClipfilesError):
    """Raised when the system clipboard cannot be used."""
    pass
