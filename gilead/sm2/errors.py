"""
Error types for the SM-2 core.
"""


class InvalidArgument(ValueError):
    """A quality rating outside the accepted 0-5 domain."""


class StorageUnavailable(RuntimeError):
    """The keyed text storage could not be read or written."""
