"""Errors raised when repository storage is present but unusable."""


class RevisionError(Exception):
    """Base class for failures that abort revision detection."""


class MalformedIndexError(RevisionError):
    """A pack index has an unknown magic, an unsupported version or is truncated."""


class DecompressionError(RevisionError):
    """Object data exists but does not inflate."""


class ObjectReadError(RevisionError):
    """Object data exists but could not be read.

    Treated as transient: results depending on it are never cached.
    """
