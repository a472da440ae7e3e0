"""Metadata store errors."""


class StateError(Exception):
    """Base exception for metadata store operations."""


class StateSaveError(StateError):
    """Raised when the metadata snapshot cannot be written.

    In-memory state held by the caller is left as is; the save may be retried.
    """
