"""Library index and service errors."""


class LibraryError(Exception):
    """Raised when a library operation refers to an unknown document or fails on disk."""


class CategoryError(ValueError):
    """Raised for invalid category operations, such as renaming Uncategorized."""
