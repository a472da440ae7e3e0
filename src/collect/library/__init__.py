"""Library index: live files joined with metadata, plus derived views."""

from .errors import CategoryError, LibraryError
from .index import LibraryIndex
from .models import Category, FileRecord, IndexChange, Selection, SortOption, ViewFilter

__all__ = [
    "Category",
    "CategoryError",
    "FileRecord",
    "IndexChange",
    "LibraryError",
    "LibraryIndex",
    "Selection",
    "SortOption",
    "ViewFilter",
]
