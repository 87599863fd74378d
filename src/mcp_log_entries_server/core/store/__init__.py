"""File-backed log store.

Implements the store adapter interface over local log files.
"""

from __future__ import annotations

from .file_store import FileLogStore
from .loader import StoredDocument, iter_documents, load_documents
from .matching import QueryMatcher

__all__ = [
    "FileLogStore",
    "QueryMatcher",
    "StoredDocument",
    "iter_documents",
    "load_documents",
]
