"""In-memory project filesystem."""

from .file_store import (
    EDIT_MODES,
    FileStoreChange,
    FileStoreListener,
    StoreStatus,
    VirtualFileStore,
    split_lines,
)

__all__ = [
    "EDIT_MODES",
    "FileStoreChange",
    "FileStoreListener",
    "StoreStatus",
    "VirtualFileStore",
    "split_lines",
]
