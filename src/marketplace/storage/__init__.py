"""Payment-proof file store adapters.

``FILE_STORE_ADAPTER`` picks the adapter: ``local`` (default, writing to
``UPLOAD_DIR``) or ``memory``.
"""

import os

from marketplace.storage.port import FileStore

_current_store: FileStore | None = None


def get_file_store() -> FileStore:
    global _current_store
    if _current_store is None:
        adapter = os.environ.get("FILE_STORE_ADAPTER", "local")
        if adapter == "local":
            from marketplace.storage.local_adapter import LocalFileStore

            _current_store = LocalFileStore(os.environ.get("UPLOAD_DIR", "uploads/receipts"))
        elif adapter == "memory":
            from marketplace.storage.memory_adapter import InMemoryFileStore

            _current_store = InMemoryFileStore()
        else:
            raise ValueError(f"Unknown file store adapter: {adapter}")
    return _current_store


def set_file_store(store: FileStore) -> None:
    global _current_store
    _current_store = store


def reset_file_store() -> None:
    global _current_store
    _current_store = None
