"""File store port for payment-proof images.

Checkout stores the buyer's proof of payment before any order exists and
deletes it again if the checkout is aborted. Orders keep only the
reference string returned by ``store``.
"""

from abc import ABC, abstractmethod

ALLOWED_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})
MAX_PROOF_BYTES = 5 * 1024 * 1024


class FileStore(ABC):
    @abstractmethod
    def store(self, content: bytes, filename: str) -> str:
        """Persist ``content`` and return a reference to it."""
        ...

    @abstractmethod
    def delete(self, reference: str) -> None:
        """Remove a stored file. Unknown references are ignored."""
        ...
