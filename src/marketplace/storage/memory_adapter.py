"""In-memory file store for tests."""

from uuid import uuid4

from marketplace.storage.port import FileStore
from marketplace.storage.validation import validated_extension


class InMemoryFileStore(FileStore):
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []

    def store(self, content: bytes, filename: str) -> str:
        extension = validated_extension(content, filename)
        reference = f"memory://receipts/receipt-{uuid4().hex}{extension}"
        self.files[reference] = content
        return reference

    def delete(self, reference: str) -> None:
        self.files.pop(reference, None)
        self.deleted.append(reference)
