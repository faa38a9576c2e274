"""File store writing payment proofs to a local directory."""

from pathlib import Path
from uuid import uuid4

import structlog

from marketplace.storage.port import FileStore
from marketplace.storage.validation import validated_extension

logger = structlog.get_logger(__name__)


class LocalFileStore(FileStore):
    """Stores files under ``root`` and hands out ``<public_prefix>/<name>`` references."""

    def __init__(self, root: str | Path, public_prefix: str = "/uploads/receipts") -> None:
        self.root = Path(root)
        self.public_prefix = public_prefix.rstrip("/")

    def store(self, content: bytes, filename: str) -> str:
        extension = validated_extension(content, filename)
        self.root.mkdir(parents=True, exist_ok=True)
        name = f"receipt-{uuid4().hex}{extension}"
        (self.root / name).write_bytes(content)
        logger.debug("Stored payment proof", name=name, size=len(content))
        return f"{self.public_prefix}/{name}"

    def path_for(self, reference: str) -> Path:
        return self.root / Path(reference).name

    def delete(self, reference: str) -> None:
        self.path_for(reference).unlink(missing_ok=True)
        logger.debug("Deleted payment proof", reference=reference)
