from pathlib import PurePath

from protean.exceptions import ValidationError

from marketplace.storage.port import ALLOWED_EXTENSIONS, MAX_PROOF_BYTES


def validated_extension(content: bytes, filename: str) -> str:
    """Return the lowercase extension of an acceptable image upload, or raise."""
    extension = PurePath(filename or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise ValidationError({"payment_proof": ["Only image files are allowed (jpeg, jpg, png, gif, webp)"]})
    if not content:
        raise ValidationError({"payment_proof": ["Payment proof file is empty"]})
    if len(content) > MAX_PROOF_BYTES:
        raise ValidationError({"payment_proof": ["Payment proof must be 5MB or smaller"]})
    return extension
