import hashlib


class ImageHashingService:
    """Deterministic digests used as content-addressed cache keys for images."""

    @staticmethod
    def hash_image_reference(reference: str) -> str:
        """
        Hash an image reference (typically its public URL) with SHA-256.

        Surrounding whitespace is ignored so that the same reference submitted
        with stray padding maps to the same cache entry.

        Args:
            reference: The image reference string

        Returns:
            The lowercase hex digest (64 characters)
        """
        canonical = reference.strip()
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()

    @staticmethod
    def hash_image_bytes(data: bytes) -> str:
        """
        Hash raw image content with SHA-256.

        Args:
            data: The image bytes

        Returns:
            The lowercase hex digest (64 characters)
        """
        return hashlib.sha256(data).hexdigest()
