"""Domain service for content fingerprints and change detection."""

import hashlib

from ..entities.card import Card

_ALGORITHMS = {
    "md5": hashlib.md5,
    "sha256": hashlib.sha256,
}


class ContentHashService:
    """Fingerprints canonical card text and decides whether a card changed.

    Text is hashed exactly as given. Canonical serialization is the only
    normalization step, so any character change yields a new fingerprint.
    md5 is the default because the 32-character digest is what the
    ``<!-- id hash -->`` comments in existing documents carry; the digest is
    a change detector, not a security primitive.
    """

    @staticmethod
    def compute_hash(content: str, algorithm: str = "md5") -> str:
        """Compute the hex digest of content.

        Args:
            content: Canonical card text
            algorithm: 'md5' (default) or 'sha256'

        Returns:
            Hexadecimal hash string
        """
        try:
            factory = _ALGORITHMS[algorithm]
        except KeyError:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}") from None
        return factory(content.encode("utf-8")).hexdigest()

    @staticmethod
    def fingerprint(canonical_text: str) -> str:
        """Fingerprint of a card's canonical front + back text."""
        return ContentHashService.compute_hash(canonical_text, "md5")

    @staticmethod
    def hashes_equal(hash1: str | None, hash2: str | None) -> bool:
        return hash1 is not None and hash1 == hash2

    @staticmethod
    def needs_sync(card: Card, fingerprint: str) -> bool:
        """Check whether the card's stored hash differs from its fingerprint."""
        return not ContentHashService.hashes_equal(card.content_hash, fingerprint)
