"""
Audit fingerprints for completed leases.

A fingerprint is the SHA-256 digest of a document's exact bytes, as 64
lowercase hex characters. The short form is the leading eight characters of
the full digest.
"""

import hashlib
from pathlib import Path
from typing import Union

import structlog

from leasekeeper.core.exceptions import FileAccessError
from leasekeeper.core.models import SHORT_HASH_LENGTH

logger = structlog.get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


class AuditFingerprinter:
    """Computes SHA-256 audit fingerprints."""

    @staticmethod
    def hash_bytes(data: bytes) -> str:
        return hashlib.sha256(data).hexdigest()

    @staticmethod
    def short_hash(full_hash: str) -> str:
        return full_hash[:SHORT_HASH_LENGTH]

    def hash_file(self, path: Union[str, Path]) -> str:
        """
        Hash a file's entire content.

        Raises:
            FileAccessError: If the file cannot be read
        """
        digest = hashlib.sha256()
        try:
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                    digest.update(chunk)
        except OSError as e:
            raise FileAccessError(f"Unable to hash {path}: {e}") from e

        full_hash = digest.hexdigest()
        logger.debug("Hashed file", path=str(path), short_hash=self.short_hash(full_hash))
        return full_hash
