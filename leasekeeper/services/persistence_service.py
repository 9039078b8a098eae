"""
Completed lease persistence.

Promotes a working draft into the completed tier under a versioned, collision
free file name and fingerprints the persisted bytes.

File names follow ``<farm prefix><year>V<nn><suffix>.md``. Collisions are
resolved by trying version numbers in ascending order with the farm prefix,
year and suffix held fixed. Every write goes through an exclusive create, so
an existing completed lease is never overwritten. The full content is staged
and hard-linked into place; where the filesystem has no hard links the final
name is created exclusively and written directly.
"""

import errno
import os
import tempfile
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import structlog

from leasekeeper.core.config import MAX_VERSION_TOKEN
from leasekeeper.core.exceptions import (
    FileCreationFailed,
    ValidationError,
    WorkingTemplateNotFound,
)
from leasekeeper.core.models import (
    LEASE_EXTENSION,
    CompletedLease,
    LeaseCreationData,
    LeaseFileName,
)
from leasekeeper.data.directory_registry import DirectoryRegistry
from leasekeeper.data.template_store import WorkingCopyService
from leasekeeper.services.audit_service import AuditFingerprinter
from leasekeeper.services.lease_composer import LeaseComposer

logger = structlog.get_logger(__name__)

DEFAULT_FARM_PREFIX = "FARM"
FARM_PREFIX_LENGTH = 4
UNIQUE_SUFFIX_LENGTH = 4

# link() failures meaning the filesystem has no hard links
_NO_HARD_LINK_ERRNOS = frozenset(
    (errno.EPERM, errno.ENOTSUP, getattr(errno, "EOPNOTSUPP", errno.ENOTSUP))
)


def derive_farm_prefix(property_name: Optional[str]) -> str:
    """
    Four letter farm code from a property name.

    Letters are upper-cased and anything else is dropped, so ``Sunny Acres``
    becomes ``SUNN``. Short names are padded with ``X``; a missing name or one
    without letters yields ``FARM``.
    """
    letters = "".join(c for c in (property_name or "").upper() if "A" <= c <= "Z")
    if not letters:
        return DEFAULT_FARM_PREFIX
    return letters[:FARM_PREFIX_LENGTH].ljust(FARM_PREFIX_LENGTH, "X")


def generate_unique_suffix() -> str:
    """Four upper-case hex characters from a fresh UUID."""
    return uuid.uuid4().hex[:UNIQUE_SUFFIX_LENGTH].upper()


class VersionedPersister:
    """Writes completed leases into year partitions of the completed tier."""

    def __init__(
        self,
        registry: DirectoryRegistry,
        composer: Optional[LeaseComposer] = None,
        fingerprinter: Optional[AuditFingerprinter] = None,
        max_versions: int = MAX_VERSION_TOKEN,
        suffix_factory: Callable[[], str] = generate_unique_suffix,
    ):
        if not 1 <= max_versions <= MAX_VERSION_TOKEN:
            raise ValidationError(
                f"max_versions must be between 1 and {MAX_VERSION_TOKEN}",
                details={"max_versions": max_versions},
            )
        self.registry = registry
        self.working_copies = WorkingCopyService(registry)
        self.composer = composer or LeaseComposer()
        self.fingerprinter = fingerprinter or AuditFingerprinter()
        self.max_versions = max_versions
        self.suffix_factory = suffix_factory

    def create_completed_lease(
        self,
        working_draft_name: str,
        data: LeaseCreationData,
        created_at: Optional[datetime] = None,
    ) -> CompletedLease:
        """
        Finalize a working draft as a completed lease.

        Args:
            working_draft_name: Working draft name without extension
            data: Lease data to populate
            created_at: Creation timestamp for the lease header; defaults to now

        Returns:
            The completed lease with its audit fingerprint

        Raises:
            WorkingTemplateNotFound: If the working draft does not exist
            DirectoryCreationFailed: If the year directory cannot be created
            FileAccessError: If the working draft cannot be read
            InvalidTemplate: If the draft has no top-level heading
            FileCreationFailed: If no free version remains or the write fails
        """
        if not self.working_copies.working_draft_exists(working_draft_name):
            raise WorkingTemplateNotFound(working_draft_name)

        year_dir = self.registry.year_path(data.growing_year, create=True)

        initial_name = LeaseFileName(
            farm_prefix=derive_farm_prefix(data.property_name),
            year=data.growing_year,
            version=1,
            unique_suffix=self.suffix_factory(),
        )

        draft_text = self.working_copies.read_working_draft(working_draft_name)
        final_text = self.composer.compose(draft_text, data, created_at=created_at)
        payload = final_text.encode("utf-8")

        final_path = self._persist(year_dir, initial_name, payload)
        content_hash = self.fingerprinter.hash_bytes(payload)

        completed = CompletedLease(
            file_name=final_path.name,
            file_path=str(final_path),
            content_hash=content_hash,
            lease_data=data,
            year_directory=str(year_dir),
        )

        logger.info(
            "Created lease agreement",
            file_name=completed.file_name,
            year=data.growing_year,
            working=working_draft_name,
            short_hash=completed.short_hash,
        )
        return completed

    def _persist(self, year_dir: Path, initial_name: LeaseFileName, payload: bytes) -> Path:
        """Stage the payload once, then claim the first free version."""
        staged = self._stage(year_dir, payload)
        try:
            for version in range(1, self.max_versions + 1):
                candidate = initial_name.with_version(version)
                if self._version_taken(year_dir, candidate):
                    logger.debug("Version taken", version_stem=candidate.version_stem)
                    continue

                target = year_dir / candidate.render()
                try:
                    self._claim(staged, target, payload)
                except FileExistsError:
                    logger.debug("File name claimed concurrently", file_name=target.name)
                    continue
                except OSError as e:
                    raise FileCreationFailed(
                        f"Unable to save lease file: {e}",
                        details={"file_name": target.name},
                    ) from e
                return target
        finally:
            self._discard(staged)

        logger.error(
            "Version numbers exhausted",
            stem=initial_name.version_stem,
            suffix=initial_name.unique_suffix,
            max_versions=self.max_versions,
        )
        raise FileCreationFailed(
            f"Unable to generate unique filename after {self.max_versions} attempts",
            details={"year_directory": str(year_dir)},
        )

    @staticmethod
    def _claim(staged: Path, target: Path, payload: bytes) -> None:
        """
        Publish the staged file under ``target``, failing if the name exists.

        Filesystems without hard links get an exclusive create of ``target``
        followed by a full write instead.
        """
        try:
            os.link(staged, target)
            return
        except OSError as e:
            if e.errno not in _NO_HARD_LINK_ERRNOS:
                raise
            logger.debug("Hard links unsupported, using exclusive create", error=str(e))

        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o644)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
        except OSError:
            VersionedPersister._discard(target)
            raise

    @staticmethod
    def _version_taken(year_dir: Path, candidate: LeaseFileName) -> bool:
        """True when any completed lease already uses this prefix, year and version."""
        return any(year_dir.glob(f"{candidate.version_stem}*{LEASE_EXTENSION}"))

    @staticmethod
    def _stage(year_dir: Path, payload: bytes) -> Path:
        """Write the full payload to a hidden temporary file in the year directory."""
        try:
            fd, staged = tempfile.mkstemp(dir=year_dir, prefix=".lease-", suffix=".tmp")
        except OSError as e:
            raise FileCreationFailed(f"Unable to save lease file: {e}") from e

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(staged, 0o644)
        except OSError as e:
            VersionedPersister._discard(Path(staged))
            raise FileCreationFailed(f"Unable to save lease file: {e}") from e
        return Path(staged)

    @staticmethod
    def _discard(staged: Path) -> None:
        try:
            staged.unlink()
        except FileNotFoundError:
            pass
