"""
Three-tier lease directory layout.

Owns ``<root>/<base>/{LeaseTemplates,WorkingLeaseTemplates,CompletedLeaseAgreements}``
and the year partitions below the completed tier.
"""

from pathlib import Path
from typing import List, Union

import structlog

from leasekeeper.core.exceptions import DirectoryCreationFailed, ValidationError
from leasekeeper.core.models import LEASE_EXTENSION, DirectoryTier

logger = structlog.get_logger(__name__)


class DirectoryRegistry:
    """Creates and resolves the lease directory tiers under a root directory."""

    def __init__(self, root_dir: Union[str, Path], base_dir_name: str = "Leases"):
        """
        Ensure the base directory and every tier exist.

        Args:
            root_dir: Directory the lease tree lives under
            base_dir_name: Name of the lease tree directory

        Raises:
            DirectoryCreationFailed: If any directory cannot be created
        """
        self.root_dir = Path(root_dir)
        self.base_dir = self.root_dir / base_dir_name
        self._ensure_directory(self.base_dir)
        for tier in DirectoryTier:
            self._ensure_directory(self.path_for(tier), label=tier.display_name)

    def _ensure_directory(self, path: Path, label: str = "lease") -> Path:
        existed = path.is_dir()
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Directory creation failed", path=str(path), error=str(e))
            raise DirectoryCreationFailed(str(path), str(e), details={"label": label}) from e
        if not existed:
            logger.info("Created directory", label=label, path=str(path))
        return path

    def path_for(self, tier: DirectoryTier) -> Path:
        """Return the directory for a tier."""
        return self.base_dir / DirectoryTier(tier).value

    def year_path(self, year: int, create: bool = False) -> Path:
        """
        Return the completed-lease partition for a growing year.

        Args:
            year: Growing year
            create: Create the directory when missing

        Raises:
            DirectoryCreationFailed: If ``create`` is set and the directory
                cannot be created
        """
        path = self.path_for(DirectoryTier.COMPLETED) / str(year)
        if create:
            self._ensure_directory(path, label=f"year {year}")
        return path

    def document_path(self, tier: DirectoryTier, name: str) -> Path:
        """Resolve ``<tier>/<name>.md``, rejecting names that leave the tier."""
        if not name or not name.strip():
            raise ValidationError("Document name must not be empty")
        if "/" in name or "\\" in name or name in (".", ".."):
            raise ValidationError(
                f"Document name '{name}' must not contain path separators",
                details={"tier": DirectoryTier(tier).value},
            )
        return self.path_for(tier) / f"{name}{LEASE_EXTENSION}"

    def list_documents(self, tier: DirectoryTier) -> List[str]:
        """Names (extension stripped) of the Markdown documents in a tier."""
        directory = self.path_for(tier)
        return [
            path.stem
            for path in directory.iterdir()
            if path.is_file() and path.suffix == LEASE_EXTENSION
        ]
