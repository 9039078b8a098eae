"""
Year partitions of the completed tier.

Read-only browsing of completed leases for audit: which growing years exist
and which lease files each year holds.
"""

import os
from datetime import datetime
from typing import List

import structlog

from leasekeeper.core.exceptions import FileAccessError
from leasekeeper.core.models import LEASE_EXTENSION, DirectoryTier, LeaseFileInfo
from leasekeeper.data.directory_registry import DirectoryRegistry

logger = structlog.get_logger(__name__)


def creation_time(stat_result: os.stat_result) -> datetime:
    """File creation time, or inode change time where birth time is unavailable."""
    timestamp = getattr(stat_result, "st_birthtime", None)
    if timestamp is None:
        timestamp = stat_result.st_ctime
    return datetime.fromtimestamp(timestamp)


class YearIndex:
    """Lists growing years and the completed leases filed under each."""

    def __init__(self, registry: DirectoryRegistry):
        self.registry = registry

    def list_years(self) -> List[int]:
        """Years with a partition directory, newest first."""
        completed_dir = self.registry.path_for(DirectoryTier.COMPLETED)
        try:
            entries = list(completed_dir.iterdir())
        except OSError as e:
            raise FileAccessError(f"Unable to list completed leases: {e}") from e

        years = [
            int(entry.name)
            for entry in entries
            if entry.is_dir() and entry.name.isascii() and entry.name.isdecimal()
        ]
        return sorted(years, reverse=True)

    def list_files(self, year: int) -> List[LeaseFileInfo]:
        """
        Completed lease files for a year, most recently created first.

        Returns an empty list when the year has no partition.
        """
        year_dir = self.registry.year_path(year)
        if not year_dir.is_dir():
            return []

        infos = []
        try:
            for path in year_dir.iterdir():
                if path.suffix != LEASE_EXTENSION or not path.is_file():
                    continue
                stat_result = path.stat()
                infos.append(
                    LeaseFileInfo(
                        file_name=path.name,
                        file_path=str(path),
                        creation_date=creation_time(stat_result),
                        file_size=stat_result.st_size,
                        year=year,
                    )
                )
        except OSError as e:
            logger.error("Listing year failed", year=year, error=str(e))
            raise FileAccessError(f"Unable to list leases for {year}: {e}") from e

        infos.sort(key=lambda info: (info.creation_date, info.file_name), reverse=True)
        return infos
