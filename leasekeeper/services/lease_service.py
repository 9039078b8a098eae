"""
Lease document service.

Single entry point over the lease tiers: template listing, working copies,
completed lease creation, year browsing and audit hashing. Construct one per
lease root; nothing here is process global.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from leasekeeper.core.config import MAX_VERSION_TOKEN, Settings, get_settings
from leasekeeper.core.models import CompletedLease, LeaseCreationData, LeaseFileInfo
from leasekeeper.data.directory_registry import DirectoryRegistry
from leasekeeper.data.template_seeder import TemplateSeeder
from leasekeeper.data.template_store import TemplateStore, WorkingCopyService
from leasekeeper.services.audit_service import AuditFingerprinter
from leasekeeper.services.persistence_service import (
    VersionedPersister,
    generate_unique_suffix,
)
from leasekeeper.services.year_index import YearIndex


class LeaseService:
    """Lease lifecycle operations over one lease directory tree."""

    def __init__(
        self,
        root_dir: Union[str, Path],
        base_dir_name: str = "Leases",
        max_versions: int = MAX_VERSION_TOKEN,
        suffix_factory: Callable[[], str] = generate_unique_suffix,
    ):
        self.registry = DirectoryRegistry(root_dir, base_dir_name)
        self.templates = TemplateStore(self.registry)
        self.working_copies = WorkingCopyService(self.registry)
        self.fingerprinter = AuditFingerprinter()
        self.persister = VersionedPersister(
            self.registry,
            fingerprinter=self.fingerprinter,
            max_versions=max_versions,
            suffix_factory=suffix_factory,
        )
        self.year_index = YearIndex(self.registry)
        self.seeder = TemplateSeeder(self.registry)

    def list_templates(self) -> List[str]:
        return self.templates.list_templates()

    def list_working_drafts(self) -> List[str]:
        return self.working_copies.list_working_drafts()

    def copy_template_to_working(self, template_name: str, working_name: str) -> None:
        self.working_copies.copy_template_to_working(template_name, working_name)

    def create_completed_lease(
        self,
        working_draft_name: str,
        data: LeaseCreationData,
        created_at: Optional[datetime] = None,
    ) -> CompletedLease:
        return self.persister.create_completed_lease(
            working_draft_name, data, created_at=created_at
        )

    def list_years(self) -> List[int]:
        return self.year_index.list_years()

    def list_files(self, year: int) -> List[LeaseFileInfo]:
        return self.year_index.list_files(year)

    def hash_file(self, path: Union[str, Path]) -> str:
        return self.fingerprinter.hash_file(path)

    def seed_templates_if_needed(self) -> List[str]:
        return self.seeder.seed_templates_if_needed()


def create_lease_service(settings: Optional[Settings] = None) -> LeaseService:
    """
    Factory function to create a lease service from settings.

    Args:
        settings: Settings to use; the global settings when omitted

    Returns:
        Configured LeaseService
    """
    settings = settings or get_settings()
    service = LeaseService(
        settings.root_dir,
        base_dir_name=settings.base_dir_name,
        max_versions=settings.max_versions,
    )
    if settings.seed_templates:
        service.seed_templates_if_needed()
    return service
