"""
Template and working-draft tiers.

Master templates are read-only here; working drafts are byte copies of a
template that external editors may change afterwards. A leading UTF-8 byte
order mark, which some editors write, is dropped when text is read.
"""

import shutil
from typing import List

import structlog

from leasekeeper.core.exceptions import (
    FileAccessError,
    TemplateNotFound,
    WorkingTemplateNotFound,
)
from leasekeeper.core.models import DirectoryTier
from leasekeeper.data.directory_registry import DirectoryRegistry

logger = structlog.get_logger(__name__)


def _list_tier(registry: DirectoryRegistry, tier: DirectoryTier) -> List[str]:
    try:
        return registry.list_documents(tier)
    except OSError as e:
        raise FileAccessError(f"Unable to list {tier.display_name}: {e}") from e


class TemplateStore:
    """Read access to master lease templates."""

    def __init__(self, registry: DirectoryRegistry):
        self.registry = registry

    def list_templates(self) -> List[str]:
        """Return template names without extension, in no particular order."""
        return _list_tier(self.registry, DirectoryTier.TEMPLATES)

    def template_exists(self, name: str) -> bool:
        return self.registry.document_path(DirectoryTier.TEMPLATES, name).is_file()

    def read_template(self, name: str) -> str:
        """
        Read a template's text.

        Raises:
            TemplateNotFound: If the template does not exist
            FileAccessError: If the template cannot be read
        """
        path = self.registry.document_path(DirectoryTier.TEMPLATES, name)
        if not path.is_file():
            raise TemplateNotFound(name)
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(f"Unable to read template '{name}': {e}") from e


class WorkingCopyService:
    """Materializes working drafts from master templates."""

    def __init__(self, registry: DirectoryRegistry):
        self.registry = registry

    def copy_template_to_working(self, template_name: str, working_name: str) -> None:
        """
        Copy a template byte-for-byte into the working tier.

        An existing draft with the same name is replaced.

        Args:
            template_name: Template name without extension
            working_name: Name for the working draft

        Raises:
            TemplateNotFound: If the template does not exist
            FileAccessError: If the copy fails
        """
        source = self.registry.document_path(DirectoryTier.TEMPLATES, template_name)
        destination = self.registry.document_path(DirectoryTier.WORKING, working_name)

        if not source.is_file():
            raise TemplateNotFound(template_name)

        replaced = destination.exists()
        try:
            shutil.copyfile(source, destination)
        except OSError as e:
            logger.error(
                "Template copy failed",
                template=template_name,
                working=working_name,
                error=str(e),
            )
            raise FileAccessError(
                f"Unable to copy template '{template_name}' to '{working_name}': {e}"
            ) from e

        logger.info(
            "Copied template to working",
            template=template_name,
            working=working_name,
            replaced=replaced,
        )

    def list_working_drafts(self) -> List[str]:
        return _list_tier(self.registry, DirectoryTier.WORKING)

    def working_draft_exists(self, name: str) -> bool:
        return self.registry.document_path(DirectoryTier.WORKING, name).is_file()

    def read_working_draft(self, name: str) -> str:
        """
        Read a working draft's current text.

        Raises:
            WorkingTemplateNotFound: If the draft does not exist
            FileAccessError: If the draft cannot be read
        """
        path = self.registry.document_path(DirectoryTier.WORKING, name)
        if not path.is_file():
            raise WorkingTemplateNotFound(name)
        try:
            return path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(f"Unable to read template: {e}") from e
