"""
Data models and type definitions for LeaseKeeper.

Provides type-safe data structures with validation for lease documents,
completed lease records and the completed-lease file name grammar.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

SHORT_HASH_LENGTH = 8
LEASE_EXTENSION = ".md"
LEASE_FILE_PATTERN = re.compile(r"^[A-Z]{4}[0-9]{4}V[0-9]{2}[A-Z0-9]{4}\.md$")


class DirectoryTier(str, Enum):
    """The three fixed roles a lease directory can play."""

    TEMPLATES = "LeaseTemplates"
    WORKING = "WorkingLeaseTemplates"
    COMPLETED = "CompletedLeaseAgreements"

    @property
    def display_name(self) -> str:
        return {
            DirectoryTier.TEMPLATES: "Lease Template Masters",
            DirectoryTier.WORKING: "Working Lease Templates",
            DirectoryTier.COMPLETED: "Completed Lease Agreements",
        }[self]


class LeaseCreationData(BaseModel):
    """Data supplied by the caller to finalize a lease agreement."""

    lease_id: Optional[UUID] = None
    property_name: Optional[str] = Field(None, max_length=500)
    farmer_name: Optional[str] = Field(None, max_length=500)
    growing_year: int = Field(..., ge=1000, le=9999)
    lease_type: Optional[str] = Field(None, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    rent_amount: Optional[Decimal] = None
    rent_frequency: Optional[str] = Field(None, max_length=100)

    model_config = ConfigDict(frozen=True)

    @field_validator(
        "property_name", "farmer_name", "lease_type", "rent_frequency", mode="before"
    )
    @classmethod
    def blank_to_none(cls, v):
        """Treat blank strings as absent values."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class CompletedLease(BaseModel):
    """
    A finalized lease agreement written to the completed tier.

    The content hash is bound to the exact bytes persisted at creation and is
    never recomputed.
    """

    id: UUID = Field(default_factory=uuid4)
    file_name: str
    file_path: str
    content_hash: str = Field(..., pattern=r"^[0-9a-f]{64}$")
    lease_data: LeaseCreationData
    year_directory: str

    model_config = ConfigDict(frozen=True)

    @computed_field
    @property
    def short_hash(self) -> str:
        return self.content_hash[:SHORT_HASH_LENGTH]

    @property
    def file_hash(self) -> str:
        return self.content_hash

    @property
    def long_hash(self) -> str:
        return self.content_hash


# Result record handed back to collaborators
CreatedLeaseInfo = CompletedLease


class LeaseFileName(BaseModel):
    """
    Parsed completed-lease file name.

    Layout is fixed width: farm prefix (4), year (4), version token (3, ``V``
    plus two digits) and unique suffix (4), followed by ``.md``. Fields are
    read by offset, so a ``V`` inside the prefix or suffix is harmless.
    """

    farm_prefix: str = Field(..., pattern=r"^[A-Z]{4}$")
    year: int = Field(..., ge=1000, le=9999)
    version: int = Field(..., ge=1, le=99)
    unique_suffix: str = Field(..., pattern=r"^[A-Z0-9]{4}$")

    model_config = ConfigDict(frozen=True)

    @property
    def version_token(self) -> str:
        return f"V{self.version:02d}"

    @property
    def stem(self) -> str:
        return f"{self.farm_prefix}{self.year}{self.version_token}{self.unique_suffix}"

    @property
    def version_stem(self) -> str:
        """Prefix, year and version token; shared by names of the same version."""
        return f"{self.farm_prefix}{self.year}{self.version_token}"

    def render(self) -> str:
        return f"{self.stem}{LEASE_EXTENSION}"

    def with_version(self, version: int) -> "LeaseFileName":
        return self.model_copy(update={"version": version})

    @classmethod
    def parse(cls, file_name: str) -> Optional["LeaseFileName"]:
        """Parse a file name, returning None when it does not follow the grammar."""
        if not LEASE_FILE_PATTERN.match(file_name):
            return None
        return cls(
            farm_prefix=file_name[0:4],
            year=int(file_name[4:8]),
            version=int(file_name[9:11]),
            unique_suffix=file_name[11:15],
        )


class LeaseFileInfo(BaseModel):
    """Read model over an existing completed-lease file."""

    file_name: str
    file_path: str
    creation_date: datetime
    file_size: int = Field(..., ge=0)
    year: int

    model_config = ConfigDict(frozen=True)

    @property
    def display_name(self) -> str:
        """Readable form such as ``SUNN (2025) V01``."""
        parsed = LeaseFileName.parse(self.file_name)
        if parsed is None:
            return self.file_name
        return f"{parsed.farm_prefix} ({parsed.year}) {parsed.version_token}"
