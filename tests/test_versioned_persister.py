"""Validate completed-lease naming, collision handling and persistence."""

import errno
import hashlib
import itertools
import os
import re

import pytest

from leasekeeper.core.exceptions import (
    DirectoryCreationFailed,
    FileCreationFailed,
    InvalidTemplate,
    ValidationError,
    WorkingTemplateNotFound,
)
from leasekeeper.core.models import DirectoryTier, LeaseCreationData, LeaseFileName
from leasekeeper.services.persistence_service import (
    VersionedPersister,
    derive_farm_prefix,
    generate_unique_suffix,
)

FILE_NAME_GRAMMAR = re.compile(r"^[A-Z]{4}[0-9]{4}V[0-9]{2}[A-Z0-9]{4}\.md$")


def fixed_suffix(value="AB12"):
    return lambda: value


class TestNamingHelpers:
    """Farm prefix and unique suffix derivation."""

    @pytest.mark.parametrize(
        "property_name,expected",
        [
            ("Sunny Acres", "SUNN"),
            ("sunset farms", "SUNS"),
            ("Al", "ALXX"),
            ("O'Neil Ranch", "ONEI"),
            ("40 Acres", "ACRE"),
            (None, "FARM"),
            ("", "FARM"),
            ("1234", "FARM"),
        ],
    )
    def test_derive_farm_prefix(self, property_name, expected):
        assert derive_farm_prefix(property_name) == expected

    def test_unique_suffix_is_four_upper_hex(self):
        for _ in range(50):
            assert re.fullmatch(r"[0-9A-F]{4}", generate_unique_suffix())


class TestVersionedPersister:
    """Completed lease creation."""

    def test_creates_lease_in_year_directory(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        persister = VersionedPersister(registry)

        lease = persister.create_completed_lease("Draft1", lease_data)

        year_dir = registry.path_for(DirectoryTier.COMPLETED) / "2025"
        assert lease.file_path == str(year_dir / lease.file_name)
        assert lease.year_directory == str(year_dir)
        assert os.path.isfile(lease.file_path)
        assert FILE_NAME_GRAMMAR.match(lease.file_name)
        assert lease.file_name.startswith("SUNN2025V01")
        assert lease.lease_data == lease_data

    def test_placeholders_replaced_in_file(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")

        lease = VersionedPersister(registry).create_completed_lease("Draft1", lease_data)

        with open(lease.file_path, encoding="utf-8") as f:
            content = f.read()
        assert "- **Property:** Sunny Acres" in content
        assert "{{property_name}}" not in content
        assert "## Lease Agreement Details" in content

    def test_hash_matches_file_on_disk(self, registry, write_working_draft, lease_data):
        """The returned fingerprint equals an independent hash of the file."""
        write_working_draft("Draft1")

        lease = VersionedPersister(registry).create_completed_lease("Draft1", lease_data)

        with open(lease.file_path, "rb") as f:
            recomputed = hashlib.sha256(f.read()).hexdigest()
        assert lease.content_hash == recomputed
        assert lease.file_hash == recomputed
        assert lease.long_hash == recomputed
        assert lease.short_hash == recomputed[:8]
        assert len(lease.content_hash) == 64

    def test_lease_id_is_fresh(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        persister = VersionedPersister(registry)

        first = persister.create_completed_lease("Draft1", lease_data)
        second = persister.create_completed_lease("Draft1", lease_data)

        assert first.id != second.id

    def test_sequential_leases_get_increasing_versions(
        self, registry, write_working_draft, lease_data
    ):
        """Repeated creations for one property and year bump the version."""
        write_working_draft("Draft1")
        persister = VersionedPersister(registry)

        names = [persister.create_completed_lease("Draft1", lease_data).file_name for _ in range(5)]

        assert len(set(names)) == 5
        versions = [LeaseFileName.parse(name).version for name in names]
        assert versions == [1, 2, 3, 4, 5]
        assert all(name.startswith("SUNN2025") for name in names)

    def test_collision_keeps_prefix_year_and_suffix(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        persister = VersionedPersister(registry, suffix_factory=fixed_suffix("AB12"))

        first = persister.create_completed_lease("Draft1", lease_data)
        second = persister.create_completed_lease("Draft1", lease_data)

        assert first.file_name == "SUNN2025V01AB12.md"
        assert second.file_name == "SUNN2025V02AB12.md"

    def test_suffix_containing_v_is_handled(self, registry, write_working_draft):
        """Version bumps use fixed offsets, a V in the name is harmless."""
        write_working_draft("Draft1")
        data = LeaseCreationData(property_name="Vivid Valley", growing_year=2025)
        persister = VersionedPersister(registry, suffix_factory=fixed_suffix("VV01"))

        names = [persister.create_completed_lease("Draft1", data).file_name for _ in range(3)]

        assert names == ["VIVI2025V01VV01.md", "VIVI2025V02VV01.md", "VIVI2025V03VV01.md"]

    def test_first_free_version_wins(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        year_dir = registry.year_path(2025, create=True)
        for version in (1, 2, 4):
            (year_dir / f"SUNN2025V{version:02d}AB12.md").write_text("existing", encoding="utf-8")

        lease = VersionedPersister(
            registry, suffix_factory=fixed_suffix("AB12")
        ).create_completed_lease("Draft1", lease_data)

        assert lease.file_name == "SUNN2025V03AB12.md"

    def test_other_properties_do_not_collide(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        persister = VersionedPersister(registry)
        other = LeaseCreationData(property_name="Hilltop", growing_year=2025)

        persister.create_completed_lease("Draft1", lease_data)
        lease = persister.create_completed_lease("Draft1", other)

        assert lease.file_name.startswith("HILL2025V01")

    def test_version_exhaustion_fails_without_overwrite(
        self, registry, write_working_draft, lease_data
    ):
        """With V01..V99 taken the next creation fails and nothing changes."""
        write_working_draft("Draft1")
        year_dir = registry.year_path(2025, create=True)
        for version in range(1, 100):
            (year_dir / f"SUNN2025V{version:02d}AB12.md").write_text(
                f"original {version}", encoding="utf-8"
            )

        persister = VersionedPersister(registry, suffix_factory=fixed_suffix("AB12"))
        with pytest.raises(FileCreationFailed) as exc_info:
            persister.create_completed_lease("Draft1", lease_data)

        assert "99 attempts" in str(exc_info.value)
        remaining = sorted(os.listdir(year_dir))
        assert len(remaining) == 99
        assert (year_dir / "SUNN2025V07AB12.md").read_text(encoding="utf-8") == "original 7"

    def test_configurable_version_limit(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        persister = VersionedPersister(
            registry, max_versions=2, suffix_factory=fixed_suffix("AB12")
        )

        persister.create_completed_lease("Draft1", lease_data)
        persister.create_completed_lease("Draft1", lease_data)
        with pytest.raises(FileCreationFailed):
            persister.create_completed_lease("Draft1", lease_data)

    @pytest.mark.parametrize("max_versions", [0, 100])
    def test_invalid_version_limit(self, registry, max_versions):
        with pytest.raises(ValidationError):
            VersionedPersister(registry, max_versions=max_versions)

    def test_concurrent_claim_advances_version(
        self, registry, write_working_draft, lease_data, monkeypatch
    ):
        """An exclusive-create conflict moves on to the next version."""
        write_working_draft("Draft1")
        year_dir = registry.year_path(2025, create=True)
        persister = VersionedPersister(registry, suffix_factory=fixed_suffix("AB12"))
        real_link = os.link
        calls = itertools.count()

        def racing_link(src, dst):
            # Another writer claims V01 between the scan and the create
            if next(calls) == 0:
                with open(dst, "w", encoding="utf-8") as f:
                    f.write("other writer")
            return real_link(src, dst)

        monkeypatch.setattr(os, "link", racing_link)

        lease = persister.create_completed_lease("Draft1", lease_data)

        assert lease.file_name == "SUNN2025V02AB12.md"
        assert (year_dir / "SUNN2025V01AB12.md").read_text(encoding="utf-8") == "other writer"

    @pytest.mark.parametrize("code", [errno.EPERM, errno.ENOTSUP])
    def test_filesystem_without_hard_links(
        self, registry, write_working_draft, lease_data, monkeypatch, code
    ):
        """When link() is refused the lease is written by exclusive create."""
        write_working_draft("Draft1")
        year_dir = registry.year_path(2025, create=True)
        (year_dir / "SUNN2025V01AB12.md").write_text("existing", encoding="utf-8")

        def no_link(src, dst):
            raise OSError(code, os.strerror(code))

        monkeypatch.setattr(os, "link", no_link)
        persister = VersionedPersister(registry, suffix_factory=fixed_suffix("AB12"))

        lease = persister.create_completed_lease("Draft1", lease_data)

        assert lease.file_name == "SUNN2025V02AB12.md"
        with open(lease.file_path, "rb") as f:
            assert hashlib.sha256(f.read()).hexdigest() == lease.content_hash
        assert (year_dir / "SUNN2025V01AB12.md").read_text(encoding="utf-8") == "existing"
        assert sorted(os.listdir(year_dir)) == ["SUNN2025V01AB12.md", "SUNN2025V02AB12.md"]

    def test_exclusive_create_conflict_advances_version(
        self, registry, write_working_draft, lease_data, monkeypatch
    ):
        """Without hard links a name claimed concurrently is still never overwritten."""
        write_working_draft("Draft1")
        year_dir = registry.year_path(2025, create=True)
        calls = itertools.count()

        def no_link_racing(src, dst):
            if next(calls) == 0:
                with open(dst, "w", encoding="utf-8") as f:
                    f.write("other writer")
            raise OSError(errno.EPERM, os.strerror(errno.EPERM))

        monkeypatch.setattr(os, "link", no_link_racing)
        persister = VersionedPersister(registry, suffix_factory=fixed_suffix("AB12"))

        lease = persister.create_completed_lease("Draft1", lease_data)

        assert lease.file_name == "SUNN2025V02AB12.md"
        assert (year_dir / "SUNN2025V01AB12.md").read_text(encoding="utf-8") == "other writer"

    def test_other_link_errors_fail(self, registry, write_working_draft, lease_data, monkeypatch):
        write_working_draft("Draft1")

        def broken_link(src, dst):
            raise OSError(errno.EIO, os.strerror(errno.EIO))

        monkeypatch.setattr(os, "link", broken_link)

        with pytest.raises(FileCreationFailed):
            VersionedPersister(registry).create_completed_lease("Draft1", lease_data)

        assert os.listdir(registry.year_path(2025)) == []

    def test_no_staging_files_left_behind(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1")
        persister = VersionedPersister(
            registry, max_versions=1, suffix_factory=fixed_suffix("AB12")
        )

        persister.create_completed_lease("Draft1", lease_data)
        with pytest.raises(FileCreationFailed):
            persister.create_completed_lease("Draft1", lease_data)

        year_dir = registry.year_path(2025)
        assert sorted(os.listdir(year_dir)) == ["SUNN2025V01AB12.md"]

    def test_missing_working_draft(self, registry, lease_data):
        with pytest.raises(WorkingTemplateNotFound) as exc_info:
            VersionedPersister(registry).create_completed_lease("Nope", lease_data)

        assert exc_info.value.name == "Nope"
        assert not registry.year_path(2025).exists()

    def test_year_directory_failure_surfaces(self, registry, write_working_draft, lease_data):
        """No fallback into the base completed directory."""
        write_working_draft("Draft1")
        completed_dir = registry.path_for(DirectoryTier.COMPLETED)
        (completed_dir / "2025").write_text("blocking file", encoding="utf-8")

        with pytest.raises(DirectoryCreationFailed):
            VersionedPersister(registry).create_completed_lease("Draft1", lease_data)

        assert sorted(os.listdir(completed_dir)) == ["2025"]

    def test_draft_without_heading(self, registry, write_working_draft, lease_data):
        write_working_draft("Draft1", "No heading here\n")

        with pytest.raises(InvalidTemplate):
            VersionedPersister(registry).create_completed_lease("Draft1", lease_data)

        assert os.listdir(registry.year_path(2025)) == []

    def test_draft_with_byte_order_mark(self, registry, lease_data, created_at):
        """Drafts saved by editors that prepend a BOM still anchor on their heading."""
        draft = registry.path_for(DirectoryTier.WORKING) / "Draft1.md"
        draft.write_bytes(b"\xef\xbb\xbf# Lease\nBody {{property_name}}\n")

        lease = VersionedPersister(registry).create_completed_lease(
            "Draft1", lease_data, created_at=created_at
        )

        with open(lease.file_path, "rb") as f:
            content = f.read()
        assert content.startswith(b"# Lease\n\n## Lease Agreement Details\n")
        assert b"Body Sunny Acres\n" in content
        assert lease.content_hash == hashlib.sha256(content).hexdigest()

    def test_missing_property_uses_farm_prefix(self, registry, write_working_draft):
        write_working_draft("Draft1")
        data = LeaseCreationData(growing_year=2026)

        lease = VersionedPersister(registry).create_completed_lease("Draft1", data)

        assert lease.file_name.startswith("FARM2026V01")
        assert os.path.dirname(lease.file_path).endswith("2026")
