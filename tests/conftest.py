"""Configure pytest fixtures and environment for LeaseKeeper tests."""

from datetime import datetime

import pytest
from dotenv import load_dotenv

from leasekeeper.core.config import reset_settings
from leasekeeper.core.models import DirectoryTier, LeaseCreationData
from leasekeeper.data.directory_registry import DirectoryRegistry

LEASE_ENV_VARS = (
    "LEASE_ROOT_DIR",
    "LEASE_BASE_DIR_NAME",
    "LEASE_MAX_VERSIONS",
    "LEASE_SEED_TEMPLATES",
    "DEBUG",
    "LOG_JSON",
)

SAMPLE_TEMPLATE = """# Standard Cash Lease

**Growing Year:** {{growing_year}}

## Parties
- **Property:** {{property_name}}
- **Farmer:** {{farmer_name}}

## Terms
- **Rent:** ${{rent_amount}} paid {{rent_frequency}}
- **Period:** {{start_date}} to {{end_date}}
- **Notes:** {{landlord_notes}}
"""

FIXED_CREATED_AT = datetime(2025, 3, 1, 9, 5)


def pytest_sessionstart(session):
    """Load environment variables from a local .env when present."""
    load_dotenv()


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Keep tests independent of the caller's environment and .env file."""
    for name in LEASE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def lease_root(tmp_path):
    """Root directory the lease tree is created under."""
    root = tmp_path / "documents"
    root.mkdir()
    return root


@pytest.fixture
def registry(lease_root):
    return DirectoryRegistry(lease_root)


@pytest.fixture
def write_template(registry):
    """Write a master template and return its path."""

    def _write(name="StandardCashLease", content=SAMPLE_TEMPLATE):
        path = registry.path_for(DirectoryTier.TEMPLATES) / f"{name}.md"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_working_draft(registry):
    """Write a working draft and return its path."""

    def _write(name="Draft1", content=SAMPLE_TEMPLATE):
        path = registry.path_for(DirectoryTier.WORKING) / f"{name}.md"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def lease_data():
    return LeaseCreationData(
        property_name="Sunny Acres",
        farmer_name="J. Smith",
        growing_year=2025,
    )


@pytest.fixture
def sample_template():
    return SAMPLE_TEMPLATE


@pytest.fixture
def created_at():
    """Fixed creation timestamp for deterministic lease headers."""
    return FIXED_CREATED_AT
