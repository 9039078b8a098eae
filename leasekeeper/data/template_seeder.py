"""
Stock agricultural lease templates.

Seeds the templates tier with Markdown lease templates carrying the
placeholder tokens understood by the lease composer. Seeding only happens
when the tier holds no templates, so user supplied templates are never
replaced.
"""

from pathlib import Path
from typing import List, Tuple

import structlog

from leasekeeper.core.exceptions import FileAccessError
from leasekeeper.core.models import DirectoryTier
from leasekeeper.data.directory_registry import DirectoryRegistry

logger = structlog.get_logger(__name__)


_TEMPLATE_VARIABLES = """## Template Variables
- `{{lease_id}}` - Unique lease identifier
- `{{property_name}}` - Name of the leased property
- `{{farmer_name}}` - Name of the farmer/tenant
- `{{growing_year}}` - Growing season year
- `{{start_date}}` - Lease start date
- `{{end_date}}` - Lease end date
- `{{rent_amount}}` - Total rent amount
- `{{rent_frequency}}` - Payment frequency
"""

_SIGNATURES = """## Signatures and Date
**Landlord Signature:** ________________________________ **Date:** ________

**Tenant Signature:** __________________________________ **Date:** ________
"""


CASH_RENT_TEMPLATE = """# Cash Rent Agricultural Lease Agreement

**Template Version:** 1.0
**Lease Type:** Cash Rent
**Growing Year:** {{growing_year}}

""" + _TEMPLATE_VARIABLES + """
## Lease Overview
This lease agreement establishes a cash rent arrangement for agricultural land for the growing season of {{growing_year}}.

## Section 1: Parties and Property
### 1.1 Tenant/Farmer Information
- **Farmer/Tenant:** {{farmer_name}}
- **Contact Information:** [To be filled]

### 1.2 Property Description
- **Property Name:** {{property_name}}
- **Legal Description:** [To be filled]
- **Tillable Acres:** [To be filled]

## Section 2: Lease Terms
### 2.1 Lease Period
- **Start Date:** {{start_date}}
- **End Date:** {{end_date}}
- **Growing Season:** {{growing_year}}

### 2.2 Rent and Payment Terms
- **Total Annual Rent:** ${{rent_amount}}
- **Payment Frequency:** {{rent_frequency}}
- **Payment Method:** [Check/Electronic Transfer]

## Section 3: Property Use and Restrictions
- [ ] **Row Crop Production** - Corn, soybeans, etc.
- [ ] **Small Grain Production** - Wheat, oats, barley
- [ ] **Hay Production** - Alfalfa, timothy, clover
- [ ] **No Tillage of CRP/Wetlands** without written permission

## Section 4: Lease Termination and Renewal
- **Notice Period:** [30/60/90 days]
- [ ] **Automatic Renewal** - Unless notice given
- [ ] **Right of First Refusal** - Tenant has first option

""" + _SIGNATURES + """
---
*This lease agreement is generated for the {{growing_year}} growing season and should be reviewed by legal counsel before execution.*
"""

CROP_SHARE_TEMPLATE = """# Crop Share Agricultural Lease Agreement

**Template Version:** 1.0
**Lease Type:** Crop Share
**Growing Year:** {{growing_year}}

""" + _TEMPLATE_VARIABLES + """
## Lease Overview
This crop share lease agreement between {{farmer_name}} and the owner of {{property_name}} establishes a percentage-based sharing arrangement for the growing season of {{growing_year}}.

## Section 1: Share Arrangement
- **Landlord Share:** _____%
- **Tenant Share:** _____%
- **Seed Costs:** Landlord ____% / Tenant ____%
- **Fertilizer:** Landlord ____% / Tenant ____%

## Section 2: Harvest Division
- [ ] **Physical Division** - Crops divided at harvest
- [ ] **Elevator Division** - Division at point of sale

## Section 3: Lease Period
- **Start Date:** {{start_date}}
- **End Date:** {{end_date}}

""" + _SIGNATURES + """
---
*This crop share lease agreement is generated for the {{growing_year}} growing season.*
"""

FLEXIBLE_CASH_RENT_TEMPLATE = """# Flexible Cash Rent Agricultural Lease Agreement

**Template Version:** 1.0
**Lease Type:** Flexible Cash Rent
**Growing Year:** {{growing_year}}

""" + _TEMPLATE_VARIABLES + """
## Lease Overview
This flexible cash rent lease provides for rent adjustments based on commodity prices and/or yields for the growing season of {{growing_year}}.

## Section 1: Base Rent and Adjustments
- **Base Cash Rent:** ${{rent_amount}} per acre
- **Payment Frequency:** {{rent_frequency}}
- **Base Corn Price:** $________ per bushel
- **Base Yield:** ________ bushels per acre

## Section 2: Parties
- **Property Name:** {{property_name}}
- **Farmer/Tenant:** {{farmer_name}}
- **Start Date:** {{start_date}}
- **End Date:** {{end_date}}

""" + _SIGNATURES + """
---
*This flexible cash rent lease is generated for the {{growing_year}} growing season.*
"""

PASTURE_GRAZING_TEMPLATE = """# Pasture Grazing Lease Agreement

**Template Version:** 1.0
**Lease Type:** Pasture Grazing
**Growing Year:** {{growing_year}}

## Section 1: Grazing Terms
- **Pasture:** {{property_name}}
- **Grazier:** {{farmer_name}}
- **Grazing Start Date:** {{start_date}}
- **Grazing End Date:** {{end_date}}
- **Maximum Animal Units:** ________ AUs

## Section 2: Payment Terms
- **Fixed Annual Rate:** ${{rent_amount}}
- **Payment Schedule:** {{rent_frequency}}

## Section 3: Grazing Management
- [ ] **Fence Maintenance:** [Landlord/Tenant responsibility]
- [ ] **Water System Maintenance:** [Landlord/Tenant responsibility]

""" + _SIGNATURES + """
---
*This pasture grazing lease is generated for the {{growing_year}} season.*
"""

CUSTOM_FARMING_TEMPLATE = """# Custom Farming Agreement

**Template Version:** 1.0
**Lease Type:** Custom Farming
**Growing Year:** {{growing_year}}

## Section 1: Custom Services
- **Landowner Property:** {{property_name}}
- **Custom Operator:** {{farmer_name}}
- [ ] **Planting:** $________ per acre
- [ ] **Harvesting:** $________ per acre or _____ % of crop

## Section 2: Payment Terms
- **Total Estimated Cost:** ${{rent_amount}}
- **Payment Schedule:** {{rent_frequency}}

""" + _SIGNATURES + """
---
*This custom farming agreement is generated for the {{growing_year}} season.*
"""

STOCK_TEMPLATES: List[Tuple[str, str]] = [
    ("Cash_Rent_Agricultural_Lease", CASH_RENT_TEMPLATE),
    ("Crop_Share_Agricultural_Lease", CROP_SHARE_TEMPLATE),
    ("Flexible_Cash_Rent_Lease", FLEXIBLE_CASH_RENT_TEMPLATE),
    ("Pasture_Grazing_Lease", PASTURE_GRAZING_TEMPLATE),
    ("Custom_Farming_Agreement", CUSTOM_FARMING_TEMPLATE),
]


class TemplateSeeder:
    """Imports the stock lease templates into an empty templates tier."""

    def __init__(self, registry: DirectoryRegistry):
        self.registry = registry

    def seed_templates_if_needed(self) -> List[str]:
        """
        Write the stock templates when the templates tier is empty.

        Returns:
            Names of the templates written; empty when templates already existed

        Raises:
            FileAccessError: If the tier cannot be listed or a template cannot
                be written; templates written before the failure are removed
        """
        try:
            existing = self.registry.list_documents(DirectoryTier.TEMPLATES)
        except OSError as e:
            raise FileAccessError(f"Unable to list lease templates: {e}") from e
        if existing:
            logger.info("Lease templates already exist", count=len(existing))
            return []

        seeded = []
        written = []
        for name, content in STOCK_TEMPLATES:
            path = self.registry.document_path(DirectoryTier.TEMPLATES, name)
            try:
                path.write_text(content, encoding="utf-8")
            except OSError as e:
                logger.error("Template seeding failed", template=name, error=str(e))
                self._remove(written + [path])
                raise FileAccessError(f"Unable to write template '{name}': {e}") from e
            written.append(path)
            seeded.append(name)
            logger.debug("Created lease template", template=name)

        logger.info("Seeded lease templates", count=len(seeded))
        return seeded

    @staticmethod
    def _remove(paths: List[Path]) -> None:
        for path in paths:
            try:
                path.unlink()
            except FileNotFoundError:
                pass
