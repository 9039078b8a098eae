"""
Lease composition.

Turns template text plus lease data into the final agreement text: a lease
details header is injected below the first top-level heading and every known
``{{token}}`` placeholder is replaced. Composition performs no I/O.
"""

import re
from datetime import date, datetime
from typing import Dict, Optional

import structlog
from jinja2 import BaseLoader, Environment, StrictUndefined, TemplateError

from leasekeeper.core.exceptions import InvalidTemplate
from leasekeeper.core.models import LeaseCreationData

logger = structlog.get_logger(__name__)


# Lease details header, inserted below the document title
HEADER_TEMPLATE = """
## Lease Agreement Details
- **Lease ID:** {{ lease_id }}
- **Property:** {{ property_name }}
- **Farmer:** {{ farmer_name }}
- **Created:** {{ created }}
- **Growing Year:** {{ growing_year }}

"""

PLACEHOLDER_TOKENS = (
    "lease_id",
    "property_name",
    "farmer_name",
    "growing_year",
    "lease_type",
    "start_date",
    "end_date",
    "rent_amount",
    "rent_frequency",
)

_TOKEN_PATTERN = re.compile(r"\{\{([A-Za-z0-9_]+)\}\}")
_TOP_LEVEL_HEADING = re.compile(r"^#[ \t]+\S.*$", re.MULTILINE)


def format_date(value: date) -> str:
    """Medium style date, e.g. ``Mar 1, 2025``."""
    return f"{value:%b} {value.day}, {value.year}"


def format_timestamp(value: datetime) -> str:
    """Medium date with short time, e.g. ``Mar 1, 2025 at 9:05 AM``."""
    hour = value.hour % 12 or 12
    return f"{format_date(value)} at {hour}:{value:%M %p}"


def substitution_values(data: LeaseCreationData) -> Dict[str, str]:
    """Placeholder values for the lease data; absent fields map to ''."""
    return {
        "lease_id": str(data.lease_id) if data.lease_id else "",
        "property_name": data.property_name or "",
        "farmer_name": data.farmer_name or "",
        "growing_year": str(data.growing_year),
        "lease_type": data.lease_type or "",
        "start_date": format_date(data.start_date) if data.start_date else "",
        "end_date": format_date(data.end_date) if data.end_date else "",
        "rent_amount": str(data.rent_amount) if data.rent_amount is not None else "",
        "rent_frequency": data.rent_frequency or "",
    }


def substitute_placeholders(text: str, values: Dict[str, str]) -> str:
    """Replace known tokens in one pass; unknown tokens are left verbatim."""

    def replace(match: "re.Match[str]") -> str:
        return values.get(match.group(1), match.group(0))

    return _TOKEN_PATTERN.sub(replace, text)


class LeaseComposer:
    """Composes final lease text from a template and lease data."""

    def __init__(self):
        self.jinja_env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self.header_template = self.jinja_env.from_string(HEADER_TEMPLATE)

    def render_header(self, data: LeaseCreationData, created_at: datetime) -> str:
        """Render the lease details header block."""
        try:
            return self.header_template.render(
                lease_id=str(data.lease_id) if data.lease_id else "N/A",
                property_name=data.property_name or "N/A",
                farmer_name=data.farmer_name or "N/A",
                created=format_timestamp(created_at),
                growing_year=data.growing_year,
            )
        except TemplateError as e:
            logger.error("Lease header rendering failed", error=str(e))
            raise InvalidTemplate(f"header rendering failed: {e}") from e

    def compose(
        self,
        template_text: str,
        data: LeaseCreationData,
        created_at: Optional[datetime] = None,
    ) -> str:
        """
        Compose the final lease text.

        Args:
            template_text: Template or working draft text
            data: Lease data to populate
            created_at: Creation timestamp shown in the header; defaults to now

        Returns:
            Final lease text

        Raises:
            InvalidTemplate: If the text has no top-level ``#`` heading
        """
        heading = _TOP_LEVEL_HEADING.search(template_text)
        if heading is None:
            raise InvalidTemplate("no top-level '#' heading to anchor the lease details")

        split_at = heading.end()
        if template_text[split_at:split_at + 1] == "\n":
            title, body = template_text[:split_at + 1], template_text[split_at + 1:]
        else:
            # Heading is the last line and has no line break
            title, body = template_text[:split_at] + "\n", template_text[split_at:]

        values = substitution_values(data)
        header = self.render_header(data, created_at or datetime.now())

        return (
            substitute_placeholders(title, values)
            + header
            + substitute_placeholders(body, values)
        )


def compose_lease(
    template_text: str,
    data: LeaseCreationData,
    created_at: Optional[datetime] = None,
) -> str:
    """Compose lease text with a default composer."""
    return LeaseComposer().compose(template_text, data, created_at=created_at)
