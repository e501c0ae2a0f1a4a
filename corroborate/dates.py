"""Lenient date parsing shared by extraction, synthesis and citations."""

from __future__ import annotations

import re
from datetime import date, datetime

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

MONTH_DATE_PATTERN = re.compile(
    r"\b(?:" + "|".join(MONTH_NAMES) + r")\s+\d{1,2},?\s+\d{4}\b"
)

_FORMATS = ("%B %d, %Y", "%B %d %Y", "%b %d, %Y", "%b %d %Y", "%d %B %Y", "%Y-%m-%d", "%Y")


def parse_date(value: str | None) -> date | None:
    """Parse an ISO timestamp or a written date; None when unparseable."""
    if not value:
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
