"""
Display formatting helpers shared by the report sections.

All output is plain text; the renderer decides fonts and layout.
"""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Union

NOT_PROVIDED = "Not provided"      # demographic fields
NOT_AVAILABLE = "N/A"              # clinical fields
NONE_REPORTED = "None reported"
NONE = "None"

# Locale-independent; strftime("%B") follows the process locale
_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_long_date(value: Optional[date], missing: str = NOT_PROVIDED) -> str:
    """3 March 1975"""
    if value is None:
        return missing
    return f"{value.day} {_MONTHS[value.month - 1]} {value.year}"


def format_timestamp(value: datetime) -> str:
    """3 March 2025 at 14:05"""
    return f"{format_long_date(value.date())} at {value:%H:%M}"


def title_case_tag(tag: Union[str, Enum]) -> str:
    """'black-african' -> 'Black African'"""
    text = tag.value if isinstance(tag, Enum) else str(tag)
    return " ".join(part[:1].upper() + part[1:].lower() for part in text.split("-") if part)


def format_tag_list(tags: Iterable[Union[str, Enum]], empty: str = NONE) -> str:
    """Title-case and comma-join tags; the 'none' tag is never shown."""
    labels = [title_case_tag(t) for t in tags if str(getattr(t, "value", t)).lower() != "none"]
    return ", ".join(labels) if labels else empty


def yes_no(value: Union[str, Enum, bool, None]) -> str:
    if isinstance(value, Enum):
        value = value.value
    return "Yes" if value is True or value == "yes" else "No"


def or_default(value: Optional[str], default: str = NOT_PROVIDED) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text if text else default


def format_psa(value: Optional[Decimal], missing: str = NOT_AVAILABLE) -> str:
    if value is None:
        return missing
    return f"{format(value.normalize(), 'f')} ng/mL"
