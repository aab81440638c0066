"""
Voice transcript normalization.

Turns raw speech-to-text (or typed) answers into field values for a listing
draft. Every function here is pure; `normalize` dispatches on the field id
used by the guided dialogue (dotted for nested fields, e.g. "location.city").
"""

import re
from decimal import Decimal
from typing import Callable, Dict, List, Union

from errors import UnknownFieldError

FieldValue = Union[str, List[str]]

SPOKEN_PROPERTY_TYPES = ["apartment", "house", "villa", "commercial", "land"]

INDIAN_STATES = [
    "Andhra Pradesh",
    "Arunachal Pradesh",
    "Assam",
    "Bihar",
    "Chhattisgarh",
    "Goa",
    "Gujarat",
    "Haryana",
    "Himachal Pradesh",
    "Jharkhand",
    "Karnataka",
    "Kerala",
    "Madhya Pradesh",
    "Maharashtra",
    "Manipur",
    "Meghalaya",
    "Mizoram",
    "Nagaland",
    "Odisha",
    "Punjab",
    "Rajasthan",
    "Sikkim",
    "Tamil Nadu",
    "Telangana",
    "Tripura",
    "Uttar Pradesh",
    "Uttarakhand",
    "West Bengal",
    "Andaman and Nicobar Islands",
    "Chandigarh",
    "Dadra and Nagar Haveli and Daman and Diu",
    "Delhi",
    "Jammu and Kashmir",
    "Ladakh",
    "Lakshadweep",
    "Puducherry",
]

LAKH = 100_000
CRORE = 10_000_000

_NUMBER_RE = re.compile(r"\d+(\.\d+)?")
_NON_DIGIT_RE = re.compile(r"[^0-9]")
_NON_DECIMAL_RE = re.compile(r"[^0-9.]")


def normalize_property_type(transcript: str) -> str:
    """First spoken type found wins; unknown answers pass through trimmed."""
    lowered = transcript.lower()
    for kind in SPOKEN_PROPERTY_TYPES:
        if kind in lowered:
            return kind.capitalize()
    return transcript.strip()


def normalize_state(transcript: str, regions: List[str] = INDIAN_STATES) -> str:
    text = transcript.strip()
    if not text:
        return ""
    lowered = text.lower()

    for region in regions:
        if region.lower() == lowered:
            return region

    for region in regions:
        name = region.lower()
        if name in lowered or lowered in name:
            return region

    return text


def _plain_decimal(value: Decimal) -> str:
    # "3500000" rather than "3.5E+6" or "3500000.0"
    return format(value.normalize(), "f")


def parse_indian_amount(transcript: str) -> str:
    """
    Expand spoken prices such as "35 lakh" or "2.5 crore".

    Returns the absolute amount as a decimal string, or "" when the
    transcript holds no number at all.
    """
    text = transcript.lower().strip()
    match = _NUMBER_RE.search(text)
    if not match:
        return ""

    amount = Decimal(match.group(0))
    if "lakh" in text or "lac" in text:
        amount *= LAKH
    elif "crore" in text or "cr" in text:
        amount *= CRORE
    return _plain_decimal(amount)


def digits_only(transcript: str) -> str:
    return _NON_DIGIT_RE.sub("", transcript)


def decimal_only(transcript: str) -> str:
    return _NON_DECIMAL_RE.sub("", transcript)


def trimmed(transcript: str) -> str:
    return transcript.strip()


def normalize_email(transcript: str) -> str:
    return transcript.strip().lower()


def split_features(transcript: str) -> List[str]:
    """Comma separated amenities; blank items are dropped."""
    return [item.strip() for item in transcript.split(",") if item.strip()]


def yes_or_no(transcript: str) -> str:
    return "Yes" if "yes" in transcript.lower() else "No"


NORMALIZERS: Dict[str, Callable[[str], FieldValue]] = {
    "propertyType": normalize_property_type,
    "location.address": trimmed,
    "location.city": trimmed,
    "location.state": normalize_state,
    "location.zipCode": digits_only,
    "price": parse_indian_amount,
    "area": decimal_only,
    "bedrooms": digits_only,
    "bathrooms": digits_only,
    "description": trimmed,
    "features": split_features,
    "agent.name": trimmed,
    "agent.email": normalize_email,
    "agent.phone": digits_only,
    "photoConfirmation": yes_or_no,
}

# Fields whose normalized value is always acceptable, even when empty.
ALWAYS_VALID_FIELDS = frozenset({"features", "photoConfirmation"})


def normalize(field_id: str, transcript: str) -> FieldValue:
    try:
        normalizer = NORMALIZERS[field_id]
    except KeyError:
        raise UnknownFieldError(f"No normalizer for field '{field_id}'")
    return normalizer(transcript or "")


def accepts_empty(field_id: str) -> bool:
    return field_id in ALWAYS_VALID_FIELDS


def is_blank(value: FieldValue) -> bool:
    if isinstance(value, list):
        return len(value) == 0
    return not (value or "").strip()


def is_valid(field_id: str, value: FieldValue) -> bool:
    """Empty results are invalid except for the always-valid fields."""
    return accepts_empty(field_id) or not is_blank(value)
