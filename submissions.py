"""
Listing submissions: request body reconciliation and validation.

A create/update body arrives either as nested JSON or as flat form fields
("location.city", "agent.email"). Both are folded into one canonical record
before validation; when a field is present in both forms the flat key wins.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from config import DEFAULT_COUNTRY
from errors import SubmissionValidationError
from schemas import LISTING_STATUSES, PROPERTY_TYPES

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

NESTED_FIELDS = {
    "location": ("address", "city", "state", "zipCode", "country"),
    "agent": ("name", "email", "phone"),
}

REQUIRED_LOCATION_FIELDS = [
    ("location", "address", "Address is required"),
    ("location", "city", "City is required"),
    ("location", "state", "State is required"),
    ("location", "zipCode", "Zip code is required"),
]


def parse_form_data(raw: Optional[str]) -> Dict[str, Any]:
    """Decode the JSON `data` part of a multipart submission."""
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SubmissionValidationError([f"Invalid JSON in data field: {exc.msg}"])
    if not isinstance(data, dict):
        raise SubmissionValidationError(["The data field must hold a JSON object"])
    return data


def _clean(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value.strip() if isinstance(value, str) else value


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _pick(body: Dict[str, Any], parent: str, child: str) -> Any:
    flat = body.get(f"{parent}.{child}")
    if _present(flat):
        return _clean(flat)
    nested = body.get(parent)
    if isinstance(nested, dict):
        return _clean(nested.get(child))
    return None


def _parse_float(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


def _parse_int(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return value
    return int(number) if number.is_integer() else value


def _parse_features(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        return value
    return [str(item).strip() for item in items if str(item).strip()]


def reconcile_submission(body: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Fold a flat or nested body into the canonical listing shape.

    Values that cannot be converted are kept as received so that
    validation can report them. `existing` supplies fallbacks for
    features and status on update.
    """
    record: Dict[str, Any] = {"propertyType": _clean(body.get("propertyType"))}

    for parent, children in NESTED_FIELDS.items():
        record[parent] = {child: _pick(body, parent, child) for child in children}
    record["location"]["country"] = record["location"]["country"] or DEFAULT_COUNTRY

    record["price"] = _parse_float(body.get("price"))
    record["area"] = _parse_float(body.get("area"))
    record["bedrooms"] = _parse_int(body.get("bedrooms"))
    record["bathrooms"] = _parse_int(body.get("bathrooms"))
    record["description"] = _clean(body.get("description"))

    features = _parse_features(body.get("features"))
    status = _clean(body.get("status"))
    if existing is not None:
        record["features"] = features if features is not None else existing.get("features", [])
        record["status"] = status or existing.get("status") or "For Sale"
    else:
        record["features"] = features if features is not None else []
        record["status"] = status or "For Sale"
    return record


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _check_positive(record: Dict[str, Any], key: str, label: str, messages: List[str]) -> None:
    value = record.get(key)
    if value is None:
        messages.append(f"{label} is required")
    elif not _is_number(value):
        messages.append(f"{label} must be a number")
    elif value <= 0:
        messages.append(f"{label} must be greater than 0")


def _check_count(record: Dict[str, Any], key: str, messages: List[str]) -> None:
    value = record.get(key)
    if value is None:
        return
    if not isinstance(value, int) or isinstance(value, bool):
        messages.append(f"Number of {key} must be a whole number")
    elif value < 0:
        messages.append(f"Number of {key} cannot be negative")


def collect_violations(record: Dict[str, Any]) -> List[str]:
    """Every rule is checked; all failures are returned in field order."""
    messages: List[str] = []

    property_type = record.get("propertyType")
    if not _present(property_type):
        messages.append("Property type is required")
    elif property_type not in PROPERTY_TYPES:
        messages.append(f"'{property_type}' is not a valid property type")

    for parent, child, message in REQUIRED_LOCATION_FIELDS:
        if not _present(record[parent].get(child)):
            messages.append(message)

    _check_positive(record, "price", "Price", messages)
    _check_positive(record, "area", "Area", messages)
    _check_count(record, "bedrooms", messages)
    _check_count(record, "bathrooms", messages)

    status = record.get("status")
    if _present(status) and status not in LISTING_STATUSES:
        messages.append(f"'{status}' is not a valid status")

    agent = record["agent"]
    if not _present(agent.get("name")):
        messages.append("Agent name is required")
    email = agent.get("email")
    if not _present(email):
        messages.append("Agent email is required")
    elif not EMAIL_RE.search(str(email)):
        messages.append("Please enter a valid email address")
    if not _present(agent.get("phone")):
        messages.append("Agent phone number is required")

    return messages


def validate_submission(record: Dict[str, Any]) -> Dict[str, Any]:
    messages = collect_violations(record)
    if messages:
        logger.info("Listing submission rejected", extra={"violations": messages})
        raise SubmissionValidationError(messages)
    return record
