"""Text rendering of listings: Indian price formatting, detail view, export."""

import json
from pathlib import Path
from typing import Any, Dict, List, Union

Number = Union[int, float, str]

LAKH = 100_000
CRORE = 10_000_000


def format_indian_number(value: Number, decimals: int = 3) -> str:
    """Digits grouped the en-IN way: 1,23,45,678.5"""
    number = float(value)
    sign = "-" if number < 0 else ""
    text = f"{abs(number):.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    whole, _, fraction = text.partition(".")

    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join(groups + [tail])

    return sign + whole + (f".{fraction}" if fraction else "")


def format_indian_price(price: Number) -> str:
    """35,00,000 (35.00 L) / 2,50,00,000 (2.50 Cr)"""
    amount = float(price)
    formatted = format_indian_number(amount)
    if amount >= CRORE:
        return f"{formatted} ({amount / CRORE:.2f} Cr)"
    if amount >= LAKH:
        return f"{formatted} ({amount / LAKH:.2f} L)"
    return formatted


def format_inr(price: Number) -> str:
    return "₹" + format_indian_number(round(float(price)), decimals=0)


def _line(label: str, value: Any) -> str:
    return f"{label}: {value if value not in (None, '') else '-'}"


def render_listing(listing: Dict[str, Any]) -> str:
    """Multi-line detail view of a stored listing (or a draft payload)."""
    location = listing.get("location") or {}
    agent = listing.get("agent") or {}
    price = listing.get("price")
    area = listing.get("area")
    address = ", ".join(
        part for part in (
            location.get("address"),
            location.get("city"),
            location.get("state"),
            location.get("zipCode"),
            location.get("country"),
        ) if part
    )
    lines = [
        f"{listing.get('propertyType') or 'Property'} - {listing.get('status') or 'For Sale'}",
        _line("Location", address),
        _line("Price", f"₹{format_indian_price(price)}" if price else None),
        _line("Area", f"{area} sq ft" if area else None),
        _line("Bedrooms", listing.get("bedrooms")),
        _line("Bathrooms", listing.get("bathrooms")),
        _line("Description", listing.get("description")),
        _line("Features", ", ".join(listing.get("features") or [])),
        _line("Agent", " | ".join(v for v in (agent.get("name"), agent.get("email"), agent.get("phone")) if v)),
    ]
    photos = listing.get("photos") or []
    if photos:
        lines.append(_line("Photos", len(photos)))
    return "\n".join(lines)


def render_listing_table(listings: List[Dict[str, Any]]) -> str:
    if not listings:
        return "No properties found."
    rows = []
    for listing in listings:
        location = listing.get("location") or {}
        price = listing.get("price")
        rows.append(
            f"{listing.get('id', '?')}  {listing.get('propertyType', '')}  "
            f"{location.get('city', '')}, {location.get('state', '')}  "
            f"{format_inr(price) if price else '-'}  {listing.get('status', '')}"
        )
    return "\n".join(rows)


def listing_to_json(listing: Dict[str, Any]) -> str:
    return json.dumps(listing, indent=2, ensure_ascii=False, default=str)


def export_listing(listing: Dict[str, Any], directory: Union[str, Path] = ".") -> Path:
    """Write the listing as property-<id>.json and return the file path."""
    target = Path(directory) / f"property-{listing.get('id', 'draft')}.json"
    target.write_text(listing_to_json(listing), encoding="utf-8")
    return target
