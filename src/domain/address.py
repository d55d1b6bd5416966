"""Address parsing for place-autocomplete results."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping

__all__ = ["ParsedAddress", "parse_address_from_place"]

_COUNTY_SUFFIX = re.compile(r" County$", re.IGNORECASE)


@dataclass(frozen=True)
class ParsedAddress:
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    county: str = ""
    formatted_address: str = ""

    def to_form(self) -> Dict[str, str]:
        return {
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "county": self.county,
            "formatted_address": self.formatted_address,
        }


def _text(component: Mapping[str, Any], new_key: str, legacy_key: str) -> str:
    value = component.get(new_key)
    if value is None:
        value = component.get(legacy_key)
    return "" if value is None else str(value)


def parse_address_from_place(place: Mapping[str, Any]) -> ParsedAddress:
    """Map place address components onto the address form fields.

    Accepts both the current (``longText``/``shortText``) and the legacy
    (``long_name``/``short_name``) component shapes. Each component is read
    for its first matching type only.
    """
    parts: Dict[str, str] = {}
    for component in place.get("addressComponents") or place.get("address_components") or []:
        types = component.get("types") or []
        long_text = _text(component, "longText", "long_name")
        short_text = _text(component, "shortText", "short_name")
        if "street_number" in types:
            parts["street_number"] = long_text
        elif "route" in types:
            parts["route"] = long_text
        elif "locality" in types:
            parts["city"] = long_text
        elif "administrative_area_level_2" in types:
            parts["county"] = _COUNTY_SUFFIX.sub("", long_text)
        elif "administrative_area_level_1" in types:
            parts["state"] = short_text
        elif "postal_code" in types:
            parts["zip"] = long_text
        elif "subpremise" in types:
            parts["subpremise"] = long_text

    line1 = " ".join(p for p in (parts.get("street_number"), parts.get("route")) if p)
    return ParsedAddress(
        address_line1=line1,
        address_line2=parts.get("subpremise", ""),
        city=parts.get("city", ""),
        state=parts.get("state", ""),
        zip=parts.get("zip", ""),
        county=parts.get("county", ""),
        formatted_address=str(
            place.get("formattedAddress") or place.get("formatted_address") or ""
        ),
    )
