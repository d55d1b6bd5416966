"""Bulk import schemas for contacts, properties and users.

Each schema lists the importable (non-relational) fields with their label,
whether they are required, and a value type. Schemas map spreadsheet headers
onto canonical keys, produce template rows and headers for download, and
normalise and validate parsed rows before they are sent for creation.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

__all__ = [
    "ImportField",
    "ImportSchema",
    "RowError",
    "CONTACT_IMPORT_SCHEMA",
    "PROPERTY_IMPORT_SCHEMA",
    "USER_IMPORT_SCHEMA",
]

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class ImportField:
    key: str
    label: str
    required: bool = False
    type: str = "string"  # string | email | integer | number


@dataclass(frozen=True)
class RowError:
    row: int  # 1-based data row
    message: str


@dataclass
class ImportSchema:
    name: str
    fields: Tuple[ImportField, ...]
    aliases: Dict[str, str] = field(default_factory=dict)
    _label_to_key: Dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        lookup: Dict[str, str] = {}
        for f in self.fields:
            for variant in (f.key, f.label, f.key.replace("_", " "), f.label.lower(), f.key.lower()):
                if variant and variant not in lookup:
                    lookup[variant] = f.key
        # aliases win over generated variants
        lookup.update(self.aliases)
        self._label_to_key = lookup

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fields]

    @property
    def required_keys(self) -> List[str]:
        return [f.key for f in self.fields if f.required]

    def normalize_header(self, header: Any) -> Optional[str]:
        """Canonical key for a spreadsheet header, or ``None`` when unknown."""
        if not isinstance(header, str):
            return None
        trimmed = header.strip()
        if not trimmed:
            return None
        return self._label_to_key.get(trimmed) or self._label_to_key.get(trimmed.lower())

    def header_map(self, headers: Iterable[Any]) -> Dict[Any, str]:
        out: Dict[Any, str] = {}
        for h in headers:
            key = self.normalize_header(h)
            if key:
                out[h] = key
        return out

    def template_row(self) -> Dict[str, str]:
        return {key: "" for key in self.keys}

    def template_headers(self) -> List[str]:
        return [f.label for f in self.fields]

    def normalize_row(self, raw: Mapping[Any, Any], header_map: Mapping[Any, str] | None = None) -> Dict[str, str]:
        """Keep known columns only, trimmed; missing keys become ``""``."""
        header_map = header_map if header_map is not None else self.header_map(raw.keys())
        row: Dict[str, str] = {}
        for raw_header, value in raw.items():
            key = header_map.get(raw_header)
            if key:
                row[key] = "" if value is None else str(value).strip()
        return {key: row.get(key, "") for key in self.keys}

    @staticmethod
    def is_empty_row(row: Mapping[str, Any]) -> bool:
        return all(v is None or str(v).strip() == "" for v in row.values())

    def normalize_rows(self, raw_rows: Sequence[Mapping[Any, Any]]) -> List[Dict[str, str]]:
        if not raw_rows:
            return []
        header_map = self.header_map(raw_rows[0].keys())
        rows = (self.normalize_row(raw, header_map) for raw in raw_rows)
        return [r for r in rows if not self.is_empty_row(r)]

    def validate_row(self, row: Mapping[str, Any], seen_emails: set[str] | None = None) -> List[str]:
        errors: List[str] = []
        for key in self.required_keys:
            if not str(row.get(key) or "").strip():
                errors.append(f"{key} is required")
        for f in self.fields:
            value = str(row.get(f.key) or "").strip()
            if not value:
                continue
            if f.type == "email":
                if not EMAIL_PATTERN.match(value):
                    errors.append("Invalid email format")
                elif seen_emails is not None:
                    lowered = value.lower()
                    if lowered in seen_emails:
                        errors.append("Duplicate email in file")
                    seen_emails.add(lowered)
            elif f.type == "integer" and not re.fullmatch(r"-?\d+", value):
                errors.append(f"{f.key} must be a whole number")
            elif f.type == "number":
                try:
                    float(value)
                except ValueError:
                    errors.append(f"{f.key} must be a number")
        return errors

    def validate_rows(self, rows: Sequence[Mapping[str, Any]]) -> List[RowError]:
        seen: set[str] = set()
        out: List[RowError] = []
        for index, row in enumerate(rows, start=1):
            out.extend(RowError(index, msg) for msg in self.validate_row(row, seen))
        return out


def _fields(*specs: Tuple[Any, ...]) -> Tuple[ImportField, ...]:
    return tuple(ImportField(*spec) for spec in specs)


CONTACT_IMPORT_SCHEMA = ImportSchema(
    "contacts",
    _fields(
        ("name", "Name", True),
        ("image", "Image"),
        ("type", "Type", False, "number"),
        ("phone", "Phone"),
        ("email", "Email", False, "email"),
        ("website", "Website"),
        ("street1", "Street 1"),
        ("street2", "Street 2"),
        ("city", "City"),
        ("state", "State"),
        ("zip_code", "Zip Code"),
        ("country", "Country"),
        ("country_code", "Country Code"),
        ("notes", "Notes"),
        ("role", "Role"),
    ),
    aliases={
        "email": "email",
        "e-mail": "email",
        "zip": "zip_code",
        "postal code": "zip_code",
        "address": "street1",
        "street": "street1",
        "address line 1": "street1",
        "address line 2": "street2",
    },
)

PROPERTY_IMPORT_SCHEMA = ImportSchema(
    "properties",
    _fields(
        ("address", "Address", True),
        ("city", "City", True),
        ("state", "State", True),
        ("zip", "Zip", True),
        ("main_photo", "Main Photo"),
        ("tax_id", "Tax ID"),
        ("county", "County"),
        ("owner_name", "Owner Name"),
        ("owner_name_2", "Owner Name 2"),
        ("owner_city", "Owner City"),
        ("occupant_name", "Occupant Name"),
        ("occupant_type", "Occupant Type"),
        ("owner_phone", "Owner Phone"),
        ("phone_to_show", "Phone To Show"),
        ("property_type", "Property Type"),
        ("sub_type", "Sub Type"),
        ("roof_type", "Roof Type"),
        ("year_built", "Year Built", False, "integer"),
        ("effective_year_built", "Effective Year Built", False, "integer"),
        ("effective_year_built_source", "Effective Year Built Source"),
        ("sq_ft_total", "Sq Ft Total", False, "number"),
        ("sq_ft_finished", "Sq Ft Finished", False, "number"),
        ("sq_ft_unfinished", "Sq Ft Unfinished", False, "number"),
        ("garage_sq_ft", "Garage Sq Ft", False, "number"),
        ("total_dwelling_sq_ft", "Total Dwelling Sq Ft", False, "number"),
        ("sq_ft_source", "Sq Ft Source"),
        ("lot_size", "Lot Size"),
        ("lot_size_source", "Lot Size Source"),
        ("lot_dim", "Lot Dim"),
        ("price_per_sq_ft", "Price Per Sq Ft"),
        ("total_price_per_sq_ft", "Total Price Per Sq Ft"),
        ("bed_count", "Bed Count", False, "integer"),
        ("bath_count", "Bath Count", False, "integer"),
        ("full_baths", "Full Baths", False, "integer"),
        ("three_quarter_baths", "Three Quarter Baths", False, "integer"),
        ("half_baths", "Half Baths", False, "integer"),
        ("number_of_showers", "Number Of Showers", False, "integer"),
        ("number_of_bathtubs", "Number Of Bathtubs", False, "integer"),
        ("fireplaces", "Fireplaces", False, "integer"),
        ("fireplace_types", "Fireplace Types"),
        ("basement", "Basement"),
        ("parking_type", "Parking Type"),
        ("total_covered_parking", "Total Covered Parking", False, "integer"),
        ("total_uncovered_parking", "Total Uncovered Parking", False, "integer"),
        ("school_district", "School District"),
        ("elementary_school", "Elementary School"),
        ("junior_high_school", "Junior High School"),
        ("senior_high_school", "Senior High School"),
        ("school_district_websites", "School District Websites"),
        ("list_date", "List Date"),
        ("expire_date", "Expire Date"),
    ),
)

USER_IMPORT_SCHEMA = ImportSchema(
    "users",
    _fields(
        ("name", "Name", True),
        ("email", "Email", True, "email"),
        ("phone", "Phone"),
        ("role", "Role"),
    ),
)
