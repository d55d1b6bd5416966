"""Entity schemas for records managed through the console.

Records arrive from the persistence collaborator as loosely-shaped dicts.
Each entity type gets an explicit dataclass here; ``from_record`` keeps only
known fields and substitutes field defaults for missing or ``None`` values so
downstream code never has to guess at optional keys.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar

__all__ = [
    "EntityType",
    "Entity",
    "App",
    "Category",
    "Contact",
    "User",
    "Subscription",
    "Professional",
    "Property",
    "ENTITY_CLASSES",
    "entity_from_record",
]

E = TypeVar("E", bound="Entity")


class EntityType(str, Enum):
    APP = "app"
    CATEGORY = "category"
    CONTACT = "contact"
    USER = "user"
    SUBSCRIPTION = "subscription"
    PROFESSIONAL = "professional"
    PROPERTY = "property"

    @property
    def collection(self) -> str:
        """REST collection segment and list-envelope key (``apps``, ``categories`` ...)."""
        if self is EntityType.CATEGORY:
            return "categories"
        if self is EntityType.PROPERTY:
            return "properties"
        return self.value + "s"


@dataclass(slots=True)
class Entity:
    ENTITY_TYPE: ClassVar[EntityType]
    DISPLAY_FIELD: ClassVar[str] = "name"

    id: Any = None
    # 1-based position in the view the entity was last placed into (display only)
    view_position: Optional[int] = field(default=None, compare=False)

    @classmethod
    def from_record(cls: Type[E], record: Mapping[str, Any]) -> E:
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "view_position":
                continue
            value = record.get(f.name)
            if value is None:
                continue
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_attributes(self) -> Dict[str, Any]:
        """Writable attributes (everything except ``id`` and display-only fields)."""
        data = asdict(self)
        data.pop("id", None)
        data.pop("view_position", None)
        return data

    @property
    def display_name(self) -> str:
        return str(getattr(self, self.DISPLAY_FIELD, "") or "")


@dataclass(slots=True)
class App(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.APP

    name: str = ""
    url: str = ""
    icon: str = ""
    category_id: Optional[int] = None
    description: str = ""


@dataclass(slots=True)
class Category(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CATEGORY

    name: str = ""
    url: str = ""
    icon: str = ""
    description: str = ""


@dataclass(slots=True)
class Contact(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.CONTACT

    name: str = ""
    image: str = ""
    type: Optional[int] = None
    phone: str = ""
    email: str = ""
    website: str = ""
    street1: str = ""
    street2: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""
    country_code: str = ""
    notes: str = ""
    role: str = ""


@dataclass(slots=True)
class User(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.USER

    name: str = ""
    email: str = ""
    phone: str = ""
    role: str = ""


@dataclass(slots=True)
class Subscription(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SUBSCRIPTION
    DISPLAY_FIELD: ClassVar[str] = "product_name"

    product_id: Optional[int] = None
    product_name: str = ""
    product_price: Optional[float] = None
    status: str = ""
    user_id: Optional[int] = None
    user_name: str = ""
    user_email: str = ""
    database_name: str = ""
    start_date: str = ""
    end_date: str = ""


@dataclass(slots=True)
class Professional(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROFESSIONAL

    name: str = ""
    company_name: str = ""
    category_id: Optional[int] = None
    email: str = ""
    phone: str = ""
    website: str = ""
    description: str = ""
    service_area: str = ""
    rating: Optional[float] = None
    review_count: int = 0
    years_in_business: Optional[int] = None


@dataclass(slots=True)
class Property(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.PROPERTY
    DISPLAY_FIELD: ClassVar[str] = "address"

    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    county: str = ""
    owner_name: str = ""
    property_type: str = ""
    year_built: Optional[int] = None
    sq_ft_total: Optional[float] = None


ENTITY_CLASSES: Dict[EntityType, Type[Entity]] = {
    cls.ENTITY_TYPE: cls
    for cls in (App, Category, Contact, User, Subscription, Professional, Property)
}


def entity_from_record(entity_type: EntityType | str, record: Mapping[str, Any]) -> Entity:
    return ENTITY_CLASSES[EntityType(entity_type)].from_record(record)
