"""Data models for catalog rows."""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

__all__ = ["ProductType", "ProductRecord", "Outcome", "cell_text", "is_blank"]

T = TypeVar("T")


class ProductType(str, Enum):
    """Catalog product types. DEFAULT shows every column but has no validator."""

    STANDARD = "standard"
    SERVICE = "service"
    VARIABLE = "variable"
    DEFAULT = "default"

    @classmethod
    def parse(cls, value: Any) -> Optional["ProductType"]:
        """Case-insensitive lookup; returns None for unknown or empty values."""
        text = cell_text(value).strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return None


def cell_text(value: Any) -> str:
    """Normalize a raw cell value to the text the validators see."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def is_blank(value: Any) -> bool:
    """True for cells the host reports as empty."""
    return value is None or value == ""


@dataclass
class ProductRecord:
    """One catalog row, keyed by the canonical column names.

    Columns the schema does not know about land in ``extras`` so nothing in
    the row is lost on the way through validation.
    """

    id: str = ""
    thumbnail: str = ""
    price: str = ""
    name: str = ""
    description: str = ""
    image_url: str = ""
    retailer_id: str = ""
    brand: str = ""
    variant_group_id: str = ""
    url: str = ""
    currency: str = ""
    category_id: str = ""
    availability: str = ""
    condition: str = ""
    sale_price: str = ""
    is_hidden: str = ""

    # Not a catalog column; comes from a product_type column or the configuration
    product_type: str = ""

    extras: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def field_names(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "extras"]

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        default_product_type: Optional[str] = None,
    ) -> "ProductRecord":
        """Build a record from a header -> value mapping.

        ``default_product_type`` only applies when the mapping has no
        ``product_type`` key at all.
        """
        known = set(cls.field_names())
        values: Dict[str, str] = {}
        extras: Dict[str, str] = {}
        for key, value in data.items():
            if not key:
                continue
            if key in known:
                values[key] = cell_text(value)
            else:
                extras[key] = cell_text(value)
        if "product_type" not in data and default_product_type is not None:
            values["product_type"] = default_product_type
        return cls(extras=extras, **values)

    @property
    def parsed_type(self) -> Optional[ProductType]:
        return ProductType.parse(self.product_type)

    def get(self, name: str, default: str = "") -> str:
        if name in self.field_names():
            return getattr(self, name)
        return self.extras.get(name, default)

    def to_row(self, headers: Sequence[str]) -> List[str]:
        return [self.get(h) for h in headers]


@dataclass
class Outcome(Generic[T]):
    """Success or an expected failure with the reason attached."""

    ok: bool
    value: Optional[T] = None
    reason: str = ""
    changed: bool = False

    @classmethod
    def success(cls, value: T, changed: bool = False) -> "Outcome[T]":
        return cls(ok=True, value=value, changed=changed)

    @classmethod
    def failure(cls, reason: str) -> "Outcome[T]":
        return cls(ok=False, reason=reason)
