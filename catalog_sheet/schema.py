"""Catalog schema registry.

Static definition of the catalog columns, which of them matter for each
product type, and the enumerated value domains used both for validation and
for the dropdown constraints written into the sheet.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Tuple

__all__ = [
    "HEADERS",
    "GENERATED_COLUMNS",
    "REQUIRED_HEADERS",
    "PRICE_COLUMNS",
    "DEFAULTED_COLUMNS",
    "CURRENCY_LIST",
    "CATEGORY_LIST",
    "AVAILABILITY_LIST",
    "CONDITION_LIST",
    "PRODUCT_TYPE_LIST",
    "PRODUCT_TYPE_COLUMNS",
    "DOMAIN_COLUMNS",
    "Field",
    "FIELDS",
    "get_field",
    "get_relevant_columns",
]

HEADERS: List[str] = [
    "id",
    "thumbnail",
    "price",
    "name",
    "description",
    "image_url",
    "retailer_id",
    "brand",
    "variant_group_id",
    "url",
    "currency",
    "category_id",
    "availability",
    "condition",
    "sale_price",
    "is_hidden",
]

# Columns whose content is computed, never typed by the user
GENERATED_COLUMNS: Tuple[str, ...] = ("thumbnail",)

# Highlighted when blank after setup
REQUIRED_HEADERS: Tuple[str, ...] = ("id", "name", "price", "currency", "image_url")

PRICE_COLUMNS: Tuple[str, ...] = ("price", "sale_price")

# Column -> Configuration attribute holding its default
DEFAULTED_COLUMNS: Dict[str, str] = {
    "currency": "currency",
    "category_id": "category",
    "availability": "availability",
    "condition": "condition",
}

CURRENCY_LIST: List[str] = ["ILS", "AED", "USD", "CAD", "EUR", "GBP", "INR", "MXN", "BRL", "IDR", "ZAR"]

CATEGORY_LIST: List[str] = [
    "AUTO_VEHICLES_PARTS_ACCESSORIES",
    "BEAUTY_HEALTH_HAIR",
    "BUSINESS_SERVICES",
    "BABY_KIDS_GOODS",
    "COMMERCIAL_EQUIPMENT",
    "ELECTRONICS",
    "FOOD_BEVERAGES",
    "FURNITURE_APPLIANCES",
    "HOME_GOODS_DECOR",
    "LUGGAGE_BAGS",
    "MEDIA_MUSIC_BOOKS",
    "MISC",
    "PERSONAL_ACCESSORIES",
    "PET_SUPPLIES",
    "SPORTING_GOODS",
    "TOYS_GAMES_COLLECTIBLES",
    "APPAREL_ACCESSORIES",
    "FOOTWEAR",
    "HAIR_EXTENSIONS_WIGS",
    "HAIR_STYLING_TOOLS",
    "MAKEUP_COSMETICS",
    "FRAGRANCES",
    "SKIN_CARE",
    "BATH_BODY",
    "NAIL_CARE",
    "VITAMINS_SUPPLEMENTS",
    "MEDICAL_SUPPLIES_EQUIPMENT",
    "TICKETS",
    "TRAVEL_SERVICES",
]

AVAILABILITY_LIST: List[str] = ["in stock", "out of stock"]
CONDITION_LIST: List[str] = ["new", "used"]
PRODUCT_TYPE_LIST: List[str] = ["standard", "service", "variable", "default"]

_STANDARD_COLUMNS = [
    "id", "thumbnail", "description", "name", "price", "currency", "image_url",
    "availability", "condition", "brand", "category_id", "url", "retailer_id",
]

# Product type -> ordered relevant columns. "default" must cover every header.
PRODUCT_TYPE_COLUMNS: Dict[str, List[str]] = {
    "standard": _STANDARD_COLUMNS,
    "service": [
        "id", "thumbnail", "description", "name", "price", "currency", "image_url",
        "availability", "category_id", "url",
    ],
    "variable": _STANDARD_COLUMNS + ["variant_group_id"],
    "default": HEADERS,
}

# Columns constrained to a dropdown of legal values, in application order
DOMAIN_COLUMNS: Dict[str, List[str]] = {
    "currency": CURRENCY_LIST,
    "category_id": CATEGORY_LIST,
    "availability": AVAILABILITY_LIST,
    "condition": CONDITION_LIST,
}


@dataclass(frozen=True)
class Field:
    """A named product attribute and the rules attached to it."""

    name: str
    required_for: FrozenSet[str] = frozenset()
    max_length: Optional[int] = None
    domain: Optional[Tuple[str, ...]] = None
    generated: bool = False


_ALL_TYPES = frozenset({"standard", "service", "variable"})
_PHYSICAL_TYPES = frozenset({"standard", "variable"})

FIELDS: Dict[str, Field] = {
    f.name: f
    for f in [
        Field("id", required_for=_ALL_TYPES, max_length=100),
        Field("thumbnail", generated=True),
        Field("price", required_for=_ALL_TYPES),
        Field("name", required_for=_ALL_TYPES, max_length=150),
        Field("description", max_length=7000),
        Field("image_url", required_for=_ALL_TYPES),
        Field("retailer_id"),
        Field("brand", max_length=64),
        Field("variant_group_id", required_for=frozenset({"variable"}), max_length=100),
        Field("url", max_length=2000),
        Field("currency", required_for=_ALL_TYPES, domain=tuple(CURRENCY_LIST)),
        Field("category_id", max_length=250),
        Field("availability", required_for=_ALL_TYPES, domain=tuple(AVAILABILITY_LIST)),
        Field("condition", required_for=_PHYSICAL_TYPES, domain=tuple(CONDITION_LIST)),
        Field("sale_price"),
        Field("is_hidden"),
    ]
}


def get_field(name: str) -> Optional[Field]:
    """Get the field definition for a column name."""
    return FIELDS.get(name)


def get_relevant_columns(product_type: str) -> List[str]:
    """Relevant columns for a product type; unknown types get every column."""
    return PRODUCT_TYPE_COLUMNS.get(product_type, PRODUCT_TYPE_COLUMNS["default"])
