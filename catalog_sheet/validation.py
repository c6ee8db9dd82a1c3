"""Product record validation.

Every function here is pure and never raises: problems come back as an
ordered list of human-readable messages, empty when the record is valid.
The base rules always run in the same order so results are deterministic.
"""

import math
from typing import Any, Callable, Dict, List, Optional, Sequence

from catalog_sheet.columns import record_from_row
from catalog_sheet.config import MAX_LISTED_ERRORS
from catalog_sheet.logging_config import get_logger
from catalog_sheet.models import ProductRecord, ProductType, cell_text, is_blank
from catalog_sheet.schema import FIELDS
from catalog_sheet.url_validation import is_http_url

__all__ = [
    "validate_price",
    "validate_product_data",
    "validate_standard_product",
    "validate_service_listing",
    "validate_variable_product",
    "validate_product",
    "PRESENCE_LABELS",
    "check_required_fields",
    "validate_rows",
    "summarize_errors",
]

logger = get_logger("validation")

Validator = Callable[[ProductRecord], List[str]]


def _parse_positive(token: Any) -> Optional[float]:
    """Parse a finite number > 0, or None."""
    text = cell_text(token).strip()
    if not text or "_" in text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number


def validate_price(price: Any, product_type: Any) -> bool:
    """Check a price for the given product type.

    Variable products carry a ``low-high`` range; both ends must be positive
    numbers. The order of the two ends is not checked.
    """
    if ProductType.parse(product_type) is ProductType.VARIABLE:
        tokens = cell_text(price).split("-")
        if len(tokens) != 2:
            return False
        return all(_parse_positive(t) is not None for t in tokens)
    return _parse_positive(price) is not None


def _too_long(value: str, field_name: str) -> bool:
    limit = FIELDS[field_name].max_length
    return limit is not None and len(value) > limit


def _outside_domain(value: str, field_name: str) -> bool:
    return value not in (FIELDS[field_name].domain or ())


def validate_product_data(product: ProductRecord) -> List[str]:
    """Apply the rules shared by every product type.

    Length limits and value domains come from the schema's ``FIELDS``.
    """
    errors: List[str] = []

    if not product.id or _too_long(product.id, "id"):
        errors.append("Invalid product ID")
    if not product.name or _too_long(product.name, "name"):
        errors.append("Invalid product name")
    if product.description and _too_long(product.description, "description"):
        errors.append(f"Description exceeds {FIELDS['description'].max_length} characters")
    if not validate_price(product.price, product.product_type):
        errors.append("Invalid price")
    if _outside_domain(product.currency, "currency"):
        errors.append("Invalid currency")
    if not is_http_url(product.image_url):
        errors.append("Invalid image URL")
    if _outside_domain(product.availability, "availability"):
        errors.append("Invalid availability")
    if (
        product.parsed_type is not None
        and product.parsed_type.value in FIELDS["condition"].required_for
        and _outside_domain(product.condition, "condition")
    ):
        errors.append("Invalid condition")
    if product.brand and _too_long(product.brand, "brand"):
        errors.append(f"Brand name exceeds {FIELDS['brand'].max_length} characters")
    if product.category_id and _too_long(product.category_id, "category_id"):
        errors.append(f"Category exceeds {FIELDS['category_id'].max_length} characters")
    if product.url and _too_long(product.url, "url"):
        errors.append(f"URL exceeds {FIELDS['url'].max_length} characters")

    logger.debug(f"Product validation completed. Errors found: {len(errors)}")
    return errors


def validate_standard_product(product: ProductRecord) -> List[str]:
    errors = validate_product_data(product)
    if product.parsed_type is not ProductType.STANDARD:
        errors.append("Invalid product type for standard product")
    return errors


def validate_service_listing(product: ProductRecord) -> List[str]:
    errors = validate_product_data(product)
    if product.parsed_type is not ProductType.SERVICE:
        errors.append("Invalid product type for service listing")
    if product.condition:
        errors.append("Condition should not be specified for services")
    return errors


def validate_variable_product(product: ProductRecord) -> List[str]:
    errors = validate_product_data(product)
    if product.parsed_type is not ProductType.VARIABLE:
        errors.append("Invalid product type for variable product")
    if not product.variant_group_id or _too_long(product.variant_group_id, "variant_group_id"):
        errors.append("Invalid variant group ID")
    return errors


VALIDATORS: Dict[ProductType, Validator] = {
    ProductType.STANDARD: validate_standard_product,
    ProductType.SERVICE: validate_service_listing,
    ProductType.VARIABLE: validate_variable_product,
}


def validate_product(product: ProductRecord) -> List[str]:
    """Dispatch to the validator for the record's product type.

    Unknown, missing and ``default`` types get a single error and the base
    rules are skipped.
    """
    validator = VALIDATORS.get(product.parsed_type)
    if validator is None:
        return [f"Invalid product type: {product.product_type}"]
    return validator(product)


# Fields checked for presence before the full rules, with their labels
PRESENCE_LABELS: Dict[str, str] = {
    "id": "product ID",
    "name": "product name",
    "price": "price",
    "currency": "currency",
    "image_url": "image URL",
}


def check_required_fields(product: ProductRecord) -> List[str]:
    """Coarse presence check used by bulk validation before the full rules."""
    return [f"Missing {label}" for name, label in PRESENCE_LABELS.items() if not product.get(name)]


def validate_rows(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    default_product_type: Optional[str] = None,
    first_row_number: int = 2,
) -> List[str]:
    """Validate a block of data rows.

    Fully empty rows are skipped. Each failing row yields one entry of the
    form ``"Row <n>: <error>, <error>"`` where ``n`` is the sheet row number.
    """
    results: List[str] = []
    for offset, row in enumerate(rows):
        if all(is_blank(cell) for cell in row):
            continue

        product = record_from_row(headers, row, default_product_type)
        row_errors = check_required_fields(product)

        if not product.product_type:
            row_errors.append("Missing product type")
        else:
            row_errors.extend(validate_product(product))

        if row_errors:
            results.append(f"Row {first_row_number + offset}: {', '.join(row_errors)}")

    return results


def summarize_errors(errors: Sequence[str], limit: int = MAX_LISTED_ERRORS) -> List[str]:
    """Render bulk validation output as display lines, capped at ``limit`` errors."""
    if not errors:
        return ["All products are valid!"]
    lines = [f"Found {len(errors)} validation errors:"]
    lines.extend(errors[:limit])
    if len(errors) > limit:
        lines.append(f"... and {len(errors) - limit} more errors.")
    return lines
