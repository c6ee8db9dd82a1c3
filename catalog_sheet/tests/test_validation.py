"""
Tests for product record validation.

Covers the base rules shared by every product type, the per-type validators,
dispatch on product type and the bulk row validation used by "validate all".
"""
from dataclasses import replace

import pytest

from catalog_sheet.models import ProductRecord
from catalog_sheet.schema import FIELDS, HEADERS
from catalog_sheet.validation import (
    PRESENCE_LABELS,
    check_required_fields,
    summarize_errors,
    validate_price,
    validate_product,
    validate_product_data,
    validate_rows,
    validate_standard_product,
)


def record(**values) -> ProductRecord:
    return ProductRecord.from_mapping(values)


class TestValidatePrice:
    """Price rules for fixed and ranged prices."""

    @pytest.mark.parametrize("price", ["12.50", "1", "0.01", 3, 4.5])
    def test_positive_numbers_are_valid(self, price):
        assert validate_price(price, "standard") is True

    @pytest.mark.parametrize("price", ["0", "-5", "abc", "", "inf", "nan", "10-20", "1_000"])
    def test_invalid_fixed_prices(self, price):
        assert validate_price(price, "standard") is False

    @pytest.mark.parametrize("price", ["10-20", "20-10", "1.5-2.5"])
    def test_variable_ranges_are_valid(self, price):
        """Both ends must be positive; their order is not checked."""
        assert validate_price(price, "variable") is True

    @pytest.mark.parametrize("price", ["10", "10-abc", "10-20-30", "-10-20", "0-5", "10-", "1_0-20"])
    def test_invalid_variable_ranges(self, price):
        assert validate_price(price, "variable") is False

    def test_product_type_is_case_insensitive(self):
        assert validate_price("10-20", "Variable") is True


class TestBaseRules:
    """Rules applied to every product regardless of type."""

    def test_valid_standard_product_has_no_errors(self, valid_standard):
        assert validate_product_data(record(**valid_standard)) == []

    def test_empty_standard_record_reports_rules_in_order(self):
        errors = validate_product_data(record(product_type="standard"))

        assert errors == [
            "Invalid product ID",
            "Invalid product name",
            "Invalid price",
            "Invalid currency",
            "Invalid image URL",
            "Invalid availability",
            "Invalid condition",
        ]

    def test_length_limits(self, valid_standard):
        product = record(**{
            **valid_standard,
            "id": "x" * 101,
            "name": "n" * 151,
            "description": "d" * 7001,
            "brand": "b" * 65,
            "category_id": "c" * 251,
            "url": "https://example.com/" + "u" * 2000,
        })

        assert validate_product_data(product) == [
            "Invalid product ID",
            "Invalid product name",
            "Description exceeds 7000 characters",
            "Brand name exceeds 64 characters",
            "Category exceeds 250 characters",
            "URL exceeds 2000 characters",
        ]

    def test_lengths_at_limit_are_valid(self, valid_standard):
        product = record(**{
            **valid_standard,
            "id": "x" * 100,
            "name": "n" * 150,
            "description": "d" * 7000,
            "brand": "b" * 64,
        })

        assert validate_product_data(product) == []

    @pytest.mark.parametrize("url", ["ftp://cdn.example.com/a.jpg", "http://", "cdn.example.com/a.jpg"])
    def test_image_url_must_be_http(self, valid_standard, url):
        errors = validate_product_data(record(**{**valid_standard, "image_url": url}))
        assert errors == ["Invalid image URL"]

    def test_currency_outside_domain(self, valid_standard):
        errors = validate_product_data(record(**{**valid_standard, "currency": "usd"}))
        assert errors == ["Invalid currency"]

    def test_condition_not_checked_for_services(self, valid_standard):
        product = record(**{**valid_standard, "product_type": "service", "condition": ""})
        assert validate_product_data(product) == []


class TestValidateProduct:
    """Dispatch to the per-type validators."""

    def test_standard(self, valid_standard):
        assert validate_product(record(**valid_standard)) == []

    def test_product_type_matches_case_insensitively(self, valid_standard):
        assert validate_product(record(**{**valid_standard, "product_type": " Standard "})) == []

    def test_service_with_condition_is_rejected(self, valid_standard):
        product = record(**{**valid_standard, "product_type": "service", "condition": "new"})

        assert validate_product(product) == ["Condition should not be specified for services"]

    def test_valid_service(self, valid_standard):
        product = record(**{**valid_standard, "product_type": "service", "condition": ""})
        assert validate_product(product) == []

    def test_variable_requires_group_and_range(self, valid_standard):
        product = record(**{**valid_standard, "product_type": "variable"})

        assert validate_product(product) == ["Invalid price", "Invalid variant group ID"]

    def test_valid_variable(self, valid_standard):
        product = record(**{
            **valid_standard,
            "product_type": "variable",
            "price": "10-20",
            "variant_group_id": "mugs-2024",
        })
        assert validate_product(product) == []

    def test_standard_product_with_empty_id(self):
        product = record(
            id="",
            name="Shoe",
            price="10",
            currency="USD",
            image_url="https://x/y.jpg",
            availability="in stock",
            product_type="standard",
            condition="new",
        )

        assert validate_standard_product(product) == ["Invalid product ID"]

    @pytest.mark.parametrize("product_type", ["gadget", "default", ""])
    def test_unknown_types_get_single_error(self, valid_standard, product_type):
        product = record(**{**valid_standard, "product_type": product_type})

        assert validate_product(product) == [f"Invalid product type: {product_type}"]


class TestValidateRows:
    """Bulk validation over sheet rows."""

    def test_valid_rows_produce_no_errors(self, make_row, valid_standard):
        rows = [make_row(**valid_standard)]

        assert validate_rows(HEADERS, rows, default_product_type="standard") == []

    def test_blank_rows_are_skipped(self, make_row, valid_standard):
        rows = [make_row(), make_row(**valid_standard), ["", "", ""]]

        assert validate_rows(HEADERS, rows, default_product_type="standard") == []

    def test_errors_are_labelled_with_sheet_row(self, make_row, valid_standard):
        rows = [
            make_row(**valid_standard),
            make_row(**{**valid_standard, "id": ""}),
        ]

        errors = validate_rows(HEADERS, rows, default_product_type="standard")

        assert errors == ["Row 3: Missing product ID, Invalid product ID"]

    def test_first_row_number_offsets_labels(self, make_row, valid_standard):
        rows = [make_row(**{**valid_standard, "price": ""})]

        errors = validate_rows(HEADERS, rows, default_product_type="standard", first_row_number=10)

        assert errors == ["Row 10: Missing price, Invalid price"]

    def test_empty_product_type_column(self, valid_standard):
        headers = HEADERS + ["product_type"]
        row = [valid_standard.get(h, "") for h in HEADERS] + [""]

        errors = validate_rows(headers, [row], default_product_type="standard")

        assert errors == ["Row 2: Missing product type"]

    def test_product_type_column_overrides_default(self, valid_standard):
        headers = HEADERS + ["product_type"]
        row = [valid_standard.get(h, "") for h in HEADERS] + ["service"]

        errors = validate_rows(headers, [row], default_product_type="standard")

        assert errors == ["Row 2: Condition should not be specified for services"]

    def test_numeric_cells_are_read_as_text(self, make_row, valid_standard):
        rows = [make_row(**{**valid_standard, "id": 123456.0, "price": 12.5})]

        assert validate_rows(HEADERS, rows, default_product_type="standard") == []


class TestSchemaLimits:
    """The rules read their limits and domains from the field registry."""

    def test_limits_follow_field_registry(self, valid_standard, monkeypatch):
        monkeypatch.setitem(FIELDS, "brand", replace(FIELDS["brand"], max_length=3))
        monkeypatch.setitem(FIELDS, "currency", replace(FIELDS["currency"], domain=("EUR",)))

        errors = validate_product_data(record(**{**valid_standard, "brand": "Acme"}))

        assert errors == ["Invalid currency", "Brand name exceeds 3 characters"]

    def test_presence_checks_cover_fields_required_for_every_type(self):
        for name in PRESENCE_LABELS:
            assert FIELDS[name].required_for == {"standard", "service", "variable"}

    def test_presence_check_order(self):
        assert check_required_fields(record(product_type="standard")) == [
            "Missing product ID",
            "Missing product name",
            "Missing price",
            "Missing currency",
            "Missing image URL",
        ]


class TestSummarizeErrors:
    def test_no_errors(self):
        assert summarize_errors([]) == ["All products are valid!"]

    def test_listing_is_capped(self):
        errors = [f"Row {n}: Invalid price" for n in range(2, 14)]

        lines = summarize_errors(errors)

        assert lines[0] == "Found 12 validation errors:"
        assert lines[1:11] == errors[:10]
        assert lines[-1] == "... and 2 more errors."
        assert len(lines) == 12
