"""Tests for generated values: IDs, thumbnails, defaults and column visibility."""
import random

import pytest

from catalog_sheet.columns import ColumnMap
from catalog_sheet.derivation import (
    apply_column_visibility,
    backfill_defaults,
    clear_thumbnail,
    derive_thumbnail,
    generate_and_set_unique_id,
    generate_missing_ids,
    generate_unique_id,
    hidden_columns_for,
    init_thumbnail_column,
    set_column_values,
    thumbnail_formula,
    update_thumbnail,
)
from catalog_sheet.errors import SchemaError
from catalog_sheet.schema import HEADERS
from catalog_sheet.settings import Configuration
from catalog_sheet.sheet import Sheet


def col(sheet: Sheet, name: str) -> int:
    return ColumnMap.from_sheet(sheet).require(name)


class TestUniqueIds:
    def test_id_is_six_digits(self):
        rng = random.Random(1)
        for _ in range(50):
            value = generate_unique_id(rng)
            assert len(value) == 6
            assert 100000 <= int(value) <= 999999

    def test_assigns_id_to_empty_row(self, main_sheet):
        outcome = generate_and_set_unique_id(main_sheet, 2, random.Random(3))

        assert outcome.ok and outcome.changed
        assert main_sheet.get_value(2, col(main_sheet, "id")) == outcome.value

    def test_existing_id_is_kept(self, main_sheet):
        main_sheet.set_value(2, col(main_sheet, "id"), "555555")

        first = generate_and_set_unique_id(main_sheet, 2)
        second = generate_and_set_unique_id(main_sheet, 2)

        assert first.value == second.value == "555555"
        assert not first.changed and not second.changed

    def test_avoids_ids_already_in_column(self, main_sheet):
        id_column = col(main_sheet, "id")
        main_sheet.set_value(3, id_column, "111111")

        class FixedRng:
            values = iter([111111, 222222])

            def randint(self, a, b):
                return next(self.values)

        outcome = generate_and_set_unique_id(main_sheet, 2, FixedRng())

        assert outcome.value == "222222"

    def test_missing_id_column_fails_softly(self):
        sheet = Sheet(name="x")
        sheet.set_values(1, 1, [["name", "image_url"]])

        outcome = generate_and_set_unique_id(sheet, 2)

        assert not outcome.ok
        assert outcome.reason == "ID column not found"

    def test_generate_missing_ids_only_for_rows_with_images(self, main_sheet):
        image_column = col(main_sheet, "image_url")
        id_column = col(main_sheet, "id")
        main_sheet.set_value(2, image_column, "https://a.example/1.jpg")
        main_sheet.set_value(3, image_column, "https://a.example/2.jpg")
        main_sheet.set_value(3, id_column, "999999")
        main_sheet.set_value(4, col(main_sheet, "name"), "no image")
        main_sheet.set_value(5, image_column, "https://a.example/3.jpg")

        outcome = generate_missing_ids(main_sheet, random.Random(7))

        assert outcome.value == 2
        ids = [main_sheet.get_value(r, id_column) for r in (2, 3, 4, 5)]
        assert ids[1] == "999999"
        assert ids[2] == ""
        assert len({ids[0], ids[1], ids[3]}) == 3


class TestThumbnails:
    def test_formula(self):
        assert thumbnail_formula("https://a.example/x.jpg") == '=IMAGE("https://a.example/x.jpg",4,100,100)'

    def test_quotes_are_escaped(self):
        assert thumbnail_formula('https://a.example/"x".jpg') == '=IMAGE("https://a.example/""x"".jpg",4,100,100)'

    def test_empty_url_derives_empty(self):
        assert derive_thumbnail("") == ""

    def test_update_and_clear(self, main_sheet):
        thumb_column = col(main_sheet, "thumbnail")

        update_thumbnail(main_sheet, 2, "https://a.example/x.jpg")
        assert main_sheet.get_value(2, thumb_column) == derive_thumbnail("https://a.example/x.jpg")

        clear_thumbnail(main_sheet, 2)
        assert main_sheet.get_value(2, thumb_column) == ""

    def test_missing_thumbnail_column_fails_softly(self):
        sheet = Sheet(name="x")
        sheet.set_values(1, 1, [["id", "image_url"]])

        assert not update_thumbnail(sheet, 2, "https://a.example/x.jpg").ok
        assert not clear_thumbnail(sheet, 2).ok

    def test_init_thumbnail_column(self, main_sheet):
        image_column = col(main_sheet, "image_url")
        thumb_column = col(main_sheet, "thumbnail")
        main_sheet.set_value(2, image_column, "https://a.example/1.jpg")
        main_sheet.set_value(3, col(main_sheet, "name"), "no image")
        main_sheet.set_value(3, thumb_column, "stale")

        count = init_thumbnail_column(main_sheet)

        assert count == 1
        assert main_sheet.get_value(2, thumb_column) == derive_thumbnail("https://a.example/1.jpg")
        assert main_sheet.get_value(3, thumb_column) == ""

    def test_init_thumbnail_column_requires_columns(self):
        sheet = Sheet(name="x")
        sheet.set_values(1, 1, [["id", "image_url"]])

        with pytest.raises(SchemaError):
            init_thumbnail_column(sheet)


class TestDefaults:
    def _populate(self, sheet: Sheet, rows: int) -> None:
        for r in range(2, 2 + rows):
            sheet.set_value(r, col(sheet, "name"), f"Item {r}")

    def test_backfill_fills_blanks_only(self, main_sheet):
        self._populate(main_sheet, 2)
        currency = col(main_sheet, "currency")
        main_sheet.set_value(3, currency, "EUR")

        filled = backfill_defaults(main_sheet, Configuration(product_type="standard", currency="USD"))

        assert filled["currency"] == 1
        assert main_sheet.get_value(2, currency) == "USD"
        assert main_sheet.get_value(3, currency) == "EUR"

    def test_backfill_skips_irrelevant_columns(self, main_sheet):
        self._populate(main_sheet, 1)

        filled = backfill_defaults(main_sheet, Configuration(product_type="service", condition="new"))

        assert "condition" not in filled
        assert main_sheet.get_value(2, col(main_sheet, "condition")) == ""

    def test_backfill_skips_unset_default(self, main_sheet):
        self._populate(main_sheet, 1)

        filled = backfill_defaults(main_sheet, Configuration(product_type="standard", category=""))

        assert filled["category_id"] == 0
        assert main_sheet.get_value(2, col(main_sheet, "category_id")) == ""

    def test_set_column_values_overwrites(self, main_sheet):
        self._populate(main_sheet, 2)
        currency = col(main_sheet, "currency")
        main_sheet.set_value(2, currency, "USD")

        outcome = set_column_values(main_sheet, "currency", "EUR")

        assert outcome.value == 2
        assert [main_sheet.get_value(r, currency) for r in (2, 3)] == ["EUR", "EUR"]

    def test_set_column_values_on_empty_sheet(self, main_sheet):
        outcome = set_column_values(main_sheet, "currency", "EUR")

        assert outcome.value == 0
        assert main_sheet.last_row == 1


class TestColumnVisibility:
    def test_hidden_set_is_complement_of_relevant(self):
        assert hidden_columns_for("service") == {"retailer_id", "brand", "variant_group_id", "condition", "sale_price", "is_hidden"}
        assert hidden_columns_for("default") == set()

    def test_apply_hides_by_index(self, main_sheet):
        hidden = apply_column_visibility(main_sheet, "service")

        assert set(hidden) == hidden_columns_for("service")
        assert main_sheet.hidden_columns == {HEADERS.index(h) + 1 for h in hidden}

    def test_switching_back_restores_hidden_set(self, main_sheet):
        apply_column_visibility(main_sheet, "standard")
        standard_hidden = set(main_sheet.hidden_columns)

        apply_column_visibility(main_sheet, "service")
        apply_column_visibility(main_sheet, "standard")

        assert main_sheet.hidden_columns == standard_hidden

    def test_default_shows_everything(self, main_sheet):
        apply_column_visibility(main_sheet, "service")
        apply_column_visibility(main_sheet, "default")

        assert main_sheet.hidden_columns == set()
