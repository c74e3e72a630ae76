"""
Unit tests for the catalog reconciler.

Run: pytest tests/unit/test_catalog_reconciler.py -v
"""

import math
import random
from decimal import Decimal

import pytest

from models.catalog_import import MergePolicy
from models.product import ProductResponse
from services.catalog_reconciler import (
    WriteKind,
    draft_from_row,
    parse_decimal,
    parse_sales_multiple,
    reconcile,
)

from tests.factories import ImportRowFactory, ProductFactory


def existing(**overrides) -> ProductResponse:
    return ProductResponse(**ProductFactory.create(**overrides))


class TestReconcileScenarios:
    """Tests for reconcile() on the documented import scenarios."""

    def test_new_row_becomes_insert(self):
        """A row with an unknown code becomes an insert with defaults."""
        # Arrange
        rows = [ImportRowFactory.create(
            code="EX001", name="Cimento", list_price=32.50, category="Construção"
        )]

        # Act
        result = reconcile(rows, [], set(), MergePolicy.UPDATE_AND_APPEND)

        # Assert
        assert len(result.writes) == 1
        write = result.writes[0]
        assert write.kind == WriteKind.INSERT
        assert write.id is None
        assert write.to_record() == {
            "code": "EX001",
            "name": "Cimento",
            "category": "Construção",
            "price": 32.5,
            "price_regional": None,
            "stock": 0,
            "unit": "UN",
            "sales_multiple": 1,
        }
        assert result.categories_to_create == ("Construção",)

    def test_matching_code_becomes_update_preserving_id_and_image(self):
        """A row whose code exists updates that product and keeps id and image."""
        # Arrange
        catalog = [existing(
            id="abc",
            code="EX001",
            name="Cimento antigo",
            category="Antiga",
            price=20.0,
            image="data:image/png;base64,AAAA",
        )]
        rows = [ImportRowFactory.create(
            code="EX001", name="Cimento", list_price=32.50, category="Construção"
        )]

        # Act
        result = reconcile(rows, catalog, {"Antiga"}, MergePolicy.UPDATE_AND_APPEND)

        # Assert
        assert len(result.writes) == 1
        write = result.writes[0]
        assert write.kind == WriteKind.UPDATE
        assert write.id == "abc"
        assert write.image == "data:image/png;base64,AAAA"
        record = write.to_record()
        assert record["name"] == "Cimento"
        assert record["category"] == "Construção"
        assert record["price"] == 32.5
        assert record["image"] == "data:image/png;base64,AAAA"

    def test_row_missing_price_produces_nothing(self):
        """Without a price there is no write and no category."""
        # Arrange
        rows = [ImportRowFactory.create(list_price=None)]

        # Act
        result = reconcile(rows, [], set(), MergePolicy.UPDATE_AND_APPEND)

        # Assert
        assert result.writes == ()
        assert result.categories_to_create == ()
        assert result.has_valid_rows is False
        assert result.is_empty is False
        assert result.skipped_count == 1

    def test_valid_and_invalid_rows_mixed(self):
        """5 valid + 3 invalid rows give exactly 5 writes."""
        # Arrange
        valid = [ImportRowFactory.create(code=f"V{i}") for i in range(5)]
        invalid = [
            ImportRowFactory.create(code=None),
            ImportRowFactory.create(name="   "),
            ImportRowFactory.create(category=""),
        ]
        rows = valid[:2] + invalid[:1] + valid[2:4] + invalid[1:] + valid[4:]

        # Act
        result = reconcile(rows, [], set(), MergePolicy.UPDATE_AND_APPEND)

        # Assert
        assert result.valid_count == 5
        assert result.submitted_count == 8
        assert result.skipped_count == 3
        assert [w.product.code for w in result.writes] == ["V0", "V1", "V2", "V3", "V4"]

    def test_zero_rows_is_distinct_from_zero_valid(self):
        """An empty submission is reported as empty, not as invalid."""
        result = reconcile([], [], set(), MergePolicy.UPDATE_AND_APPEND)

        assert result.is_empty is True
        assert result.has_valid_rows is False


class TestReconcileProperties:
    """Tests for invariants that hold for any input."""

    def test_unknown_distinct_codes_all_insert(self):
        """Distinct codes absent from the catalog never produce updates."""
        # Arrange
        catalog = [existing(code="OLD-1"), existing(code="OLD-2")]
        rows = [ImportRowFactory.create(code=f"NEW-{i}") for i in range(10)]

        # Act
        result = reconcile(rows, catalog, set(), MergePolicy.UPDATE_AND_APPEND)

        # Assert
        assert len(result.inserts) == 10
        assert result.updates == []

    def test_code_match_is_exact_and_case_sensitive(self):
        """'ex001' does not match 'EX001'."""
        catalog = [existing(id="abc", code="EX001")]
        rows = [ImportRowFactory.create(code="ex001")]

        result = reconcile(rows, catalog, set(), MergePolicy.UPDATE_AND_APPEND)

        assert result.writes[0].kind == WriteKind.INSERT

    def test_code_match_trims_row_value(self):
        """Cell text is trimmed before matching."""
        catalog = [existing(id="abc", code="EX001")]
        rows = [ImportRowFactory.create(code="  EX001 ")]

        result = reconcile(rows, catalog, set(), MergePolicy.UPDATE_AND_APPEND)

        assert result.writes[0].id == "abc"

    def test_duplicate_catalog_codes_match_first(self):
        """When two products share a code the first one is updated."""
        catalog = [existing(id="first", code="DUP"), existing(id="second", code="DUP")]
        rows = [ImportRowFactory.create(code="DUP")]

        result = reconcile(rows, catalog, set(), MergePolicy.UPDATE_AND_APPEND)

        assert result.writes[0].id == "first"

    def test_replace_all_ignores_catalog(self):
        """Every valid row is an insert under replace-all."""
        # Arrange
        catalog = [existing(id="abc", code="EX001", image="data:x")]
        rows = [
            ImportRowFactory.create(code="EX001"),
            ImportRowFactory.create(code="EX002"),
        ]

        # Act
        result = reconcile(rows, catalog, set(), MergePolicy.REPLACE_ALL)

        # Assert
        assert all(w.kind == WriteKind.INSERT for w in result.writes)
        assert all(w.id is None and w.image is None for w in result.writes)
        assert "image" not in result.writes[0].to_record()

    def test_categories_deduplicated_and_exclude_existing(self):
        """New categories appear once, in first-seen order, never existing ones."""
        # Arrange
        rows = [
            ImportRowFactory.create(code="A", category="Pintura"),
            ImportRowFactory.create(code="B", category="Elétrica"),
            ImportRowFactory.create(code="C", category="Pintura"),
            ImportRowFactory.create(code="D", category="Construção"),
            ImportRowFactory.create(code="E", category=" Elétrica "),
        ]

        # Act
        result = reconcile(rows, [], {"Construção"}, MergePolicy.UPDATE_AND_APPEND)

        # Assert
        assert result.categories_to_create == ("Pintura", "Elétrica")

    def test_invalid_row_category_not_created(self):
        """Categories of skipped rows are not collected."""
        rows = [ImportRowFactory.create(category="Hidráulica", name=None)]

        result = reconcile(rows, [], set(), MergePolicy.UPDATE_AND_APPEND)

        assert result.categories_to_create == ()

    def test_shuffling_invalid_rows_does_not_change_result(self):
        """The valid writes only depend on the valid rows and their order."""
        # Arrange
        valid = [ImportRowFactory.create(code=f"V{i}", category=f"Cat{i % 2}") for i in range(4)]
        invalid = [
            ImportRowFactory.create(code=""),
            ImportRowFactory.create(list_price="abc"),
            ImportRowFactory.create(list_price=float("nan")),
            ImportRowFactory.create(category=None),
        ]
        baseline = reconcile(valid, [], set(), MergePolicy.UPDATE_AND_APPEND)
        rng = random.Random(7)

        for _ in range(5):
            rows = list(valid)
            for bad in invalid:
                rows.insert(rng.randint(0, len(rows)), bad)

            # Act
            result = reconcile(rows, [], set(), MergePolicy.UPDATE_AND_APPEND)

            # Assert
            assert result.writes == baseline.writes
            assert result.categories_to_create == baseline.categories_to_create

    def test_inputs_are_not_modified(self):
        """The catalog snapshot and category set are left untouched."""
        catalog = [existing(code="EX001")]
        categories = {"Construção"}
        rows = [ImportRowFactory.create(code="EX001", category="Nova")]

        reconcile(rows, catalog, categories, MergePolicy.UPDATE_AND_APPEND)

        assert categories == {"Construção"}
        assert len(catalog) == 1


class TestDraftFromRow:
    """Tests for per-row field derivation."""

    def test_other_states_price_wins_over_list_price(self):
        row = ImportRowFactory.create(list_price=30.0, other_states_price=28.0)

        draft = draft_from_row(row)

        assert draft.price == Decimal("28.0")

    def test_list_price_used_when_other_states_blank(self):
        row = ImportRowFactory.create(list_price=30.0, other_states_price="  ")

        draft = draft_from_row(row)

        assert draft.price == Decimal("30.0")

    def test_list_price_still_required_when_other_states_filled(self):
        row = ImportRowFactory.create(list_price=None, other_states_price=28.0)

        assert draft_from_row(row) is None

    def test_regional_price_optional(self):
        with_regional = draft_from_row(ImportRowFactory.create(regional_price="35,00"))
        without = draft_from_row(ImportRowFactory.create(regional_price=None))

        assert with_regional.price_regional == Decimal("35.00")
        assert without.price_regional is None

    def test_bad_regional_price_dropped(self):
        draft = draft_from_row(ImportRowFactory.create(regional_price="n/d"))

        assert draft is not None
        assert draft.price_regional is None

    def test_negative_price_rejects_row(self):
        assert draft_from_row(ImportRowFactory.create(list_price=-1)) is None

    def test_unit_defaults(self):
        assert draft_from_row(ImportRowFactory.create(unit=None)).unit == "UN"
        assert draft_from_row(ImportRowFactory.create(unit=" KG ")).unit == "KG"
        assert draft_from_row(ImportRowFactory.create(unit=None), default_unit="PC").unit == "PC"

    def test_numeric_code_read_as_integer_text(self):
        """Excel stores 1001 as 1001.0."""
        draft = draft_from_row(ImportRowFactory.create(code=1001.0))

        assert draft.code == "1001"

    def test_stock_always_zero(self):
        row = dict(ImportRowFactory.create())
        row["Estoque"] = 50

        assert draft_from_row(row).stock == 0

    def test_missing_columns_reject_row(self):
        assert draft_from_row({"Código do Produto": "X"}) is None


class TestCellParsing:
    """Tests for price and sales multiple parsing."""

    @pytest.mark.parametrize("value,expected", [
        (32.5, Decimal("32.5")),
        (10, Decimal("10")),
        ("32.50", Decimal("32.50")),
        ("32,50", Decimal("32.50")),
        ("1.234,56", Decimal("1234.56")),
        ("R$ 35,00", Decimal("35.00")),
    ])
    def test_parse_decimal_accepts(self, value, expected):
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "abc", float("nan"), math.inf, "Infinity", True,
    ])
    def test_parse_decimal_rejects(self, value):
        assert parse_decimal(value) is None

    @pytest.mark.parametrize("value,expected", [
        (None, 1),
        ("", 1),
        (6, 6),
        (12.0, 12),
        ("10 un", 10),
        ("caixa", 1),
        (0, 1),
        (-3, 1),
        ("-2", 1),
    ])
    def test_parse_sales_multiple(self, value, expected):
        assert parse_sales_multiple(value) == expected
