"""Tests for customer input validators."""

from decimal import Decimal

import pytest

from oilbot.core.orders.validators import (
    EMPTY_ADDRESS_MESSAGE,
    INVALID_QUANTITY_MESSAGE,
    INVALID_SELECTION_MESSAGE,
    AddressValidator,
    ItemSelectionValidator,
    QuantityValidator,
)


class TestItemSelectionValidator:
    def test_single_id(self, catalog):
        ok, items, error = ItemSelectionValidator.validate("2", catalog)
        assert ok
        assert [item.id for item in items] == [2]
        assert error is None

    def test_keeps_input_order(self, catalog):
        ok, items, _ = ItemSelectionValidator.validate("3, 1", catalog)
        assert ok
        assert [item.id for item in items] == [3, 1]

    def test_duplicates_preserved(self, catalog):
        ok, items, _ = ItemSelectionValidator.validate("1,1,3", catalog)
        assert ok
        assert [item.id for item in items] == [1, 1, 3]

    def test_unknown_and_garbage_tokens_skipped(self, catalog):
        ok, items, _ = ItemSelectionValidator.validate("abc, 2, 9, ,", catalog)
        assert ok
        assert [item.id for item in items] == [2]

    @pytest.mark.parametrize("text", ["7", "", "oil", "0,-1"])
    def test_nothing_valid(self, catalog, text):
        ok, items, error = ItemSelectionValidator.validate(text, catalog)
        assert not ok
        assert items == []
        assert error == INVALID_SELECTION_MESSAGE


class TestQuantityValidator:
    @pytest.mark.parametrize("text, expected", [
        ("2", Decimal("2")),
        (" 1.5 ", Decimal("1.5")),
        ("1,5", Decimal("1.5")),
        ("3L", Decimal("3")),
        ("2 litres", Decimal("2")),
        ("0.25 liter", Decimal("0.25")),
    ])
    def test_valid(self, text, expected):
        ok, quantity, error = QuantityValidator.validate(text)
        assert ok
        assert quantity == expected
        assert error is None

    def test_upper_bound_inclusive(self):
        ok, quantity, _ = QuantityValidator.validate("1000")
        assert ok
        assert quantity == QuantityValidator.MAX_QUANTITY

    @pytest.mark.parametrize("text", ["", "abc", "0", "-1", "NaN", "Infinity", "two", "1e30", "1000.5"])
    def test_invalid(self, text):
        ok, quantity, error = QuantityValidator.validate(text)
        assert not ok
        assert quantity is None
        assert error == INVALID_QUANTITY_MESSAGE


class TestAddressValidator:
    def test_strips(self):
        ok, address, error = AddressValidator.validate("  12 MG Road, Pune \n")
        assert ok
        assert address == "12 MG Road, Pune"
        assert error is None

    def test_blank(self):
        ok, address, error = AddressValidator.validate("   ")
        assert not ok
        assert address is None
        assert error == EMPTY_ADDRESS_MESSAGE
