"""
Validators for customer input.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from oilbot.core.catalog import Catalog, CatalogItem


INVALID_SELECTION_MESSAGE = "❌ Invalid selection. Please reply with numbers like <b>1,3</b>"
INVALID_QUANTITY_MESSAGE = "❌ Please enter a valid quantity (e.g. 2.5)"
EMPTY_ADDRESS_MESSAGE = "Please share your delivery address:"


class ItemSelectionValidator:
    """Parse comma-separated catalog ids."""

    @classmethod
    def validate(cls, text: str, catalog: Catalog) -> Tuple[bool, list[CatalogItem], Optional[str]]:
        """
        Resolve item numbers against the catalog.

        Tokens that are not integers or not in the catalog are skipped.
        Input order is kept and repeated ids give repeated items.

        Returns:
            Tuple of (is_valid, items, error_message)
        """
        items = []
        for token in text.split(","):
            token = token.strip()
            try:
                item_id = int(token)
            except ValueError:
                continue
            item = catalog.find_by_id(item_id)
            if item is not None:
                items.append(item)

        if not items:
            return False, [], INVALID_SELECTION_MESSAGE

        return True, items, None


class QuantityValidator:
    """Validate quantity in litres."""

    UNIT_PATTERN = re.compile(r'\s*(l|ltr|litres?|liters?)\.?\s*$', re.IGNORECASE)
    MAX_QUANTITY = Decimal("1000")

    @classmethod
    def validate(cls, quantity_str: str) -> Tuple[bool, Optional[Decimal], Optional[str]]:
        """
        Positive litres up to MAX_QUANTITY, fractions allowed.

        Returns:
            Tuple of (is_valid, quantity, error_message)
        """
        quantity_str = quantity_str.strip()

        if not quantity_str:
            return False, None, INVALID_QUANTITY_MESSAGE

        quantity_str = cls.UNIT_PATTERN.sub("", quantity_str)
        quantity_str = quantity_str.replace(",", ".")

        try:
            quantity = Decimal(quantity_str)
        except InvalidOperation:
            return False, None, INVALID_QUANTITY_MESSAGE

        if not quantity.is_finite() or quantity <= 0 or quantity > cls.MAX_QUANTITY:
            return False, None, INVALID_QUANTITY_MESSAGE

        return True, quantity, None


class AddressValidator:
    """Validate delivery address."""

    @classmethod
    def validate(cls, address: str) -> Tuple[bool, Optional[str], Optional[str]]:
        """
        Validate delivery address.

        Returns:
            Tuple of (is_valid, normalized_address, error_message)
        """
        address = address.strip()

        if not address:
            return False, None, EMPTY_ADDRESS_MESSAGE

        return True, address, None
