"""
Product catalog.
Static list of oils loaded once at startup.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from html import escape
from pathlib import Path
from typing import Optional

from oilbot.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogItem:
    """Purchasable product, priced per litre."""
    id: int
    name: str
    unit_price: Decimal

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "unit_price": str(self.unit_price),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogItem":
        """Restore from dictionary produced by to_dict()."""
        return cls(
            id=int(data["id"]),
            name=data["name"],
            unit_price=Decimal(str(data["unit_price"])),
        )


DEFAULT_ITEMS = (
    CatalogItem(id=1, name="Sunflower Oil", unit_price=Decimal("120")),
    CatalogItem(id=2, name="Mustard Oil", unit_price=Decimal("140")),
    CatalogItem(id=3, name="Groundnut Oil", unit_price=Decimal("160")),
)


def format_amount(value: Decimal) -> str:
    """Render a decimal without trailing zeros: 240.0 -> 240, 2.50 -> 2.5."""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


class Catalog:
    """Read-only lookup over catalog items, in listing order."""

    def __init__(self, items):
        self._items = tuple(items)
        self._by_id = {}
        for item in self._items:
            if item.id in self._by_id:
                raise ConfigurationError(f"Duplicate catalog id: {item.id}")
            if item.unit_price <= 0:
                raise ConfigurationError(f"Catalog item {item.id} has non-positive price")
            self._by_id[item.id] = item

    @classmethod
    def default(cls) -> "Catalog":
        return cls(DEFAULT_ITEMS)

    @classmethod
    def from_file(cls, path: Path) -> "Catalog":
        """
        Load catalog from JSON file.

        Expected format:
            [{"id": 1, "name": "Sunflower Oil", "price": "120"}, ...]
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read catalog file {path}: {e}") from e

        items = []
        for entry in raw:
            try:
                items.append(CatalogItem(
                    id=int(entry["id"]),
                    name=str(entry["name"]),
                    unit_price=Decimal(str(entry["price"])),
                ))
            except (KeyError, TypeError, ValueError, InvalidOperation) as e:
                raise ConfigurationError(f"Invalid catalog entry {entry!r}: {e}") from e

        logger.info(f"Loaded {len(items)} catalog items from {path}")
        return cls(items)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Catalog":
        """Load from file when a path is configured, otherwise use the default list."""
        if path is None:
            return cls.default()
        return cls.from_file(path)

    def find_by_id(self, item_id: int) -> Optional[CatalogItem]:
        return self._by_id.get(item_id)

    def all(self) -> tuple[CatalogItem, ...]:
        return self._items

    def __len__(self) -> int:
        return len(self._items)

    def format_menu(self) -> str:
        """Numbered listing shown to the customer."""
        return "\n".join(
            f"{item.id}. {escape(item.name)} - ₹{format_amount(item.unit_price)}/L"
            for item in self._items
        )
