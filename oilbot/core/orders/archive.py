"""
JSON archive of completed orders.
One file per order, written once when the order completes.
"""

import json
import logging
from pathlib import Path

from oilbot.core.orders.models import CompletedOrder

logger = logging.getLogger(__name__)


class OrderArchive:
    """Write and read completed orders as {orders_dir}/{order_id}.json."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def path_for(self, order_id: str) -> Path:
        return self.directory / f"{order_id}.json"

    def save(self, order: CompletedOrder) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(order.order_id)
        path.write_text(
            json.dumps(order.to_dict(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        logger.info(f"Order {order.order_id} archived to {path}")
        return path

    def load(self, order_id: str) -> CompletedOrder:
        data = json.loads(self.path_for(order_id).read_text(encoding="utf-8"))
        return CompletedOrder.from_dict(data)
