"""
Return Reconciliation Service

Processes a partial or full return against a completed order as one
all-or-nothing unit of work:

1. Lock the order and decode its line-item ledger
2. For each requested item (in request order): match the ledger line,
   check the remaining quantity, restock the variation, compute the refund
   and append a ReturnedItem audit record
3. Prune exhausted lines, rewrite the ledger and decrement the order total
4. Commit, or roll back everything on any failure

REFUND POLICY:
The refund for a line is the ledger line's CURRENT price_cents x quantity.
There is no separate snapshot of the original sale price, so a ledger price
edited after the sale changes the refund. order.amount_cents is decremented
by the same amount.

NOT IDEMPOTENT:
Replaying a committed request works against the already reduced ledger and
fails once a line is exhausted. That failure is the guard against double
refunds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..config import Config
from ..models import ReturnedItem
from ..time_utils import utcnow
from ..validation import ReturnItemRequest
from . import inventory_service, order_line_service, return_record_service
from .concurrency import StorageFailureError, unit_of_work
from .order_line_service import LedgerLine

logger = logging.getLogger(__name__)


class ReturnError(Exception):
    """Raised for return operation errors."""
    pass


class InvalidReturnRequestError(ReturnError):
    """Request is malformed; nothing was attempted."""


class OrderNotFoundError(ReturnError):
    """The order being returned against does not exist."""


class ItemNotInOrderError(ReturnError):
    """A requested barcode has no line on the order's ledger."""


class ExcessiveReturnQuantityError(ReturnError):
    """More units requested than remain on the ledger line."""


class VariationNotFoundError(ReturnError):
    """No product variation carries the requested barcode."""


__all__ = [
    "ReturnError",
    "InvalidReturnRequestError",
    "OrderNotFoundError",
    "ItemNotInOrderError",
    "ExcessiveReturnQuantityError",
    "VariationNotFoundError",
    "StorageFailureError",
    "ReturnResult",
    "process_return",
]


@dataclass
class ReturnResult:
    order_id: int
    returned_amount_cents: int
    new_total_cents: int
    remaining_items: list[LedgerLine] = field(default_factory=list)
    records: list[ReturnedItem] = field(default_factory=list)


def _check_items(items: Iterable[ReturnItemRequest], reason_min_length: int) -> list[ReturnItemRequest]:
    """Re-check request invariants for callers that bypass the HTTP boundary."""
    items = list(items or [])
    if not items:
        raise InvalidReturnRequestError("At least one item is required")

    for index, item in enumerate(items):
        if not isinstance(item.barcode, str) or not item.barcode.strip():
            raise InvalidReturnRequestError(f"items[{index}]: barcode is required")
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity < 1:
            raise InvalidReturnRequestError(f"items[{index}]: quantity must be an integer >= 1")
        if not isinstance(item.reason, str) or len(item.reason.strip()) < reason_min_length:
            raise InvalidReturnRequestError(
                f"items[{index}]: reason must be at least {reason_min_length} characters"
            )
    return items


def process_return(
    order_id: int,
    items: Iterable[ReturnItemRequest],
    *,
    reason_min_length: int = Config.RETURN_REASON_MIN_LENGTH,
) -> ReturnResult:
    """
    Reconcile a product return against an order.

    Args:
        order_id: Order the items were purchased on
        items: Requested return lines, applied strictly in the given order
        reason_min_length: Minimum length of each item's reason

    Returns:
        ReturnResult with the refund, the new order total and the remaining ledger

    Raises:
        InvalidReturnRequestError: Malformed request (no mutation attempted)
        OrderNotFoundError: Unknown order
        ItemNotInOrderError: Barcode not on the order's ledger
        ExcessiveReturnQuantityError: Requested quantity exceeds the ledger line
        VariationNotFoundError: No variation with the barcode
        StorageFailureError: Flush or commit failed

    Every error after validation rolls back the whole call: restocks,
    return records and the ledger rewrite.
    """
    if isinstance(order_id, bool) or not isinstance(order_id, int):
        raise InvalidReturnRequestError("order_id must be an integer")
    items = _check_items(items, reason_min_length)

    try:
        with unit_of_work():
            order = order_line_service.load_order_for_update(order_id)
            if order is None:
                raise OrderNotFoundError(f"Order {order_id} not found")

            # Working copy; discarded with the transaction on failure
            ledger = order_line_service.decode_ledger(order.items)
            total_return_cents = 0
            records = []
            return_date = utcnow()

            for item in items:
                line = order_line_service.find_line(ledger, item.barcode)
                if line is None:
                    raise ItemNotInOrderError(f"Product {item.barcode} not found in order")

                if item.quantity > line.quantity:
                    raise ExcessiveReturnQuantityError(
                        f"Cannot return more items than purchased for product {item.barcode} "
                        f"(requested {item.quantity}, remaining {line.quantity})"
                    )

                variation = inventory_service.get_variation_by_barcode(item.barcode, for_update=True)
                if variation is None:
                    raise VariationNotFoundError(f"Product variation {item.barcode} not found")

                inventory_service.restock(variation.id, item.quantity)

                line_refund_cents = line.price_cents * item.quantity
                total_return_cents += line_refund_cents

                records.append(return_record_service.append_return_record(
                    order_id=order.id,
                    product_variation_id=variation.id,
                    quantity=item.quantity,
                    reason=item.reason,
                    returned_amount_cents=line_refund_cents,
                    return_date=return_date,
                ))

                line.quantity -= item.quantity

            remaining = order_line_service.prune_empty_lines(ledger)
            order_line_service.write_ledger(order, remaining)
            order.amount_cents = order.amount_cents - total_return_cents
            new_total_cents = order.amount_cents
    except ReturnError as e:
        logger.warning("Return rejected for order %s: %s", order_id, e)
        raise

    logger.info(
        "Return committed for order %s: %d item(s), refund %d cents, new total %d cents",
        order_id, len(items), total_return_cents, new_total_cents,
    )

    return ReturnResult(
        order_id=order_id,
        returned_amount_cents=total_return_cents,
        new_total_cents=new_total_cents,
        remaining_items=remaining,
        records=records,
    )
