# Overview: Service-layer operations for the order line-item ledger; encodes, decodes and queries it.

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ..extensions import db
from ..models import Order
from ..money import format_cents, to_cents
from ..validation import coerce_int
from .concurrency import lock_for_update

"""
Order Line Ledger Invariants (authoritative)

Storage shape:
- Order.items holds a JSON list of {"barcode", "price_cents", "quantity"}.
- Legacy rows may use "bar_code" for the barcode and a decimal "price"
  (dollars) instead of "price_cents"; both are accepted on read and the
  canonical keys are always written back.
- Any other keys on an entry (e.g. "variation_id") are carried through
  a rewrite unchanged.

Reads are tolerant:
- Missing, empty, malformed or non-list ledgers decode to [] (warning logged).
- Individual malformed entries are left out of the working lines (warning
  logged) but are written back verbatim, in place, by write_ledger.
- price_cents and quantity must be integral; 999.9 or 2.5 make the entry
  malformed rather than being truncated.

Business invariants:
- Line quantity is >= 0 after every reconciliation.
- Zero-quantity lines are pruned before the ledger is persisted.
"""

logger = logging.getLogger(__name__)

_LEDGER_KEYS = ("barcode", "bar_code", "price_cents", "price", "quantity")


@dataclass
class LedgerLine:
    """One purchased line on an order (mutable working copy)."""
    barcode: str
    price_cents: int
    quantity: int
    # Position in the stored ledger; None for lines not read from storage
    source_index: int | None = field(default=None, compare=False, repr=False)
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict:
        data = dict(self.extra)
        data.update(barcode=self.barcode, price_cents=self.price_cents, quantity=self.quantity)
        return data

    def to_response(self) -> dict:
        data = self.to_dict()
        data["price"] = format_cents(self.price_cents)
        return data


def _decode_line(entry: Any, index: int | None = None) -> LedgerLine | None:
    if not isinstance(entry, dict):
        return None

    barcode = entry.get("barcode", entry.get("bar_code"))
    if barcode is None or str(barcode).strip() == "":
        return None

    try:
        if entry.get("price_cents") is not None:
            price_cents = coerce_int("price_cents", entry["price_cents"])
        elif entry.get("price") is not None:
            price_cents = to_cents(entry["price"])
        else:
            return None
        quantity = coerce_int("quantity", entry.get("quantity", 0))
    except (TypeError, ValueError):
        return None

    return LedgerLine(
        barcode=str(barcode),
        price_cents=price_cents,
        quantity=quantity,
        source_index=index,
        extra={k: v for k, v in entry.items() if k not in _LEDGER_KEYS},
    )


def _load_entries(raw: str | None) -> list:
    if raw is None or str(raw).strip() == "":
        return []

    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Unparseable order ledger treated as empty")
        return []

    if not isinstance(data, list):
        logger.warning("Order ledger is not a list (%s); treated as empty", type(data).__name__)
        return []
    return data


def decode_ledger(raw: str | None) -> list[LedgerLine]:
    """
    Decode an order's stored ledger into working LedgerLine objects.

    Never raises: anything unreadable is treated as an empty ledger.
    """
    lines = []
    for index, entry in enumerate(_load_entries(raw)):
        line = _decode_line(entry, index)
        if line is None:
            logger.warning("Skipping malformed order ledger entry at index %d", index)
            continue
        lines.append(line)
    return lines


def encode_ledger(lines: list[LedgerLine]) -> str:
    """Encode ledger lines to the canonical persisted JSON form."""
    return json.dumps([line.to_dict() for line in lines])


def find_line(lines: list[LedgerLine], barcode: str) -> LedgerLine | None:
    """First ledger line matching barcode, or None."""
    for line in lines:
        if line.barcode == barcode:
            return line
    return None


def prune_empty_lines(lines: list[LedgerLine]) -> list[LedgerLine]:
    return [line for line in lines if line.quantity > 0]


def ledger_total_cents(lines: list[LedgerLine]) -> int:
    return sum(line.price_cents * line.quantity for line in lines)


# =============================================================================
# PERSISTENCE
# =============================================================================

def load_order_for_update(order_id: int) -> Order | None:
    """Load an order with a row lock held until the enclosing transaction ends."""
    return lock_for_update(db.session.query(Order).filter_by(id=order_id)).first()


def write_ledger(order: Order, lines: list[LedgerLine]) -> None:
    """
    Stage the ledger rewrite on the order (flushed by the caller's unit of work).

    Walks the stored entries in order: entries decoded into lines are
    replaced by their working line (merged over any extra keys), entries
    that decoded but are absent from lines (pruned) are dropped, and
    malformed entries are kept verbatim. Lines not read from storage are
    appended.
    """
    working = {line.source_index: line for line in lines if line.source_index is not None}

    entries = []
    for index, entry in enumerate(_load_entries(order.items)):
        if index in working:
            entries.append(working[index].to_dict())
        elif _decode_line(entry) is None:
            entries.append(entry)
    entries.extend(line.to_dict() for line in lines if line.source_index is None)

    order.items = json.dumps(entries)


def create_order(lines: list[LedgerLine], amount_cents: int | None = None) -> Order:
    """
    Record a checked-out order with its line-item ledger.

    Checkout itself lives outside the back office; this is used by the CLI
    and tests to seed orders. amount_cents defaults to the ledger total.
    """
    if amount_cents is None:
        amount_cents = ledger_total_cents(lines)

    order = Order(items=encode_ledger(lines), amount_cents=amount_cents)
    db.session.add(order)
    db.session.flush()
    return order
