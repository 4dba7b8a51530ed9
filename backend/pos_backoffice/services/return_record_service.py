# Overview: Append-only writes to the returned-items audit trail.

from __future__ import annotations

from datetime import datetime

from ..extensions import db
from ..models import ReturnedItem
from ..time_utils import utcnow


def append_return_record(
    *,
    order_id: int,
    product_variation_id: int,
    quantity: int,
    reason: str,
    returned_amount_cents: int,
    return_date: datetime | None = None,
) -> ReturnedItem:
    """
    Append one immutable return record in the caller's transaction.

    No update or delete counterpart exists; the model rejects both at
    flush time.
    """
    record = ReturnedItem(
        order_id=order_id,
        product_variation_id=product_variation_id,
        quantity=quantity,
        reason=reason,
        returned_amount_cents=returned_amount_cents,
        return_date=return_date or utcnow(),
    )
    db.session.add(record)
    db.session.flush()
    return record
