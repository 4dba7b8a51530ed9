from __future__ import annotations

from sqlalchemy import event

from ..extensions import db
from ..time_utils import to_utc_z


class ImmutableRecordError(Exception):
    """Raised when code attempts to modify or delete an append-only record."""


class ReturnedItem(db.Model):
    """
    Append-only audit record of one returned line.

    One row per (order, variation, return call). Rows are never updated or
    deleted; the mapper listeners below reject both at flush time.
    """
    __tablename__ = "returned_items"
    __table_args__ = (
        db.Index("ix_returned_items_order_date", "order_id", "return_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="RESTRICT"), nullable=False, index=True)
    product_variation_id = db.Column(
        db.Integer,
        db.ForeignKey("product_variations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=False)

    # Refund for this line (ledger unit price at return time x quantity)
    returned_amount_cents = db.Column(db.Integer, nullable=False, default=0)

    return_date = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    order = db.relationship("Order", backref=db.backref("returned_items", lazy=True))
    product_variation = db.relationship("ProductVariation", backref=db.backref("returned_items", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "product_variation_id": self.product_variation_id,
            "quantity": self.quantity,
            "reason": self.reason,
            "returned_amount_cents": self.returned_amount_cents,
            "return_date": to_utc_z(self.return_date),
            "created_at": to_utc_z(self.created_at),
        }


@event.listens_for(ReturnedItem, "before_update")
def _reject_returned_item_update(mapper, connection, target):
    raise ImmutableRecordError(f"ReturnedItem {target.id} is immutable and cannot be updated")


@event.listens_for(ReturnedItem, "before_delete")
def _reject_returned_item_delete(mapper, connection, target):
    raise ImmutableRecordError(f"ReturnedItem {target.id} is immutable and cannot be deleted")
