from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class Order(db.Model):
    """
    Completed checkout order.

    The purchased line items are kept as an embedded JSON ledger in `items`
    (list of {"barcode", "price_cents", "quantity"}). After checkout the only
    writer is the return reconciliation engine, which rewrites the ledger and
    decrements `amount_cents` by each refund.
    """
    __tablename__ = "orders"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)

    # JSON-encoded line-item ledger (see services.order_line_service)
    items = db.Column(db.Text, nullable=True)

    # Running order total in cents
    amount_cents = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )
    version_id = db.Column(db.Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Order id={self.id} amount_cents={self.amount_cents}>"

    def to_dict(self) -> dict:
        from ..services.order_line_service import decode_ledger

        return {
            "id": self.id,
            "items": [line.to_dict() for line in decode_ledger(self.items)],
            "amount_cents": self.amount_cents,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "version_id": self.version_id,
        }
