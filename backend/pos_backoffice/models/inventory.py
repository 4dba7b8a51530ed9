from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z


class ProductVariation(db.Model):
    """
    Sellable variation of a product, identified externally by its barcode.

    `quantity` is the on-hand stock. Returns increment it in the same
    transaction that records the return.
    """
    __tablename__ = "product_variations"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="quantity_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    barcode = db.Column(db.String(64), nullable=False, unique=True, index=True)
    name = db.Column(db.String(255), nullable=True)

    quantity = db.Column(db.Integer, nullable=False, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<ProductVariation id={self.id} barcode={self.barcode!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "barcode": self.barcode,
            "name": self.name,
            "quantity": self.quantity,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
