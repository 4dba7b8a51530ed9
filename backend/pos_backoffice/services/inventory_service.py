# Overview: Service-layer operations for inventory; encapsulates stock lookups and restocks.

from __future__ import annotations

import logging

from sqlalchemy import update

from ..extensions import db
from ..models import ProductVariation
from ..validation import ConflictError
from .concurrency import lock_for_update

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Raised for inventory operation errors."""
    pass


def get_variation_by_barcode(barcode: str, *, for_update: bool = False) -> ProductVariation | None:
    """
    Look up a product variation by its barcode.

    for_update=True holds a row lock until the enclosing transaction ends,
    so concurrent returns of the same variation serialize.
    """
    query = db.session.query(ProductVariation).filter_by(barcode=barcode)
    if for_update:
        query = lock_for_update(query)
    return query.first()


def restock(variation_id: int, quantity: int) -> None:
    """
    Add returned units back to a variation's on-hand stock.

    Issues a single UPDATE ... SET quantity = quantity + :n so the increment
    is atomic in the database. Runs inside the caller's transaction: nothing
    is committed here, and a rollback discards the restock.

    Raises:
        InventoryError: If quantity is not positive or the variation does not exist
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise InventoryError("Restock quantity must be a positive integer")

    result = db.session.execute(
        update(ProductVariation)
        .where(ProductVariation.id == variation_id)
        .values(quantity=ProductVariation.quantity + quantity)
    )
    if not result.rowcount:
        raise InventoryError(f"ProductVariation {variation_id} not found")

    logger.debug("Restocked variation %s by %s", variation_id, quantity)


def create_variation(barcode: str, quantity: int = 0, name: str | None = None) -> ProductVariation:
    """
    Register a product variation with its starting stock.

    Raises:
        ConflictError: If the barcode is already registered
        InventoryError: If quantity is negative
    """
    barcode = (barcode or "").strip()
    if not barcode:
        raise InventoryError("barcode is required")
    if quantity < 0:
        raise InventoryError("quantity must be >= 0")

    if get_variation_by_barcode(barcode) is not None:
        raise ConflictError(f"Barcode {barcode} already exists")

    variation = ProductVariation(barcode=barcode, name=name, quantity=quantity)
    db.session.add(variation)
    db.session.flush()
    return variation
