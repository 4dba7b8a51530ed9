from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .config import Config


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate barcode)."""


@dataclass(frozen=True)
class ReturnItemRequest:
    """One requested return line: which barcode, how many, and why."""
    barcode: str
    quantity: int
    reason: str


def coerce_int(field: str, value: Any) -> int:
    """
    Strict integer coercion for JSON input.

    Accepts ints and plain digit strings. Rejects bools, floats, decimals
    and scientific notation.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    # Reject floats explicitly
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def _validate_return_item(index: int, raw: Any, reason_min_length: int) -> ReturnItemRequest:
    prefix = f"items[{index}]"
    if not isinstance(raw, dict):
        raise ValidationError(f"{prefix} must be an object")

    missing = [f for f in ("id", "quantity", "reason") if raw.get(f) is None]
    if missing:
        raise ValidationError(f"{prefix} missing required fields: {', '.join(missing)}")

    barcode = raw["id"]
    if not isinstance(barcode, str) or not barcode.strip():
        raise ValidationError(f"{prefix}.id must be a non-blank string")

    quantity = coerce_int(f"{prefix}.quantity", raw["quantity"])
    if quantity < 1:
        raise ValidationError(f"{prefix}.quantity must be >= 1")

    reason = raw["reason"]
    if not isinstance(reason, str):
        raise ValidationError(f"{prefix}.reason must be a string")
    reason = reason.strip()
    if len(reason) < reason_min_length:
        raise ValidationError(f"{prefix}.reason must be at least {reason_min_length} characters")

    return ReturnItemRequest(barcode=barcode.strip(), quantity=quantity, reason=reason)


def validate_return_request(
    payload: Any,
    *,
    reason_min_length: int = Config.RETURN_REASON_MIN_LENGTH,
) -> tuple[int, list[ReturnItemRequest]]:
    """
    Validates + normalizes a return request body:

        {"order_id": 1, "items": [{"id": "A1", "quantity": 2, "reason": "defective"}]}

    Returns (order_id, items). Structural checks only; whether the order,
    barcodes and quantities exist is decided by the return service.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    missing = [f for f in ("order_id", "items") if f not in payload]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    order_id = coerce_int("order_id", payload["order_id"])
    if order_id < 1:
        raise ValidationError("order_id must be a positive integer")

    raw_items = payload["items"]
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")
    if not raw_items:
        raise ValidationError("items must contain at least one item")

    items = [_validate_return_item(i, raw, reason_min_length) for i, raw in enumerate(raw_items)]
    return order_id, items
