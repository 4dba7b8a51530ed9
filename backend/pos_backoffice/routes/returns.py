# Overview: Flask API route for processing returns; validates input and returns JSON responses.

# backend/pos_backoffice/routes/returns.py
"""
Return Processing API Routes

POST /api/returns
{
    "order_id": 123,
    "items": [
        {"id": "A1", "quantity": 2, "reason": "defective"}
    ]
}

Responses:
    200: {"status": "success", "message": ..., "data": {...}}
    400: structural validation failure
    500: any other reconciliation or storage failure (unknown order included),
         reason in message
"""

from flask import Blueprint, request, jsonify, current_app

from ..money import format_cents
from ..services import return_service
from ..services.return_service import (
    ReturnError,
    InvalidReturnRequestError,
    StorageFailureError,
)
from ..validation import ValidationError, validate_return_request


returns_bp = Blueprint("returns", __name__, url_prefix="/api/returns")


def _error(message: str, status_code: int):
    return jsonify({"status": "error", "message": message}), status_code


def _result_payload(result: return_service.ReturnResult) -> dict:
    return {
        "order_id": result.order_id,
        "returned_amount": format_cents(result.returned_amount_cents),
        "returned_amount_cents": result.returned_amount_cents,
        "new_total": format_cents(result.new_total_cents),
        "new_total_cents": result.new_total_cents,
        "remaining_items": [line.to_response() for line in result.remaining_items],
    }


@returns_bp.post("")
def process_return_route():
    """
    Process a partial or full return against a completed order.

    The whole request is applied atomically: either every item is restocked,
    refunded and recorded, or nothing changes.
    """
    payload = request.get_json(silent=True)
    current_app.logger.info("Processing return request: %s", payload)

    try:
        order_id, items = validate_return_request(
            payload,
            reason_min_length=current_app.config["RETURN_REASON_MIN_LENGTH"],
        )
    except ValidationError as e:
        current_app.logger.warning("Rejected return request: %s", e)
        return _error(str(e), 400)

    context = {"order_id": order_id, "barcodes": [item.barcode for item in items]}

    try:
        result = return_service.process_return(
            order_id,
            items,
            reason_min_length=current_app.config["RETURN_REASON_MIN_LENGTH"],
        )
    except InvalidReturnRequestError as e:
        current_app.logger.warning("Rejected return request: %s %s", e, context)
        return _error(str(e), 400)
    except (ReturnError, StorageFailureError) as e:
        current_app.logger.error("Return processing failed: %s %s", e, context)
        return _error(f"Failed to process return: {e}", 500)
    except Exception:
        current_app.logger.exception("Return processing failed %s", context)
        return _error("Failed to process return: Internal server error", 500)

    return jsonify({
        "status": "success",
        "message": "Return processed successfully",
        "data": _result_payload(result),
    }), 200
