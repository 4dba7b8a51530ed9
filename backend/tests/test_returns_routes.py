# Overview: Pytest coverage for the return processing HTTP contract.

"""
Return API Tests

SCENARIO: POST /api/returns against an order with A1 x3 @ 10.00
EXPECTED:
- valid returns answer 200 with the refund, new total and remaining ledger
- malformed bodies answer 400 and touch nothing
- unknown orders answer 500 with the reason in the message
- business-rule failures answer 500 with the reason in the message
"""

from pos_backoffice.models import Order, ProductVariation, ReturnedItem


def _post(client, payload):
    return client.post("/api/returns", json=payload)


class TestProcessReturnRoute:

    def test_success_payload(self, client, db_session, mug_order):
        order, variation = mug_order
        order_id, variation_id = order.id, variation.id

        response = _post(client, {
            "order_id": order_id,
            "items": [{"id": "A1", "quantity": 2, "reason": "defective"}],
        })

        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "success"
        assert body["message"] == "Return processed successfully"
        assert body["data"] == {
            "order_id": order_id,
            "returned_amount": "20.00",
            "returned_amount_cents": 2000,
            "new_total": "10.00",
            "new_total_cents": 1000,
            "remaining_items": [
                {"barcode": "A1", "price_cents": 1000, "price": "10.00", "quantity": 1},
            ],
        }

        db_session.expire_all()
        assert db_session.get(ProductVariation, variation_id).quantity == 7
        assert db_session.get(Order, order_id).amount_cents == 1000
        assert db_session.query(ReturnedItem).count() == 1

    def test_excessive_quantity(self, client, db_session, mug_order):
        order, variation = mug_order
        order_id, variation_id = order.id, variation.id

        response = _post(client, {
            "order_id": order_id,
            "items": [{"id": "A1", "quantity": 5, "reason": "defective"}],
        })

        assert response.status_code == 500
        body = response.get_json()
        assert body["status"] == "error"
        assert body["message"].startswith("Failed to process return: Cannot return more items than purchased")

        db_session.expire_all()
        assert db_session.get(ProductVariation, variation_id).quantity == 5
        assert db_session.get(Order, order_id).amount_cents == 3000
        assert db_session.query(ReturnedItem).count() == 0

    def test_item_not_in_order(self, client, db_session, mug_order):
        order, _ = mug_order

        response = _post(client, {
            "order_id": order.id,
            "items": [{"id": "B2", "quantity": 1, "reason": "defective"}],
        })

        assert response.status_code == 500
        assert response.get_json()["message"] == "Failed to process return: Product B2 not found in order"

    def test_unknown_order_is_server_error(self, client, db_session):
        response = _post(client, {
            "order_id": 31337,
            "items": [{"id": "A1", "quantity": 1, "reason": "defective"}],
        })

        assert response.status_code == 500
        assert response.get_json() == {
            "status": "error",
            "message": "Failed to process return: Order 31337 not found",
        }

    def test_validation_error(self, client, db_session, mug_order):
        order, _ = mug_order

        response = _post(client, {
            "order_id": order.id,
            "items": [{"id": "A1", "quantity": 0, "reason": "defective"}],
        })

        assert response.status_code == 400
        body = response.get_json()
        assert body["status"] == "error"
        assert "items[0].quantity" in body["message"]

    def test_non_json_body(self, client, db_session):
        response = client.post("/api/returns", data="order_id=1", content_type="text/plain")

        assert response.status_code == 400
        assert response.get_json()["status"] == "error"

    def test_replay_is_rejected(self, client, db_session, mug_order):
        order, _ = mug_order
        payload = {
            "order_id": order.id,
            "items": [{"id": "A1", "quantity": 2, "reason": "defective"}],
        }

        assert _post(client, payload).status_code == 200
        second = _post(client, payload)

        assert second.status_code == 500
        assert "Cannot return more items than purchased" in second.get_json()["message"]


class TestHealthRoute:

    def test_health(self, client, db_session):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "healthy"
