import json

import pytest

from pos_backoffice.models import Order
from pos_backoffice.services import order_line_service
from pos_backoffice.services.order_line_service import (
    LedgerLine,
    decode_ledger,
    encode_ledger,
    find_line,
    prune_empty_lines,
    ledger_total_cents,
)


class TestDecodeLedger:

    @pytest.mark.parametrize("raw", [None, "", "   ", "{not json", '{"barcode": "A1"}', "42", "null"])
    def test_unreadable_ledger_is_empty(self, raw):
        assert decode_ledger(raw) == []

    def test_canonical_entries(self):
        raw = json.dumps([
            {"barcode": "A1", "price_cents": 1000, "quantity": 3},
            {"barcode": "B2", "price_cents": 450, "quantity": 1},
        ])
        assert decode_ledger(raw) == [
            LedgerLine(barcode="A1", price_cents=1000, quantity=3),
            LedgerLine(barcode="B2", price_cents=450, quantity=1),
        ]

    def test_legacy_keys(self):
        raw = json.dumps([
            {"bar_code": "A1", "price": "10.00", "quantity": 3},
            {"bar_code": "B2", "price": 4.5, "quantity": "2"},
            {"bar_code": "C3", "price": 0.125, "quantity": 1},
        ])
        assert decode_ledger(raw) == [
            LedgerLine(barcode="A1", price_cents=1000, quantity=3),
            LedgerLine(barcode="B2", price_cents=450, quantity=2),
            LedgerLine(barcode="C3", price_cents=13, quantity=1),
        ]

    def test_malformed_entries_skipped(self):
        raw = json.dumps([
            "A1",
            {"barcode": "", "price_cents": 100, "quantity": 1},
            {"barcode": "B2", "quantity": 1},
            {"barcode": "C3", "price_cents": "abc", "quantity": 1},
            {"barcode": "D4", "price_cents": 250, "quantity": 2},
        ])
        assert decode_ledger(raw) == [LedgerLine(barcode="D4", price_cents=250, quantity=2)]

    @pytest.mark.parametrize("entry", [
        {"barcode": "A1", "price_cents": 999.9, "quantity": 1},
        {"barcode": "A1", "price_cents": 1000, "quantity": 2.5},
        {"barcode": "A1", "price_cents": "1e3", "quantity": 1},
        {"barcode": "A1", "price_cents": True, "quantity": 1},
    ])
    def test_non_integral_counts_are_malformed(self, entry):
        assert decode_ledger(json.dumps([entry])) == []

    def test_extra_keys_travel_on_the_line(self):
        line, = decode_ledger(json.dumps([
            {"bar_code": "A1", "price": "10.00", "quantity": 3, "variation_id": 9},
        ]))
        assert line.source_index == 0
        assert line.to_dict() == {"variation_id": 9, "barcode": "A1", "price_cents": 1000, "quantity": 3}


class TestLedgerHelpers:

    def test_encode_round_trips_canonical_form(self):
        lines = [LedgerLine(barcode="A1", price_cents=1000, quantity=1)]
        encoded = encode_ledger(lines)
        assert json.loads(encoded) == [{"barcode": "A1", "price_cents": 1000, "quantity": 1}]
        assert decode_ledger(encoded) == lines

    def test_find_line_returns_first_match(self):
        first = LedgerLine(barcode="A1", price_cents=1000, quantity=1)
        lines = [LedgerLine(barcode="B2", price_cents=1, quantity=1), first,
                 LedgerLine(barcode="A1", price_cents=2000, quantity=9)]
        assert find_line(lines, "A1") is first
        assert find_line(lines, "nope") is None

    def test_prune_empty_lines(self):
        lines = [
            LedgerLine(barcode="A1", price_cents=1000, quantity=0),
            LedgerLine(barcode="B2", price_cents=450, quantity=2),
        ]
        assert prune_empty_lines(lines) == [LedgerLine(barcode="B2", price_cents=450, quantity=2)]

    def test_ledger_total(self):
        lines = [
            LedgerLine(barcode="A1", price_cents=1000, quantity=3),
            LedgerLine(barcode="B2", price_cents=450, quantity=2),
        ]
        assert ledger_total_cents(lines) == 3900

    def test_to_response_includes_decimal_price(self):
        line = LedgerLine(barcode="A1", price_cents=1005, quantity=1)
        assert line.to_response() == {"barcode": "A1", "price_cents": 1005, "price": "10.05", "quantity": 1}


class TestOrderPersistence:

    def test_create_order_defaults_amount_to_ledger_total(self, db_session):
        order = order_line_service.create_order([
            LedgerLine(barcode="A1", price_cents=1000, quantity=3),
        ])
        db_session.commit()

        stored = db_session.get(Order, order.id)
        assert stored.amount_cents == 3000
        assert stored.to_dict()["items"] == [{"barcode": "A1", "price_cents": 1000, "quantity": 3}]

    def test_create_order_with_explicit_amount(self, db_session):
        order = order_line_service.create_order(
            [LedgerLine(barcode="A1", price_cents=1000, quantity=3)],
            amount_cents=2500,
        )
        db_session.commit()
        assert db_session.get(Order, order.id).amount_cents == 2500

    def test_load_order_for_update(self, db_session, make_order):
        order = make_order([("A1", 1000, 1)])
        assert order_line_service.load_order_for_update(order.id).id == order.id
        assert order_line_service.load_order_for_update(99999) is None

    def test_write_ledger_keeps_unreadable_entries_in_place(self, db_session, make_order):
        broken = {"barcode": "B2", "price_cents": 999.9, "quantity": 1}
        order = make_order(raw_items=json.dumps([
            {"barcode": "A1", "price_cents": 1000, "quantity": 3, "variation_id": 4},
            broken,
            {"barcode": "C3", "price_cents": 200, "quantity": 1},
            "junk",
        ]), amount_cents=0)

        lines = decode_ledger(order.items)
        find_line(lines, "A1").quantity = 1
        find_line(lines, "C3").quantity = 0
        order_line_service.write_ledger(order, prune_empty_lines(lines))

        assert json.loads(order.items) == [
            {"barcode": "A1", "price_cents": 1000, "quantity": 1, "variation_id": 4},
            broken,
            "junk",
        ]

    def test_write_ledger_appends_new_lines(self, db_session, make_order):
        order = make_order([("A1", 1000, 1)])

        lines = decode_ledger(order.items)
        lines.append(LedgerLine(barcode="B2", price_cents=450, quantity=2))
        order_line_service.write_ledger(order, lines)

        assert json.loads(order.items) == [
            {"barcode": "A1", "price_cents": 1000, "quantity": 1},
            {"barcode": "B2", "price_cents": 450, "quantity": 2},
        ]
