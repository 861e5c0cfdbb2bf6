from datetime import date

import pytest

from signshop.errors import ValidationError
from signshop.models import LineItem, Order, ProductionStatus, Quote, validated


def _quote(**extra):
    data = {
        "id": "budget:1",
        "quote_number": "ORC-00001",
        "client_name": "João Silva",
        "items": [
            {"name": "Corte a laser", "quantity": 10, "unit_price": 25.0},
            {"name": "Banner", "quantity": 2, "unit_price": 45.0},
        ],
    }
    data.update(extra)
    return Quote.model_validate(data)


def test_line_item_total_is_recomputed():
    item = LineItem(name="Placa", quantity=3, unit_price=12.5)
    assert item.total == 37.5

    edited = LineItem.model_validate({**item.model_dump(), "quantity": 4})
    assert edited.total == 50.0


def test_line_item_ignores_incoming_total_and_accepts_legacy_key():
    item = LineItem.model_validate({"name": "Placa", "quantity": 2, "unitPrice": 10.0, "total": 999})
    assert item.unit_price == 10.0
    assert item.total == 20.0


@pytest.mark.parametrize(
    "data",
    [
        {"name": "", "quantity": 1, "unit_price": 1},
        {"name": "   ", "quantity": 1, "unit_price": 1},
        {"name": "Placa", "quantity": 0, "unit_price": 1},
        {"name": "Placa", "quantity": 1, "unit_price": -1},
    ],
)
def test_line_item_rejects_invalid_values(data):
    with pytest.raises(ValidationError):
        validated(LineItem, data)


def test_quote_total_and_common_shape():
    quote = _quote(notes="Urgente")
    assert quote.total == 340.0
    assert quote.price == 340.0
    assert quote.number == "ORC-00001"
    assert quote.description == "Urgente"
    assert quote.kind == "quote"
    assert quote.status is ProductionStatus.QUOTE
    assert quote.payments == []


def test_order_price_follows_items():
    order = Order.model_validate({
        "id": "order:1",
        "order_number": "PED-00101",
        "client_name": "Carlos",
        "items": [{"name": "Letreiro", "quantity": 1, "unit_price": 1200.0}],
        "price": 1,
    })
    assert order.price == 1200.0
    assert order.kind == "order"


def test_legacy_records_are_readable():
    quote = Quote.model_validate({
        "id": "budget:2",
        "budget_number": "ORC-00123",
        "client_name": "Maria",
        "items": [{"name": "Placa de ACM", "quantity": 1, "unitPrice": 380.0, "total": 380.0}],
        "status": "budget",
        "due_date": "",
    })
    assert quote.quote_number == "ORC-00123"
    assert quote.status is ProductionStatus.QUOTE
    assert quote.due_date is None


def test_store_round_trip_preserves_nested_lists(store):
    quote = _quote(
        due_date=date(2024, 12, 30),
        payments=[{"id": "payment:1", "amount": 100.0, "method": "pix", "date": "2024-11-20"}],
        history=[{"status": "Orçamento criado", "date": "2024-11-20"}, {"status": "Aprovado", "date": "2024-11-21"}],
    )
    store.set(quote.id, quote.model_dump(mode="json"))

    loaded = Quote.model_validate(store.get(quote.id))
    assert loaded == quote
    assert loaded.model_dump(mode="json") == quote.model_dump(mode="json")
