import math
import warnings
from datetime import date

import pytest

from signshop.errors import ConsistencyWarning, StorageError, ValidationError
from signshop.models import CashEntryType, PaymentMethod
from signshop.payments import paid_amount, paid_percentage, payment_status, remaining

ITEM = {"name": "Corte a laser - MDF 3mm", "quantity": 10, "unit_price": 25.0}


@pytest.fixture
def quote(wf):
    joao = wf.quotes.clients.create({"name": "João Silva", "phone": "(11) 98765-4321"})
    return wf.quotes.create(client_id=joao.id, items=[ITEM], due_date=date(2024, 12, 30))


def test_partial_payment_creates_income_entry(wf, quote):
    result = wf.add_payment(quote, 100.0, "pix", date(2024, 11, 20))

    item = result.item
    assert len(item.payments) == 1
    assert item.payments[0].method is PaymentMethod.PIX
    assert paid_amount(item) == 100.0
    assert paid_percentage(item) == pytest.approx(40.0)
    assert remaining(item) == 150.0
    assert payment_status(item) == "Pago 40%"

    entries = wf.payments.ledger.list()
    assert len(entries) == 1
    entry = entries[0]
    assert entry == result.cash_entry
    assert entry.type is CashEntryType.INCOME
    assert entry.amount == 100.0
    assert entry.date == date(2024, 11, 20)
    assert entry.order_id == quote.id
    assert entry.description == "Pagamento - ORC-00125 - João Silva"

    assert len(wf.quotes.get(quote.id).payments) == 1


def test_payments_accumulate(wf, quote):
    item = quote
    for amount in (50.0, 30.0, 20.5):
        item = wf.add_payment(item, amount, "cash", date(2024, 11, 21)).item

    assert paid_amount(item) == pytest.approx(100.5)
    entries = wf.payments.ledger.list(type="income")
    assert len(entries) == 3
    assert sum(e.amount for e in entries) == pytest.approx(100.5)
    assert len({p.id for p in item.payments}) == 3


def test_order_payment_uses_order_number(wf):
    order = wf.orders.create(client_name="Carlos", items=[ITEM])
    result = wf.add_payment(order, 250.0, "transfer", date(2024, 11, 22))

    assert result.cash_entry.description == "Pagamento - PED-00105 - Carlos"


def test_payment_result_serializes_item_and_entry(wf, quote):
    result = wf.add_payment(quote, 100.0, "pix", date(2024, 11, 20))

    data = result.model_dump(mode="json")
    assert data["item"]["kind"] == "quote"
    assert data["item"]["quote_number"] == "ORC-00125"
    assert data["item"]["payments"][0]["amount"] == 100.0
    assert data["cash_entry"]["order_id"] == quote.id
    assert data["cash_entry"]["type"] == "income"


@pytest.mark.parametrize("amount, label", [(81.0, "Pago 41%"), (79.0, "Pago 40%"), (1.0, "Pago 1%"), (199.0, "Pago 100%")])
def test_payment_status_rounds_half_up(wf, amount, label):
    order = wf.orders.create(client_name="Carlos", items=[{"name": "Placa", "quantity": 1, "unit_price": 200.0}])
    item = wf.add_payment(order, amount, "pix", date(2024, 11, 22)).item

    assert payment_status(item) == label
    assert payment_status(result.item) == "Pago 100%"
    assert wf.quotes.list() == []
    assert len(wf.orders.get(order.id).payments) == 1


@pytest.mark.parametrize("amount", [0, -10.0])
def test_non_positive_amount_is_rejected(wf, quote, amount):
    with pytest.raises(ValidationError):
        wf.add_payment(quote, amount, "pix", date(2024, 11, 20))
    assert wf.payments.ledger.list() == []
    assert wf.quotes.get(quote.id).payments == []


def test_unknown_method_is_rejected(wf, quote):
    with pytest.raises(ValidationError):
        wf.add_payment(quote, 10.0, "bitcoin", date(2024, 11, 20))
    assert wf.payments.ledger.list() == []


def test_overpayment_is_allowed(wf, quote):
    item = wf.add_payment(quote, 300.0, "card", date(2024, 11, 20)).item
    assert paid_percentage(item) == pytest.approx(120.0)
    assert payment_status(item) == "Pago 100%"
    assert remaining(item) == -50.0


def test_zero_price_percentage_is_nan(wf):
    free = wf.orders.create(client_name="Brinde", items=[{"name": "Amostra", "quantity": 1, "unit_price": 0}])
    assert math.isnan(paid_percentage(free))
    assert payment_status(free) == "Não Pago"


def test_failed_item_write_undoes_ledger_entry(wf, store, quote):
    store.fail_set = ("budget:",)

    with pytest.raises(StorageError):
        wf.add_payment(quote, 100.0, "pix", date(2024, 11, 20))

    assert wf.payments.ledger.list() == []
    assert wf.quotes.get(quote.id).payments == []


def test_failed_compensation_leaves_orphan_and_warns(wf, store, quote):
    store.fail_set = ("budget:",)
    store.fail_delete = ("cash:",)

    with pytest.raises(StorageError), warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        wf.add_payment(quote, 100.0, "pix", date(2024, 11, 20))

    assert any(issubclass(w.category, ConsistencyWarning) for w in caught)
    orphans = wf.payments.ledger.list()
    assert len(orphans) == 1
    assert orphans[0].order_id == quote.id
    assert wf.quotes.get(quote.id).payments == []
