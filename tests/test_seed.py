from signshop import seed
from signshop.ledger import CashLedger
from signshop.models import ProductionStatus
from signshop.workflow import status_counts


def test_seed_loads_demo_dataset(store):
    wf = seed.run(store)

    assert len(wf.quotes.clients.list()) == 3
    assert [q.number for q in wf.quotes.list()] == ["ORC-00123", "ORC-00124"]
    assert [o.number for o in wf.orders.list()] == ["PED-00101", "PED-00102", "PED-00103", "PED-00104"]

    state = wf.quotes.numbering.state()
    assert (state.next_quote_number, state.next_order_number) == (125, 105)

    counts = status_counts(wf.list_all())
    assert counts[ProductionStatus.QUOTE] == 1
    assert counts[ProductionStatus.APPROVED] == 2

    entries = wf.payments.ledger.list()
    assert len(entries) == 6
    summary = CashLedger.summary(entries)
    assert (summary.income, summary.expense, summary.balance) == (1290.0, 630.0, 660.0)


def test_seed_twice_replaces_previous_data(store):
    seed.run(store)
    extra = seed.run(store).quotes.clients.create({"name": "Avulso", "phone": "1234"})
    wf = seed.run(store)

    assert extra.id not in [c.id for c in wf.quotes.clients.list()]
    assert len(wf.quotes.clients.list()) == 3
    assert [q.number for q in wf.quotes.list()] == ["ORC-00123", "ORC-00124"]
    assert [o.number for o in wf.orders.list()] == ["PED-00101", "PED-00102", "PED-00103", "PED-00104"]
    assert len(wf.payments.ledger.list()) == 6

    state = wf.quotes.numbering.state()
    assert (state.next_quote_number, state.next_order_number) == (125, 105)
