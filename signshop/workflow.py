# signshop/workflow.py
from __future__ import annotations

import datetime as dt
import math
from typing import Dict, Iterable, List, Optional, Union

from .clients import ClientRegistry
from .db import EntityStore
from .errors import NotFoundError
from .ledger import CashLedger
from .lifecycle import OrderManager, QuoteManager, _LifecycleManager, parse_status
from .models import PIPELINE, PaymentMethod, ProductionItemView, ProductionStatus
from .numbering import NumberingAuthority
from .payments import Item, PaymentEngine, PaymentResult, paid_amount, paid_percentage, payment_status


class WorkflowView:
    """
    Orçamentos e pedidos numa lista única de itens de produção.

    O roteamento para o gerenciador certo usa o campo `kind` gravado na
    criação do item.
    """

    def __init__(self, quotes: QuoteManager, orders: OrderManager, payments: PaymentEngine):
        self.quotes = quotes
        self.orders = orders
        self.payments = payments
        self._managers: Dict[str, _LifecycleManager] = {"quote": quotes, "order": orders}

    @classmethod
    def from_store(cls, store: EntityStore) -> "WorkflowView":
        numbering = NumberingAuthority(store)
        clients = ClientRegistry(store)
        return cls(
            quotes=QuoteManager(store, numbering, clients),
            orders=OrderManager(store, numbering),
            payments=PaymentEngine(CashLedger(store)),
        )

    def list_all(self) -> List[Item]:
        return [*self.orders.list(), *self.quotes.list()]

    def get(self, item_id: str) -> Item:
        for manager in self._managers.values():
            if manager.owns(item_id):
                return manager.get(item_id)
        raise NotFoundError("Item não encontrado")

    def manager_for(self, item: Item) -> _LifecycleManager:
        return self._managers[item.kind]

    def apply_status_change(self, item: Item, new_status: Union[str, ProductionStatus]) -> Item:
        return self.manager_for(item).record_status_change(item, new_status)

    def add_payment(
        self,
        item: Item,
        amount: float,
        method: Union[str, PaymentMethod],
        date: dt.date,
    ) -> PaymentResult:
        manager = self.manager_for(item)
        return self.payments.add_payment(item, amount, method, date, persist=manager.record_payment)

# -----------------------------------------------------------------------------
# Projeções (sem efeitos colaterais)
# -----------------------------------------------------------------------------
def to_view(item: Item) -> ProductionItemView:
    pct = paid_percentage(item)
    return ProductionItemView(
        id=item.id,
        kind=item.kind,
        number=item.number,
        client_name=item.client_name,
        description=item.description,
        items=item.items,
        price=item.price,
        status=item.status,
        due_date=item.due_date,
        created_at=item.created_at,
        payments=item.payments,
        history=item.history,
        paid_amount=paid_amount(item),
        paid_percentage=None if math.isnan(pct) else pct,
        payment_status=payment_status(item),
    )


def filter_items(
    items: Iterable[Item],
    search: Optional[str] = None,
    status: Optional[Union[str, ProductionStatus]] = None,
) -> List[Item]:
    """Busca por número ou cliente (sem diferenciar maiúsculas) e filtro por status."""
    result = list(items)
    if search:
        term = search.lower()
        result = [i for i in result if term in i.number.lower() or term in i.client_name.lower()]
    if status:
        wanted = parse_status(status)
        result = [i for i in result if i.status == wanted]
    return result


def board(items: Iterable[Item]) -> Dict[ProductionStatus, List[Item]]:
    """Colunas do kanban na ordem do pipeline."""
    columns: Dict[ProductionStatus, List[Item]] = {s: [] for s in PIPELINE}
    for item in items:
        columns[item.status].append(item)
    return columns


def status_counts(items: Iterable[Item]) -> Dict[ProductionStatus, int]:
    return {status: len(col) for status, col in board(items).items()}
