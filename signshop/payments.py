"""
Pagamentos parciais e conciliação com o caixa.

Cada pagamento gera exatamente um lançamento de entrada no caixa. As duas
escritas (lançamento, depois item) ficam em PaymentEngine.add_payment: se a
gravação do item falhar, o lançamento é desfeito (compensação) e o erro sobe.
Não há validação de sobrepagamento.
"""
from __future__ import annotations

import datetime as dt
import math
import warnings
from typing import Callable, Union

from loguru import logger

from .errors import ConsistencyWarning, ValidationError
from .ledger import CashLedger
from .models import (
    CashEntry,
    CashEntryType,
    Payment,
    PaymentMethod,
    PaymentResult,
    ProductionItem,
    validated,
)
from .utils import new_id

Item = ProductionItem


def paid_amount(item: Item) -> float:
    return sum((p.amount for p in item.payments), 0.0)


def paid_percentage(item: Item) -> float:
    """paid / price * 100; pode passar de 100. Preço zero -> NaN."""
    if not item.price:
        return math.nan
    return paid_amount(item) / item.price * 100


def remaining(item: Item) -> float:
    return item.price - paid_amount(item)


def payment_status(item: Item) -> str:
    pct = paid_percentage(item)
    if pct >= 100:
        return "Pago 100%"
    if pct > 0:
        # meio ponto arredonda para cima (40.5 -> 41)
        return f"Pago {math.floor(pct + 0.5)}%"
    return "Não Pago"


def payment_description(item: Item) -> str:
    return f"Pagamento - {item.number} - {item.client_name}"


class PaymentEngine:

    def __init__(self, ledger: CashLedger):
        self.ledger = ledger

    def add_payment(
        self,
        item: Item,
        amount: float,
        method: Union[str, PaymentMethod],
        date: dt.date,
        persist: Callable[[Item, Payment], Item],
    ) -> PaymentResult:
        """
        `persist` grava o item com o pagamento acrescentado
        (QuoteManager.record_payment / OrderManager.record_payment).
        """
        if amount is None or amount <= 0:
            raise ValidationError("O valor do pagamento deve ser maior que zero")
        payment = validated(Payment, {
            "id": new_id("payment"),
            "amount": amount,
            "method": method,
            "date": date,
        })

        entry = self.ledger.record(
            CashEntryType.INCOME,
            payment.amount,
            payment_description(item),
            payment.date,
            order_id=item.id,
        )
        try:
            updated = persist(item, payment)
        except Exception as e:
            self._compensate(entry, e)
            raise

        logger.info(
            f"{updated.number}: pagamento {payment.amount:.2f} ({payment.method.value}), "
            f"pago {paid_amount(updated):.2f} de {updated.price:.2f}"
        )
        return PaymentResult(item=updated, cash_entry=entry)

    def _compensate(self, entry: CashEntry, cause: Exception) -> None:
        try:
            self.ledger.delete(entry.id)
        except Exception as e:
            msg = (
                f"Lançamento {entry.id} ficou órfão: pagamento não gravado em {entry.order_id} "
                f"({cause}); falha ao desfazer: {e}"
            )
            logger.error(msg)
            warnings.warn(msg, ConsistencyWarning, stacklevel=3)
        else:
            logger.warning(f"Pagamento não gravado em {entry.order_id}; lançamento {entry.id} desfeito")
