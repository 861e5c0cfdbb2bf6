# signshop/ledger.py
from __future__ import annotations

import datetime as dt
from typing import Iterable, List, Optional, Union

from loguru import logger

from .db import EntityStore
from .errors import NotFoundError, ValidationError
from .models import CashEntry, CashEntryType, CashSummary, validated
from .utils import new_id

CASH_PREFIX = "cash"


class CashLedger:
    """Livro-caixa: entradas e saídas. Lançamentos não são editados, só removidos."""

    def __init__(self, store: EntityStore):
        self.store = store

    def record(
        self,
        type: Union[str, CashEntryType],
        amount: float,
        description: str,
        date: dt.date,
        order_id: Optional[str] = None,
    ) -> CashEntry:
        if not str(description or "").strip():
            raise ValidationError("Informe a descrição do lançamento")
        if amount is None or amount <= 0:
            raise ValidationError("O valor deve ser maior que zero")
        entry = validated(CashEntry, {
            "id": new_id(CASH_PREFIX),
            "type": type,
            "amount": amount,
            "description": description,
            "date": date,
            "order_id": order_id or None,
        })
        self.store.set(entry.id, entry.model_dump(mode="json"))
        logger.info(f"Caixa: {entry.type.value} {entry.amount:.2f} - {entry.description}")
        return entry

    def get(self, entry_id: str) -> CashEntry:
        raw = self.store.get(entry_id) if entry_id.startswith(f"{CASH_PREFIX}:") else None
        if raw is None:
            raise NotFoundError("Lançamento não encontrado")
        return CashEntry.model_validate(raw)

    def delete(self, entry_id: str) -> None:
        self.get(entry_id)
        self.store.delete(entry_id)
        logger.info(f"Caixa: lançamento removido {entry_id}")

    def list(
        self,
        type: Optional[Union[str, CashEntryType]] = None,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
        month: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[CashEntry]:
        """
        Filtros combináveis:
        - type: income | expense
        - start/end: intervalo fechado (só aplicado com as duas datas)
        - month: "AAAA-MM"
        - year: ano
        """
        entries = [CashEntry.model_validate(raw) for raw in self.store.get_by_prefix(f"{CASH_PREFIX}:")]
        if type:
            try:
                wanted = CashEntryType(type)
            except ValueError:
                raise ValidationError(f"Tipo inválido: {type!r}") from None
            entries = [e for e in entries if e.type == wanted]
        if start and end:
            entries = [e for e in entries if start <= e.date <= end]
        if month:
            try:
                y, m = (int(p) for p in month.split("-"))
            except ValueError:
                raise ValidationError(f"Mês inválido: {month!r} (use AAAA-MM)") from None
            entries = [e for e in entries if e.date.year == y and e.date.month == m]
        if year:
            entries = [e for e in entries if e.date.year == int(year)]
        return entries

    @staticmethod
    def summary(entries: Iterable[CashEntry]) -> CashSummary:
        income = expense = 0.0
        for e in entries:
            if e.type == CashEntryType.INCOME:
                income += e.amount
            else:
                expense += e.amount
        return CashSummary(income=income, expense=expense, balance=income - expense)
