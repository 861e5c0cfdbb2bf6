# signshop/lifecycle.py
from __future__ import annotations

import datetime as dt
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from loguru import logger
from pydantic import BaseModel

from .clients import ClientRegistry
from .db import EntityStore
from .errors import NotFoundError, StorageError, ValidationError
from .models import (
    ORDER_CREATED_LABEL,
    QUOTE_CREATED_LABEL,
    STATUS_LABELS,
    Order,
    Payment,
    ProductionStatus,
    Quote,
    StatusHistoryEntry,
    validated,
)
from .numbering import NumberingAuthority
from .utils import new_id, today

E = TypeVar("E", Quote, Order)


def parse_status(value: Union[str, ProductionStatus]) -> ProductionStatus:
    try:
        return ProductionStatus(value)
    except ValueError:
        raise ValidationError(f"Status inválido: {value!r}") from None


def _plain_items(items: Iterable[Any]) -> List[Any]:
    return [i.model_dump() if isinstance(i, BaseModel) else i for i in items or []]


def _check_items(items: List[Any]) -> None:
    if not items:
        raise ValidationError("Adicione ao menos um item")
    for item in items:
        name = item.get("name") if isinstance(item, dict) else None
        if not str(name or "").strip():
            raise ValidationError("Todos os itens precisam de um nome")


class _LifecycleManager(Generic[E]):
    """
    Criação e transições de status de um tipo de item de produção.

    Atualizações gravam a cópia recebida inteira (ler, alterar, sobrescrever),
    sem controle de versão: duas alterações concorrentes sobre o mesmo item
    resultam em "última escrita vence".
    """

    model: Type[E]
    prefix: str
    number_field: str
    created_label: str
    entity_name: str
    editable_fields: tuple = ()

    def __init__(self, store: EntityStore, numbering: NumberingAuthority):
        self.store = store
        self.numbering = numbering

    # ------------------------------------------------------------------ leitura
    def list(self) -> List[E]:
        return [self.model.model_validate(raw) for raw in self.store.get_by_prefix(f"{self.prefix}:")]

    def owns(self, item_id: str) -> bool:
        return item_id.startswith(f"{self.prefix}:")

    def get(self, item_id: str) -> E:
        raw = self.store.get(item_id) if self.owns(item_id) else None
        if raw is None:
            raise NotFoundError(f"{self.entity_name} não encontrado")
        return self.model.model_validate(raw)

    # ------------------------------------------------------------------ escrita
    def _create(self, data: Dict[str, Any], issue: Callable[[], str]) -> E:
        """Valida, reserva o número e grava; número reservado sem gravação vira lacuna."""
        _check_items(data["items"])
        entity = validated(self.model, {
            **data,
            "id": new_id(self.prefix),
            self.number_field: "",
            "status": ProductionStatus.QUOTE,
            "history": [{"status": self.created_label, "date": today()}],
            "payments": [],
        })

        number = issue()
        entity = entity.model_copy(update={self.number_field: number})
        try:
            self._save(entity)
        except StorageError:
            logger.warning(f"{number} foi emitido mas {entity.id} não foi gravado (lacuna na numeração)")
            raise
        logger.info(f"{self.entity_name} criado: {number} ({entity.client_name}) total={entity.items_total:.2f}")
        return entity

    def update(self, item_id: str, changes: Dict[str, Any]) -> E:
        """Edita campos livres; totais são recalculados a partir dos itens."""
        current = self.get(item_id)
        payload = {k: v for k, v in changes.items() if k in self.editable_fields}
        if "items" in payload:
            payload["items"] = _plain_items(payload["items"])
            _check_items(payload["items"])
        entity = validated(self.model, {**current.model_dump(), **payload})
        self._save(entity)
        return entity

    def delete(self, item_id: str) -> None:
        # lançamentos de caixa já criados para o item permanecem
        self.get(item_id)
        self.store.delete(item_id)
        logger.info(f"{self.entity_name} removido: {item_id}")

    def record_status_change(self, entity: E, new_status: Union[str, ProductionStatus]) -> E:
        """
        Acrescenta uma linha no histórico e grava status + histórico numa só escrita.
        Repetir o status atual também acrescenta uma linha.
        """
        status = parse_status(new_status)
        entry = StatusHistoryEntry(status=STATUS_LABELS[status], date=today())
        updated = entity.model_copy(update={"status": status, "history": [*entity.history, entry]})
        self._save(updated)
        logger.info(f"{updated.number}: status -> {status.value}")
        return updated

    def record_payment(self, entity: E, payment: Payment) -> E:
        updated = entity.model_copy(update={"payments": [*entity.payments, payment]})
        self._save(updated)
        return updated

    def _save(self, entity: E) -> None:
        self.store.set(entity.id, entity.model_dump(mode="json"))


class QuoteManager(_LifecycleManager[Quote]):
    model = Quote
    prefix = "budget"
    number_field = "quote_number"
    created_label = QUOTE_CREATED_LABEL
    entity_name = "Orçamento"
    editable_fields = ("client_id", "client_name", "items", "due_date", "notes")

    def __init__(self, store: EntityStore, numbering: NumberingAuthority, clients: Optional[ClientRegistry] = None):
        super().__init__(store, numbering)
        self.clients = clients or ClientRegistry(store)

    def create(
        self,
        items: Iterable[Any],
        client_name: Optional[str] = None,
        client_id: Optional[str] = None,
        due_date: Optional[dt.date] = None,
        notes: Optional[str] = None,
    ) -> Quote:
        if client_id:
            client_name = self.clients.get(client_id).name
        if not str(client_name or "").strip():
            raise ValidationError("Informe o cliente do orçamento")
        data = {
            "client_id": client_id,
            "client_name": client_name,
            "items": _plain_items(items),
            "due_date": due_date,
            "notes": notes,
        }
        return self._create(data, self.numbering.issue_quote_number)

    def update(self, item_id: str, changes: Dict[str, Any]) -> Quote:
        # client_id e client_name andam juntos: o nome vem sempre do cadastro
        client_id = changes.get("client_id")
        if client_id:
            changes = {**changes, "client_name": self.clients.get(client_id).name}
        return super().update(item_id, changes)


class OrderManager(_LifecycleManager[Order]):
    model = Order
    prefix = "order"
    number_field = "order_number"
    created_label = ORDER_CREATED_LABEL
    entity_name = "Pedido"
    editable_fields = ("client_name", "items", "due_date", "description")

    def create(
        self,
        items: Iterable[Any],
        client_name: str,
        due_date: Optional[dt.date] = None,
        description: Optional[str] = None,
    ) -> Order:
        if not str(client_name or "").strip():
            raise ValidationError("Informe o cliente do pedido")
        data = {
            "client_name": client_name,
            "items": _plain_items(items),
            "due_date": due_date,
            "description": description,
        }
        return self._create(data, self.numbering.issue_order_number)
