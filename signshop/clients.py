# signshop/clients.py
from __future__ import annotations

from typing import Any, Dict, List

from loguru import logger

from .db import EntityStore
from .errors import NotFoundError, ValidationError
from .models import Client, validated
from .utils import new_id

CLIENT_PREFIX = "client"


class ClientRegistry:
    """Cadastro de clientes (nome e telefone obrigatórios)."""

    def __init__(self, store: EntityStore):
        self.store = store

    def list(self) -> List[Client]:
        return [Client.model_validate(raw) for raw in self.store.get_by_prefix(f"{CLIENT_PREFIX}:")]

    def get(self, client_id: str) -> Client:
        raw = self.store.get(client_id) if client_id.startswith(f"{CLIENT_PREFIX}:") else None
        if raw is None:
            raise NotFoundError("Cliente não encontrado")
        return Client.model_validate(raw)

    def create(self, data: Dict[str, Any]) -> Client:
        if not str(data.get("name") or "").strip() or not str(data.get("phone") or "").strip():
            raise ValidationError("Nome e telefone são obrigatórios")
        payload = {k: v for k, v in data.items() if k not in ("id", "created_at")}
        client = validated(Client, {**payload, "id": new_id(CLIENT_PREFIX)})
        self.store.set(client.id, client.model_dump(mode="json"))
        logger.info(f"Cliente criado: {client.id} ({client.name})")
        return client

    def update(self, client_id: str, changes: Dict[str, Any]) -> Client:
        current = self.get(client_id)
        payload = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        client = validated(Client, {**current.model_dump(), **payload})
        self.store.set(client.id, client.model_dump(mode="json"))
        return client

    def delete(self, client_id: str) -> None:
        self.get(client_id)
        self.store.delete(client_id)
        logger.info(f"Cliente removido: {client_id}")
