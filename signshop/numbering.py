# signshop/numbering.py
from __future__ import annotations

from typing import Any, Dict, Optional

from loguru import logger

from .config import NUMBER_WIDTH, ORDER_PREFIX, QUOTE_PREFIX
from .db import EntityStore
from .errors import ValidationError
from .models import NumberingState, ShopSettings, validated
from .utils import format_number

SETTINGS_KEY = "settings"
PREFERENCE_FIELDS = ("company_logo", "theme")


class NumberingAuthority:
    """
    Contadores `next_quote_number` / `next_order_number` no registro `settings`.

    A emissão lê o valor atual, formata e grava `valor + 1` numa única
    transação do store. Se a gravação do orçamento/pedido falhar depois, o
    número fica queimado (lacuna), nunca reutilizado.
    """

    def __init__(self, store: EntityStore):
        self.store = store

    def state(self) -> NumberingState:
        raw = self.store.get(SETTINGS_KEY)
        return NumberingState.model_validate(raw or {})

    def settings(self) -> ShopSettings:
        raw = self.store.get(SETTINGS_KEY)
        return ShopSettings.model_validate(raw or {})

    def configure(
        self,
        next_quote_number: Optional[int] = None,
        next_order_number: Optional[int] = None,
        preferences: Optional[Dict[str, Any]] = None,
    ) -> ShopSettings:
        """
        Sobrescreve os contadores (tela de configurações). `preferences`
        grava junto o logo da empresa e o tema.
        """
        changes: Dict[str, Any] = dict(preferences or {})
        unknown = set(changes) - set(PREFERENCE_FIELDS)
        if unknown:
            raise ValidationError(f"Configurações desconhecidas: {', '.join(sorted(unknown))}")
        if next_quote_number is not None:
            changes["next_quote_number"] = next_quote_number
        if next_order_number is not None:
            changes["next_order_number"] = next_order_number
        # valida antes de gravar
        validated(ShopSettings, {**self.settings().model_dump(), **changes})

        def _apply(current: Dict[str, Any]) -> Dict[str, Any]:
            merged = ShopSettings.model_validate(current).model_dump()
            merged.update(changes)
            return {**current, **merged}

        saved = self.store.mutate(SETTINGS_KEY, _apply)
        logger.info(f"Configurações atualizadas: {changes}")
        return ShopSettings.model_validate(saved)

    def issue_quote_number(self) -> str:
        return format_number(QUOTE_PREFIX, self._reserve("next_quote_number"), NUMBER_WIDTH)

    def issue_order_number(self) -> str:
        return format_number(ORDER_PREFIX, self._reserve("next_order_number"), NUMBER_WIDTH)

    def _reserve(self, field: str) -> int:
        issued: Dict[str, int] = {}

        def _increment(current: Dict[str, Any]) -> Dict[str, Any]:
            # normaliza chaves antigas (budgetStartNumber...) para o formato atual
            state = NumberingState.model_validate(current).model_dump()
            issued["value"] = state[field]
            state[field] += 1
            return {**current, **state}

        self.store.mutate(SETTINGS_KEY, _increment)
        logger.debug(f"{field}: emitido {issued['value']}")
        return issued["value"]
