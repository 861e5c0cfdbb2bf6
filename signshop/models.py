# signshop/models.py
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .config import DEFAULT_NEXT_ORDER_NUMBER, DEFAULT_NEXT_QUOTE_NUMBER
from .errors import ValidationError
from .utils import now

# -----------------------------------------------------------------------------
# Enumerações
# -----------------------------------------------------------------------------
class ProductionStatus(str, Enum):
    QUOTE = "quote"
    APPROVED = "approved"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"
    DELIVERED = "delivered"


PIPELINE: List[ProductionStatus] = list(ProductionStatus)

STATUS_LABELS: Dict[ProductionStatus, str] = {
    ProductionStatus.QUOTE: "Orçamento",
    ProductionStatus.APPROVED: "Aprovado",
    ProductionStatus.IN_PRODUCTION: "Em Produção",
    ProductionStatus.COMPLETED: "Concluído",
    ProductionStatus.DELIVERED: "Entregue",
}

QUOTE_CREATED_LABEL = "Orçamento criado"
ORDER_CREATED_LABEL = "Pedido criado"


class PaymentMethod(str, Enum):
    PIX = "pix"
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


PAYMENT_METHOD_LABELS: Dict[PaymentMethod, str] = {
    PaymentMethod.PIX: "PIX",
    PaymentMethod.CASH: "Dinheiro",
    PaymentMethod.CARD: "Cartão",
    PaymentMethod.TRANSFER: "Transferência",
}


class CashEntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"

# -----------------------------------------------------------------------------
# Registros
# -----------------------------------------------------------------------------
class _Record(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class Client(_Record):
    id: str
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: Optional[str] = None
    cpf: Optional[str] = None  # CPF/CNPJ
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=now)


class LineItem(_Record):
    name: str = Field(min_length=1)
    quantity: float = Field(gt=0)
    unit_price: float = Field(ge=0, validation_alias=AliasChoices("unit_price", "unitPrice"))

    # sempre recalculado; um "total" vindo de fora é ignorado
    @computed_field
    @property
    def total(self) -> float:
        return self.quantity * self.unit_price


class Payment(_Record):
    id: str
    amount: float = Field(gt=0)
    method: PaymentMethod
    date: dt.date


class StatusHistoryEntry(_Record):
    status: str
    date: dt.date


class _ProductionRecord(_Record):
    """Campos comuns de orçamentos e pedidos."""
    id: str
    client_name: str = Field(min_length=1)
    items: List[LineItem] = Field(min_length=1)
    status: ProductionStatus = ProductionStatus.QUOTE
    due_date: Optional[dt.date] = None
    created_at: dt.datetime = Field(default_factory=now)
    payments: List[Payment] = Field(default_factory=list)
    history: List[StatusHistoryEntry] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def _legacy_status(cls, v: Any) -> Any:
        # registros antigos gravavam "budget" como primeira etapa
        return ProductionStatus.QUOTE if v == "budget" else v

    @field_validator("due_date", mode="before")
    @classmethod
    def _blank_due_date(cls, v: Any) -> Any:
        return None if v == "" else v

    @property
    def items_total(self) -> float:
        return sum((item.total for item in self.items), 0.0)


class Quote(_ProductionRecord):
    kind: Literal["quote"] = "quote"
    quote_number: str = Field(validation_alias=AliasChoices("quote_number", "budget_number"))
    client_id: Optional[str] = None
    notes: Optional[str] = None

    @computed_field
    @property
    def total(self) -> float:
        return self.items_total

    @property
    def number(self) -> str:
        return self.quote_number

    @property
    def price(self) -> float:
        return self.total

    @property
    def description(self) -> Optional[str]:
        return self.notes


class Order(_ProductionRecord):
    kind: Literal["order"] = "order"
    order_number: str
    description: Optional[str] = None

    @computed_field
    @property
    def price(self) -> float:
        return self.items_total

    @property
    def number(self) -> str:
        return self.order_number


# Orçamento ou pedido; o discriminador é gravado na criação
ProductionItem = Annotated[Union[Quote, Order], Field(discriminator="kind")]


class ProductionItemView(BaseModel):
    """Formato único usado pelo kanban/lista de produção."""
    id: str
    kind: Literal["quote", "order"]
    number: str
    client_name: str
    description: Optional[str] = None
    items: List[LineItem]
    price: float
    status: ProductionStatus
    due_date: Optional[dt.date] = None
    created_at: dt.datetime
    payments: List[Payment]
    history: List[StatusHistoryEntry]
    paid_amount: float = 0.0
    paid_percentage: Optional[float] = None  # None quando o preço é zero
    payment_status: str = ""


class CashEntry(_Record):
    id: str
    type: CashEntryType
    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    date: dt.date
    order_id: Optional[str] = None
    created_at: dt.datetime = Field(default_factory=now)


class CashSummary(BaseModel):
    income: float
    expense: float
    balance: float


class PaymentResult(BaseModel):
    """Item já gravado com o pagamento e o lançamento de entrada correspondente."""
    item: ProductionItem
    cash_entry: CashEntry


class NumberingState(BaseModel):
    next_quote_number: int = Field(
        default=DEFAULT_NEXT_QUOTE_NUMBER,
        ge=0,
        validation_alias=AliasChoices("next_quote_number", "nextQuoteNumber", "budgetStartNumber"),
    )
    next_order_number: int = Field(
        default=DEFAULT_NEXT_ORDER_NUMBER,
        ge=0,
        validation_alias=AliasChoices("next_order_number", "nextOrderNumber", "orderStartNumber"),
    )


class ShopSettings(NumberingState):
    """Registro `settings` completo: contadores e preferências da tela de configurações."""
    company_logo: str = Field(default="", validation_alias=AliasChoices("company_logo", "companyLogo"))
    theme: Literal["light", "dark"] = "light"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
M = TypeVar("M", bound=BaseModel)


def describe_errors(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


def validated(model: Type[M], data: Dict[str, Any]) -> M:
    """model_validate que converte o erro do pydantic em ValidationError do domínio."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(describe_errors(e)) from e
