# signshop/main.py
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import AliasChoices, BaseModel, Field

from .clients import ClientRegistry
from .config import DB_PATH
from .db import EntityStore
from .errors import SignshopError
from .ledger import CashLedger
from .logger_config import setup_logging
from .models import CashEntryType, PaymentMethod, ProductionStatus
from .numbering import NumberingAuthority
from .utils import today
from .workflow import WorkflowView, board, filter_items, to_view

# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------
setup_logging()

app = FastAPI(title="Signshop - Orçamentos, Pedidos e Caixa", version="1.0")

_default_store: Optional[EntityStore] = None


def get_store() -> EntityStore:
    """Store padrão (SQLite em DB_PATH); os testes substituem via dependency_overrides."""
    global _default_store
    if _default_store is None:
        _default_store = EntityStore(DB_PATH)
    return _default_store


def get_workflow(store: EntityStore = Depends(get_store)) -> WorkflowView:
    return WorkflowView.from_store(store)

# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------
class ClientIn(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    cpf: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class QuoteIn(BaseModel):
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    items: List[Dict[str, Any]] = []
    due_date: Optional[dt.date] = None
    notes: Optional[str] = None


class OrderIn(BaseModel):
    client_name: Optional[str] = None
    items: List[Dict[str, Any]] = []
    due_date: Optional[dt.date] = None
    description: Optional[str] = None


class CashIn(BaseModel):
    type: CashEntryType = CashEntryType.INCOME
    amount: float = 0
    description: str = ""
    date: dt.date = Field(default_factory=today)
    order_id: Optional[str] = None


class SettingsIn(BaseModel):
    next_quote_number: Optional[int] = Field(
        None, validation_alias=AliasChoices("next_quote_number", "budgetStartNumber")
    )
    next_order_number: Optional[int] = Field(
        None, validation_alias=AliasChoices("next_order_number", "orderStartNumber")
    )
    company_logo: Optional[str] = Field(None, validation_alias=AliasChoices("company_logo", "companyLogo"))
    theme: Optional[str] = None


class StatusIn(BaseModel):
    status: ProductionStatus


class PaymentIn(BaseModel):
    amount: float
    method: PaymentMethod = PaymentMethod.PIX
    date: dt.date = Field(default_factory=today)

# -----------------------------------------------------------------------------
# Startup / erros
# -----------------------------------------------------------------------------
@app.on_event("startup")
def _startup() -> None:
    """Cria a tabela kv_store do banco padrão."""
    get_store()
    logger.info(f"Usando DB em: {DB_PATH}")


@app.exception_handler(SignshopError)
async def _domain_error(_request: Request, exc: SignshopError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": str(exc)})


@app.exception_handler(RequestValidationError)
async def _request_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    msg = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"success": False, "error": msg})


@app.exception_handler(Exception)
async def _unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Erro inesperado: {exc}")
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})

# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _ok(data: Any = None) -> Dict[str, Any]:
    if data is None:
        return {"success": True}
    return {"success": True, "data": jsonable_encoder(data)}

# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.get("/health")
def health() -> dict:
    return {"status": "ok"}

# ---------- Clientes ----------

@app.get("/clients")
def list_clients(store: EntityStore = Depends(get_store)) -> dict:
    return _ok(ClientRegistry(store).list())

@app.post("/clients")
def create_client(payload: ClientIn, store: EntityStore = Depends(get_store)) -> dict:
    return _ok(ClientRegistry(store).create(payload.model_dump(exclude_none=True)))

@app.put("/clients/{client_id}")
def update_client(client_id: str, payload: ClientIn, store: EntityStore = Depends(get_store)) -> dict:
    return _ok(ClientRegistry(store).update(client_id, payload.model_dump(exclude_unset=True)))

@app.delete("/clients/{client_id}")
def delete_client(client_id: str, store: EntityStore = Depends(get_store)) -> dict:
    ClientRegistry(store).delete(client_id)
    return _ok()

# ---------- Orçamentos ----------

@app.get("/budgets")
def list_budgets(wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(wf.quotes.list())

@app.post("/budgets")
def create_budget(payload: QuoteIn, wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(wf.quotes.create(**payload.model_dump()))

@app.put("/budgets/{item_id}")
def update_budget(item_id: str, payload: QuoteIn, wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(wf.quotes.update(item_id, payload.model_dump(exclude_unset=True)))

@app.delete("/budgets/{item_id}")
def delete_budget(item_id: str, wf: WorkflowView = Depends(get_workflow)) -> dict:
    wf.quotes.delete(item_id)
    return _ok()

# ---------- Pedidos ----------

@app.get("/orders")
def list_orders(wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(wf.orders.list())

@app.post("/orders")
def create_order(payload: OrderIn, wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(wf.orders.create(**payload.model_dump()))

@app.put("/orders/{item_id}")
def update_order(item_id: str, payload: OrderIn, wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(wf.orders.update(item_id, payload.model_dump(exclude_unset=True)))

@app.delete("/orders/{item_id}")
def delete_order(item_id: str, wf: WorkflowView = Depends(get_workflow)) -> dict:
    wf.orders.delete(item_id)
    return _ok()

# ---------- Produção (orçamentos + pedidos) ----------

@app.get("/production")
def list_production(
    search: Optional[str] = None,
    status: Optional[ProductionStatus] = None,
    wf: WorkflowView = Depends(get_workflow),
) -> dict:
    items = filter_items(wf.list_all(), search=search, status=status)
    return _ok([to_view(i) for i in items])

@app.get("/production/board")
def production_board(search: Optional[str] = None, wf: WorkflowView = Depends(get_workflow)) -> dict:
    columns = board(filter_items(wf.list_all(), search=search))
    return _ok({status.value: [to_view(i) for i in col] for status, col in columns.items()})

@app.get("/production/{item_id}")
def get_production_item(item_id: str, wf: WorkflowView = Depends(get_workflow)) -> dict:
    return _ok(to_view(wf.get(item_id)))

@app.post("/production/{item_id}/status")
def change_status(item_id: str, payload: StatusIn, wf: WorkflowView = Depends(get_workflow)) -> dict:
    item = wf.apply_status_change(wf.get(item_id), payload.status)
    return _ok(to_view(item))

@app.post("/production/{item_id}/payments")
def add_payment(item_id: str, payload: PaymentIn, wf: WorkflowView = Depends(get_workflow)) -> dict:
    result = wf.add_payment(wf.get(item_id), payload.amount, payload.method, payload.date)
    return _ok({"item": to_view(result.item), "cash_entry": result.cash_entry})

# ---------- Caixa ----------

@app.get("/cash")
def list_cash(
    type: Optional[CashEntryType] = None,
    start: Optional[dt.date] = None,
    end: Optional[dt.date] = None,
    month: Optional[str] = None,
    year: Optional[int] = None,
    store: EntityStore = Depends(get_store),
) -> dict:
    return _ok(CashLedger(store).list(type=type, start=start, end=end, month=month, year=year))

@app.get("/cash/summary")
def cash_summary(
    type: Optional[CashEntryType] = None,
    start: Optional[dt.date] = None,
    end: Optional[dt.date] = None,
    month: Optional[str] = None,
    year: Optional[int] = None,
    store: EntityStore = Depends(get_store),
) -> dict:
    ledger = CashLedger(store)
    return _ok(ledger.summary(ledger.list(type=type, start=start, end=end, month=month, year=year)))

@app.post("/cash")
def create_cash_entry(payload: CashIn, store: EntityStore = Depends(get_store)) -> dict:
    return _ok(CashLedger(store).record(**payload.model_dump()))

@app.delete("/cash/{entry_id}")
def delete_cash_entry(entry_id: str, store: EntityStore = Depends(get_store)) -> dict:
    CashLedger(store).delete(entry_id)
    return _ok()

# ---------- Configurações (numeração) ----------

@app.get("/settings")
def get_settings(store: EntityStore = Depends(get_store)) -> dict:
    return _ok(NumberingAuthority(store).settings())

@app.put("/settings")
def update_settings(payload: SettingsIn, store: EntityStore = Depends(get_store)) -> dict:
    data = payload.model_dump(exclude_none=True)
    counters = {k: data.pop(k) for k in ("next_quote_number", "next_order_number") if k in data}
    return _ok(NumberingAuthority(store).configure(**counters, preferences=data))
