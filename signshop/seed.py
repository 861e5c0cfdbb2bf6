# signshop/seed.py
from __future__ import annotations

from datetime import date
from typing import Optional

from .clients import CLIENT_PREFIX
from .db import EntityStore
from .ledger import CASH_PREFIX, CashLedger
from .lifecycle import OrderManager, QuoteManager
from .logger_config import get_logger
from .models import CashEntryType, ProductionStatus
from .workflow import WorkflowView

logger = get_logger()

# ---------- Dados de demonstração ----------
CLIENTES = [
    {
        "name": "João Silva",
        "phone": "(11) 98765-4321",
        "email": "joao@email.com",
        "cpf": "123.456.789-00",
        "address": "Rua das Flores, 123 - São Paulo, SP",
        "notes": "Cliente VIP",
    },
    {
        "name": "Maria Santos",
        "phone": "(11) 91234-5678",
        "email": "maria@email.com",
        "address": "Av. Paulista, 456 - São Paulo, SP",
    },
    {
        "name": "Carlos Oliveira",
        "phone": "(11) 99876-5432",
        "email": "carlos@empresa.com",
        "cpf": "987.654.321-00",
    },
]

# numeração dos exemplos: ORC-00123.. e PED-00101..; depois 125 / 105
PRIMEIRO_ORCAMENTO = 123
PRIMEIRO_PEDIDO = 101

PEDIDOS = [
    {
        "client_name": "Carlos Oliveira",
        "description": "Letreiro em acrílico para fachada",
        "items": [{"name": "Letreiro acrílico 2m", "quantity": 1, "unit_price": 1200.0}],
        "due_date": date(2024, 12, 15),
        "status": ProductionStatus.IN_PRODUCTION,
        "payments": [(600.0, "pix", date(2024, 11, 18))],
    },
    {
        "client_name": "Maria Santos",
        "description": "Adesivos personalizados",
        "items": [{"name": "Adesivo vinil recortado", "quantity": 100, "unit_price": 2.5}],
        "due_date": date(2024, 12, 5),
        "status": ProductionStatus.COMPLETED,
        "payments": [(250.0, "card", date(2024, 11, 25))],
    },
    {
        "client_name": "João Silva",
        "description": "Placas de sinalização",
        "items": [{"name": "Placa PVC 30x20cm", "quantity": 8, "unit_price": 35.0}],
        "due_date": date(2024, 12, 20),
        "status": ProductionStatus.APPROVED,
        "payments": [],
    },
    {
        "client_name": "Padaria Bom Pão",
        "description": "Cardápio em MDF gravado a laser",
        "items": [
            {"name": "Gravação a laser MDF 6mm", "quantity": 2, "unit_price": 180.0},
            {"name": "Suporte de parede", "quantity": 2, "unit_price": 40.0},
        ],
        "due_date": date(2024, 11, 30),
        "status": ProductionStatus.DELIVERED,
        "payments": [(220.0, "cash", date(2024, 11, 10)), (220.0, "transfer", date(2024, 11, 28))],
    },
]

DESPESAS = [
    (450.0, "Compra de chapas de MDF", date(2024, 11, 5)),
    (180.0, "Manutenção da máquina de corte", date(2024, 11, 12)),
]

# namespaces apagados antes de recriar os dados
NAMESPACES = (CLIENT_PREFIX, QuoteManager.prefix, OrderManager.prefix, CASH_PREFIX)


def limpa(store: EntityStore) -> int:
    removidos = 0
    for ns in NAMESPACES:
        for raw in store.get_by_prefix(f"{ns}:"):
            removidos += store.delete(raw["id"])
    return removidos


def run(store: Optional[EntityStore] = None) -> WorkflowView:
    store = store or EntityStore()
    wf = WorkflowView.from_store(store)
    ledger = wf.payments.ledger

    removidos = limpa(store)
    if removidos:
        logger.info(f"Seed: {removidos} registros anteriores removidos")
    wf.quotes.numbering.configure(PRIMEIRO_ORCAMENTO, PRIMEIRO_PEDIDO)

    # clientes
    clientes = [wf.quotes.clients.create(c) for c in CLIENTES]
    joao, maria = clientes[0], clientes[1]

    # orçamentos
    wf.quotes.create(
        client_id=joao.id,
        items=[
            {"name": "Corte a laser - MDF 3mm", "quantity": 10, "unit_price": 25.0},
            {"name": "Impressão banner 1x2m", "quantity": 2, "unit_price": 45.0},
        ],
        due_date=date(2024, 12, 30),
        notes="Cliente solicitou urgência",
    )
    aprovado = wf.quotes.create(
        client_id=maria.id,
        items=[{"name": "Placa de ACM", "quantity": 1, "unit_price": 380.0}],
        due_date=date(2024, 12, 28),
    )
    wf.apply_status_change(aprovado, ProductionStatus.APPROVED)

    # pedidos + pagamentos (cada pagamento gera a entrada no caixa)
    for dados in PEDIDOS:
        pedido = wf.orders.create(
            client_name=dados["client_name"],
            items=dados["items"],
            due_date=dados["due_date"],
            description=dados["description"],
        )
        pedido = wf.apply_status_change(pedido, dados["status"])
        for amount, method, paid_on in dados["payments"]:
            pedido = wf.add_payment(pedido, amount, method, paid_on).item

    # despesas avulsas
    for amount, description, spent_on in DESPESAS:
        ledger.record(CashEntryType.EXPENSE, amount, description, spent_on)

    resumo = CashLedger.summary(ledger.list())
    logger.info(
        f"Seed: {len(wf.quotes.clients.list())} clientes, {len(wf.quotes.list())} orçamentos, "
        f"{len(wf.orders.list())} pedidos, saldo {resumo.balance:.2f}"
    )
    return wf


if __name__ == "__main__":
    wf = run()
    estado = wf.quotes.numbering.state()
    print("Contagens após seed:")
    print("  clientes  :", len(wf.quotes.clients.list()))
    print("  orçamentos:", len(wf.quotes.list()))
    print("  pedidos   :", len(wf.orders.list()))
    print("  caixa     :", len(wf.payments.ledger.list()))
    print("  próximos  :", estado.next_quote_number, estado.next_order_number)
    print("Seed OK ✔")
