# signshop/config.py
from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# -----------------------------------------------------------------------------
# Banco (SQLite com tabela chave-valor)
# -----------------------------------------------------------------------------
DB_PATH: Path = Path(
    os.getenv("SIGNSHOP_DB_PATH", str(Path(__file__).resolve().parent.parent / "signshop.db"))
).resolve()

# -----------------------------------------------------------------------------
# Logs
# -----------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("SIGNSHOP_LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("SIGNSHOP_LOG_FILE", "")  # vazio = só stderr

# -----------------------------------------------------------------------------
# Numeração de orçamentos/pedidos
# -----------------------------------------------------------------------------
DEFAULT_NEXT_QUOTE_NUMBER: int = int(os.getenv("START_QUOTE_NUMBER", "125"))
DEFAULT_NEXT_ORDER_NUMBER: int = int(os.getenv("START_ORDER_NUMBER", "105"))

QUOTE_PREFIX = "ORC-"
ORDER_PREFIX = "PED-"
NUMBER_WIDTH = 5
