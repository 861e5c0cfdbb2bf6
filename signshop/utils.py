# signshop/utils.py
from __future__ import annotations

import threading
import time
from datetime import date, datetime, timezone

_id_lock = threading.Lock()
_last_stamp = 0


def new_id(prefix: str) -> str:
    """
    Gera `<prefixo>:<timestamp em microssegundos>`.
    O sufixo é estritamente crescente dentro do processo; entre processos a
    unicidade depende só da resolução do relógio.
    """
    global _last_stamp
    with _id_lock:
        stamp = time.time_ns() // 1_000
        if stamp <= _last_stamp:
            stamp = _last_stamp + 1
        _last_stamp = stamp
    return f"{prefix}:{stamp}"


def format_number(prefix: str, counter: int, width: int = 5) -> str:
    """format_number("ORC-", 125) -> "ORC-00125" """
    return f"{prefix}{str(counter).zfill(width)}"


def today() -> date:
    return date.today()


def now() -> datetime:
    return datetime.now(timezone.utc)
