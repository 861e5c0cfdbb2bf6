import threading
from contextlib import contextmanager
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from loguru import logger
from sqlalchemy import JSON, Column, event
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, col, create_engine, select

from .config import DB_PATH
from .errors import StorageError


class KVEntry(SQLModel, table=True):
    """Uma linha = um registro opaco (cliente, orçamento, pedido, caixa, settings)."""
    __tablename__ = "kv_store"

    key: str = Field(primary_key=True)
    value: Dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))


def _on_sqlite_connect(dbapi_conn, _conn_record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode = WAL;")
    cur.execute("PRAGMA synchronous = NORMAL;")
    cur.close()

def _make_engine(db_file: Path):
    engine = create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
        pool_pre_ping=True,
    )
    # registra o hook no Engine síncrono
    event.listen(engine, "connect", _on_sqlite_connect)
    return engine

@lru_cache(maxsize=32)
def _engine_for(path_str: str):
    return _make_engine(Path(path_str))

def init_db(engine=None) -> None:
    SQLModel.metadata.create_all(engine or _engine_for(str(DB_PATH)))


class EntityStore:
    """
    Armazenamento chave-valor com namespaces por prefixo
    (`client:`, `budget:`, `order:`, `cash:` e a chave única `settings`).

    Cada chamada é uma transação independente; não há rollback entre chamadas.
    """

    def __init__(self, db_path: Optional[Path] = None, engine=None):
        if engine is None:
            engine = _engine_for(str((db_path or DB_PATH).resolve()))
        self.engine = engine
        # serializa apenas mutate() dentro do processo
        self._lock = threading.RLock()
        init_db(self.engine)

    @contextmanager
    def _session(self) -> Iterator[Session]:
        try:
            with Session(self.engine) as s:
                yield s
        except SQLAlchemyError as e:
            logger.error(f"Falha no armazenamento: {e}")
            raise StorageError(f"Falha no armazenamento: {e}") from e

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with self._session() as s:
            row = s.get(KVEntry, key)
            return dict(row.value) if row else None

    def set(self, key: str, value: Dict[str, Any]) -> None:
        with self._session() as s:
            s.merge(KVEntry(key=key, value=value))
            s.commit()

    def delete(self, key: str) -> bool:
        """Remove a chave; retorna False se ela não existia."""
        with self._session() as s:
            row = s.get(KVEntry, key)
            if row is None:
                return False
            s.delete(row)
            s.commit()
            return True

    def get_by_prefix(self, prefix: str) -> List[Dict[str, Any]]:
        with self._session() as s:
            rows = s.exec(
                select(KVEntry).where(col(KVEntry.key).startswith(prefix)).order_by(KVEntry.key)
            ).all()
            return [dict(r.value) for r in rows]

    def mutate(
        self,
        key: str,
        fn: Callable[[Dict[str, Any]], Dict[str, Any]],
        default: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Lê, aplica `fn` e grava na mesma transação (reserve-and-increment).
        Se a chave não existir, `fn` recebe uma cópia de `default`.
        """
        with self._lock, self._session() as s:
            row = s.get(KVEntry, key)
            current = dict(row.value) if row else dict(default or {})
            new_value = fn(current)
            if row is None:
                s.add(KVEntry(key=key, value=new_value))
            else:
                row.value = new_value
                s.add(row)
            s.commit()
            return dict(new_value)
