from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from signshop.db import EntityStore
from signshop.errors import StorageError
from signshop.main import app, get_store
from signshop.workflow import WorkflowView


class FlakyStore(EntityStore):
    """Store que falha sob demanda para simular escritas parciais."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fail_set: tuple = ()
        self.fail_delete: tuple = ()

    def set(self, key, value):
        if key.startswith(self.fail_set or ("\0",)):
            raise StorageError(f"falha simulada ao gravar {key}")
        super().set(key, value)

    def delete(self, key):
        if key.startswith(self.fail_delete or ("\0",)):
            raise StorageError(f"falha simulada ao remover {key}")
        return super().delete(key)


@pytest.fixture
def store(tmp_path):
    return FlakyStore(tmp_path / "signshop-test.db")


@pytest.fixture
def wf(store):
    return WorkflowView.from_store(store)


@pytest.fixture
def api(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


