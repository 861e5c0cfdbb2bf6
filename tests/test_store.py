from signshop.db import EntityStore


def test_get_set_delete(store):
    assert store.get("client:1") is None
    store.set("client:1", {"id": "client:1", "name": "João"})
    assert store.get("client:1") == {"id": "client:1", "name": "João"}

    store.set("client:1", {"id": "client:1", "name": "João Silva"})
    assert store.get("client:1")["name"] == "João Silva"

    assert store.delete("client:1") is True
    assert store.delete("client:1") is False
    assert store.get("client:1") is None


def test_get_by_prefix_only_returns_namespace(store):
    store.set("budget:2", {"id": "budget:2"})
    store.set("budget:1", {"id": "budget:1"})
    store.set("order:1", {"id": "order:1"})
    store.set("settings", {"next_quote_number": 1})

    assert [r["id"] for r in store.get_by_prefix("budget:")] == ["budget:1", "budget:2"]
    assert [r["id"] for r in store.get_by_prefix("order:")] == ["order:1"]


def test_mutate_uses_default_then_current_value(store):
    def bump(current):
        current["n"] = current["n"] + 1
        return current

    assert store.mutate("counter", bump, default={"n": 10}) == {"n": 11}
    assert store.mutate("counter", bump, default={"n": 10}) == {"n": 12}
    assert store.get("counter") == {"n": 12}


def test_data_survives_a_new_store_instance(tmp_path):
    path = tmp_path / "persist.db"
    EntityStore(path).set("cash:1", {"id": "cash:1", "amount": 10.0})
    assert EntityStore(path).get("cash:1") == {"id": "cash:1", "amount": 10.0}
