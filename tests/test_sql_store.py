import pytest

from gorder.stock.builder import StockQuery
from gorder.stock.sql_store import Expr, StockModel, StockStore


@pytest.fixture
def store():
    with StockStore() as s:
        s.create_schema()
        yield s


def _quantity(store, product_id):
    return store.get_stock_by_id(StockQuery().product_ids(product_id)).quantity


def test_create_assigns_id_and_timestamps(store):
    created = store.create(StockModel(product_id="item-1", quantity=100))
    assert created.id >= 1
    assert created.created_at is not None and created.created_at == created.updated_at
    got = store.get_stock_by_id(StockQuery().product_ids("item-1"))
    assert (got.id, got.product_id, got.quantity, got.version) == (created.id, "item-1", 100, 0)
    assert got.created_at == created.created_at


def test_batch_get_filters_by_product_id(store):
    for pid in ("a", "b", "c"):
        store.create(StockModel(product_id=pid, quantity=1))
    rows = store.batch_get_stock_by_id(StockQuery().product_ids("a", "c"))
    assert sorted(r.product_id for r in rows) == ["a", "c"]


def test_batch_get_without_match_is_empty(store):
    assert store.batch_get_stock_by_id(StockQuery().product_ids("nothing")) == []


def test_get_missing_raises(store):
    with pytest.raises(LookupError):
        store.get_stock_by_id(StockQuery().product_ids("nothing"))


def test_order_by(store):
    for pid in ("a", "c", "b"):
        store.create(StockModel(product_id=pid))
    rows = store.batch_get_stock_by_id(StockQuery().order("product_id DESC"))
    assert [r.product_id for r in rows] == ["c", "b", "a"]


def test_invalid_order_expression(store):
    with pytest.raises(ValueError):
        store.batch_get_stock_by_id(StockQuery().order("id; DROP TABLE o_stock"))


def test_versions_filter(store):
    store.create(StockModel(product_id="a", version=1))
    store.create(StockModel(product_id="b", version=2))
    rows = store.batch_get_stock_by_id(StockQuery().versions(2))
    assert [r.product_id for r in rows] == ["b"]


def test_update_with_expression(store):
    initial, taken = 100, 3
    store.create(StockModel(product_id="item-1", quantity=initial))
    changed = store.update(
        StockQuery().product_ids("item-1"), {"quantity": Expr("quantity - ?", (taken,))}
    )
    assert changed == 1
    assert _quantity(store, "item-1") == initial - taken


def test_update_respects_quantity_guard(store):
    store.create(StockModel(product_id="item-1", quantity=2))
    changed = store.update(
        StockQuery().product_ids("item-1").quantity_gt(5),
        {"quantity": Expr("quantity - ?", (5,))},
    )
    assert changed == 0
    assert _quantity(store, "item-1") == 2


def test_update_requires_conditions(store):
    store.create(StockModel(product_id="item-1", quantity=2))
    with pytest.raises(ValueError):
        store.update(StockQuery(), {"quantity": 0})


def test_update_rejects_unknown_column(store):
    store.create(StockModel(product_id="item-1"))
    with pytest.raises(ValueError):
        store.update(StockQuery().product_ids("item-1"), {"bogus": 1})


def test_transaction_rolls_back_on_error(store):
    store.create(StockModel(product_id="item-1", quantity=7))
    with pytest.raises(RuntimeError):
        with store.transaction() as tx:
            store.update(StockQuery().product_ids("item-1"), {"quantity": 0}, tx)
            raise RuntimeError("abort")
    assert _quantity(store, "item-1") == 7


def test_transaction_commits(store):
    store.create(StockModel(product_id="item-1", quantity=7))
    with store.transaction() as tx:
        store.update(StockQuery().product_ids("item-1"), {"quantity": 4, "version": 1}, tx)
    got = store.get_stock_by_id(StockQuery().product_ids("item-1"))
    assert (got.quantity, got.version) == (4, 1)


def test_data_survives_reopen(tmp_path):
    path = str(tmp_path / "stock.db")
    with StockStore(path) as first:
        first.create_schema()
        first.create(StockModel(product_id="kept", quantity=9))
    with StockStore(path) as second:
        assert _quantity(second, "kept") == 9