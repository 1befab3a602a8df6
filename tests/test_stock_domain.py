from gorder.stock.domain import ExceedStockError, StockNotFoundError, StockShortage


def test_not_found_message_lists_missing_ids():
    err = StockNotFoundError(["a", "b"])
    assert str(err) == "not found in stock: a,b"
    assert err.missing == ["a", "b"]


def test_not_found_is_lookup_error():
    err = StockNotFoundError(["x"])
    assert isinstance(err, LookupError)
    assert str(err) == "not found in stock: x"
    assert err.missing == ["x"]


def test_exceed_stock_message_single():
    err = ExceedStockError([StockShortage(id="p1", want=5, have=2)])
    assert str(err) == "not enough stock for [product_id=p1, want 5, have 2]"


def test_exceed_stock_message_joins_entries():
    err = ExceedStockError(
        [StockShortage(id="p1", want=5, have=2), StockShortage(id="p2", want=3, have=0)]
    )
    assert str(err) == (
        "not enough stock for [product_id=p1, want 5, have 2,product_id=p2, want 3, have 0]"
    )
    assert [s.id for s in err.failed_on] == ["p1", "p2"]


def test_exceed_stock_message_empty():
    assert str(ExceedStockError([])) == "not enough stock for []"