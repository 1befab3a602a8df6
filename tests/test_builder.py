from gorder.stock.builder import StockQuery


def test_chaining_returns_same_query():
    query = StockQuery()
    assert query.product_ids("a").versions(1).quantity_gt(2).order("id").for_update() is query
    assert query.product_id == ["a"]
    assert query.version == [1]
    assert query.quantity == [2]
    assert query.order_by == "id"
    assert query.for_update_lock is True


def test_format_arg_empty():
    assert StockQuery().format_arg() == "{}"


def test_format_arg_omits_empty_fields_in_order():
    text = StockQuery().for_update().product_ids("a").format_arg()
    assert text == '{"product_id":["a"],"for_update_lock":true}'


def test_where_empty():
    assert StockQuery().where() == ("", [])


def test_where_combines_conditions():
    sql, params = StockQuery().product_ids("a", "b").quantity_gt(3).where()
    assert sql == "product_id IN (?, ?) AND quantity >= ?"
    assert params == ["a", "b", 3]


def test_where_ids_and_versions():
    sql, params = StockQuery().ids(7).versions(4).where()
    assert sql == "id IN (?) AND version IN (?)"
    assert params == [7, 4]