from entity_service.utils.objects import objects_equal, pick_keys


def test_pick_keys_keeps_requested_keys_that_exist() -> None:
    source = {"id": 1, "name": "widget", "price": None}

    assert pick_keys(source, ["name", "price", "missing"]) == {"name": "widget", "price": None}


def test_pick_keys_returns_a_copy() -> None:
    source = {"id": 1}
    picked = pick_keys(source, ["id"])
    picked["id"] = 2

    assert source["id"] == 1


def test_objects_equal_compares_keys_and_values() -> None:
    assert objects_equal({"a": 1, "b": "x"}, {"b": "x", "a": 1})
    assert not objects_equal({"a": 1}, {"a": 2})
    assert not objects_equal({"a": 1}, {"a": 1, "b": None})
