import json

import pytest

from ridehail.db import Database, JsonStore
from ridehail.errors import StorageCorrupted
from ridehail.models.base import new_id
from ridehail.models.user import User, UserRole


def _user(**kw):
    data = dict(id=new_id(), email="a@b.c", name="A", role=UserRole.CUSTOMER, phone="1", password_hash="x")
    data.update(kw)
    return User(**data)


def test_missing_file_reads_as_empty_collections(store):
    db = store.read()
    assert db.users == [] and db.orders == [] and db.driver_applications == []


def test_malformed_json_is_replaced_by_empty_document(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonStore(path).read() == Database()


def test_transaction_writes_camel_case_layout(store):
    with store.transaction() as db:
        db.users.append(_user())

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert set(raw) == {"users", "drivers", "orders", "reviews", "driverApplications", "managers"}
    assert raw["users"][0]["passwordHash"] == "x"
    assert "password_hash" not in raw["users"][0]


def test_failed_transaction_leaves_file_untouched(store):
    with store.transaction() as db:
        db.users.append(_user(email="first@b.c"))

    with pytest.raises(RuntimeError):
        with store.transaction() as db:
            db.users.append(_user(email="second@b.c"))
            raise RuntimeError("boom")

    assert [u.email for u in store.read().users] == ["first@b.c"]


def test_unknown_keys_survive_a_rewrite(store):
    store.path.write_text(json.dumps({
        "users": [{"id": 7, "email": "legacy@b.c", "name": "L", "role": "customer",
                   "phone": "1", "passwordHash": "h", "avatar": "cat.png"}],
        "posts": [{"id": 1}],
    }), encoding="utf-8")

    with store.transaction() as db:
        assert db.user_by_id("7").email == "legacy@b.c"

    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["users"][0]["avatar"] == "cat.png"
    assert raw["users"][0]["id"] == "7"
    assert raw["posts"] == [{"id": 1}]


def test_ensure_exists_creates_empty_document(store):
    store.ensure_exists()
    raw = json.loads(store.path.read_text(encoding="utf-8"))
    assert raw["orders"] == [] and raw["managers"] == []


def test_invalid_record_does_not_wipe_the_store(store):
    original = json.dumps({
        "users": [{"id": "u1", "email": "a@x", "name": "A", "role": "customer",
                   "phone": "1", "passwordHash": "h"}],
        "managers": [{"id": "m1", "login": "boss", "passwordHash": "h"}],
        "reviews": [{"id": "r1", "orderId": "o1", "driverId": "d1", "customerId": "u1",
                     "rating": "five"}],
    })
    store.path.write_text(original, encoding="utf-8")

    with pytest.raises(StorageCorrupted):
        store.read()
    with pytest.raises(StorageCorrupted):
        with store.transaction() as db:
            db.users.append(_user(email="b@x"))

    assert store.path.read_text(encoding="utf-8") == original


def test_invalid_record_is_500_over_http(store, anon):
    store.path.write_text(json.dumps({"users": [{"id": "u1", "role": "ghost"}]}), encoding="utf-8")

    r = anon.post("/auth/login", json={"email": "a@x", "password": "p", "role": "customer"})
    assert r.status_code == 500
    assert r.json() == {"message": "Хранилище повреждено"}


def test_malformed_file_is_moved_aside_before_first_write(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonStore(path)

    with store.transaction() as db:
        db.users.append(_user(email="b@x"))

    [backup] = tmp_path.glob("db.json.corrupt-*")
    assert backup.read_text(encoding="utf-8") == "{not json"
    assert [u["email"] for u in json.loads(path.read_text(encoding="utf-8"))["users"]] == ["b@x"]


def test_non_object_document_reads_as_empty(tmp_path):
    path = tmp_path / "db.json"
    path.write_text("[]", encoding="utf-8")
    assert JsonStore(path).read() == Database()
