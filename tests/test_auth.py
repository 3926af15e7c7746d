import hashlib

from ridehail.config import settings
from ridehail.models.base import new_id
from ridehail.models.user import User, UserRole

from conftest import PASSWORD, register_customer


def test_register_sets_session_cookie_and_returns_public_user(anon):
    r = anon.post("/auth/register/customer", json={
        "email": "alice@example.com", "password": PASSWORD, "name": "Alice", "phone": "+375291112233",
    })
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["role"] == "customer"
    assert set(user) == {"id", "email", "name", "role", "phone"}

    cookie = r.headers["set-cookie"]
    assert cookie.startswith(f"{settings.COOKIE_NAME}=")
    assert "HttpOnly" in cookie
    assert "Path=/" in cookie
    assert "samesite=lax" in cookie.lower()
    assert "Secure" not in cookie
    assert "expires" not in cookie.lower() and "max-age" not in cookie.lower()

    assert anon.get("/auth/me").json() == user


def test_cookie_is_secure_behind_tls_proxy(anon):
    r = anon.post(
        "/auth/register/customer",
        json={"email": "s@example.com", "password": PASSWORD, "name": "S", "phone": "1"},
        headers={"X-Forwarded-Proto": "https"},
    )
    assert "Secure" in r.headers["set-cookie"]


def test_password_is_stored_salted(store, anon):
    register_customer(anon)
    stored = store.read().users[0].password_hash
    assert stored.startswith("$pbkdf2-sha256$")
    assert stored != hashlib.sha256(PASSWORD.encode()).hexdigest()


def test_register_requires_all_fields(anon):
    r = anon.post("/auth/register/customer", json={"email": "x@example.com", "password": PASSWORD})
    assert r.status_code == 400
    assert r.json() == {"message": "Некорректные данные"}


def test_register_without_body_is_400(anon):
    assert anon.post("/auth/register/customer").status_code == 400


def test_customer_email_is_unique(make_client):
    register_customer(make_client())
    r = make_client().post("/auth/register/customer", json={
        "email": "alice@example.com", "password": PASSWORD, "name": "Other", "phone": "2",
    })
    assert r.status_code == 409


def test_login_and_logout(make_client):
    register_customer(make_client())
    client = make_client()

    r = client.post("/auth/login", json={"email": "alice@example.com", "password": PASSWORD, "role": "customer"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "alice@example.com"
    assert client.get("/auth/me").status_code == 200

    r = client.post("/auth/logout")
    assert r.json() == {"ok": True}
    assert "max-age=0" in r.headers["set-cookie"].lower()
    assert client.get("/auth/me").status_code == 401


def test_login_failures(make_client):
    register_customer(make_client())
    client = make_client()

    bad_password = {"email": "alice@example.com", "password": "wrong-pass", "role": "customer"}
    wrong_role = {"email": "alice@example.com", "password": PASSWORD, "role": "driver"}
    unknown_role = {"email": "alice@example.com", "password": PASSWORD, "role": "admin"}
    for body in (bad_password, wrong_role, unknown_role):
        r = client.post("/auth/login", json=body)
        assert r.status_code == 401
        assert r.json() == {"message": "Неверный email или пароль"}

    assert client.post("/auth/login", json={"email": "alice@example.com"}).status_code == 400


def test_legacy_sha256_hash_still_logs_in_and_is_upgraded(store, anon):
    legacy = hashlib.sha256(PASSWORD.encode()).hexdigest()
    with store.transaction() as db:
        db.users.append(User(
            id=new_id(), email="old@example.com", name="Old", role=UserRole.CUSTOMER,
            phone="1", password_hash=legacy,
        ))

    r = anon.post("/auth/login", json={"email": "old@example.com", "password": PASSWORD, "role": "customer"})
    assert r.status_code == 200

    upgraded = store.read().users[0].password_hash
    assert upgraded != legacy
    assert upgraded.startswith("$pbkdf2-sha256$")


def test_same_email_may_be_customer_and_driver(customer, driver_factory):
    _, alice = customer
    _, alice_driver = driver_factory(email=alice["email"])
    assert alice_driver["role"] == "driver"
    assert alice_driver["id"] != alice["id"]


def test_manager_login_me_logout(store, make_client):
    with store.transaction() as db:
        from ridehail.models.user import Manager
        db.managers.append(Manager(id="m1", login="root", name="Root", password=PASSWORD))

    client = make_client()
    assert client.post("/manager/login", json={"login": "root", "password": "nope-nope"}).status_code == 401
    assert client.post("/manager/login", json={"login": "root"}).status_code == 400

    r = client.post("/manager/login", json={"login": "root", "password": PASSWORD})
    assert r.status_code == 200
    assert r.json() == {"manager": {"id": "m1", "login": "root", "name": "Root"}}
    assert r.headers["set-cookie"].startswith(f"{settings.MANAGER_COOKIE_NAME}=")

    # открытый пароль из сид-данных заменён хэшем
    stored = store.read().managers[0]
    assert stored.password is None and stored.password_hash

    assert client.get("/manager/me").json()["login"] == "root"
    client.post("/manager/logout")
    assert client.get("/manager/me").status_code == 401
