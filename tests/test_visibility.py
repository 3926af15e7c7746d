from conftest import create_order


def test_customer_sees_assigned_driver(customer, driver):
    c_client, _ = customer
    d_client, d_user = driver
    order = create_order(c_client)

    # водитель ещё не назначен
    assert c_client.get(f"/customers/drivers/{d_user['id']}/public").status_code == 403

    d_client.post(f"/drivers/orders/{order['id']}/accept")
    r = c_client.get(f"/customers/drivers/{d_user['id']}/public")
    assert r.status_code == 200
    assert r.json() == {
        "id": d_user["id"],
        "name": "Bob",
        "phone": "+375297778899",
        "comfortLevel": "economy",
        "car": {"make": "Skoda", "model": "Octavia", "color": "white", "plate": "1234 AB-7"},
    }
    assert "passwordHash" not in r.text


def test_customer_keeps_access_after_finish(customer, driver):
    c_client, _ = customer
    d_client, d_user = driver
    order = create_order(c_client)
    d_client.post(f"/drivers/orders/{order['id']}/accept")
    for status in ("arrived", "in_progress", "finished"):
        d_client.post(f"/drivers/orders/{order['id']}/status", json={"status": status})

    assert c_client.get(f"/customers/drivers/{d_user['id']}/public").status_code == 200


def test_other_customer_cannot_see_driver(customer_factory, driver):
    alice, _ = customer_factory("alice@example.com")
    eve, _ = customer_factory("eve@example.com", name="Eve")
    d_client, d_user = driver
    order = create_order(alice)
    d_client.post(f"/drivers/orders/{order['id']}/accept")

    assert eve.get(f"/customers/drivers/{d_user['id']}/public").status_code == 403


def test_driver_sees_customer_only_during_ride(customer, driver):
    c_client, c_user = customer
    d_client, _ = driver
    order = create_order(c_client)
    url = f"/drivers/customers/{c_user['id']}/public"

    assert d_client.get(url).status_code == 403

    d_client.post(f"/drivers/orders/{order['id']}/accept")
    r = d_client.get(url)
    assert r.status_code == 200
    assert r.json() == {"id": c_user["id"], "name": "Alice", "phone": "+375291112233"}

    for status in ("arrived", "in_progress", "finished"):
        d_client.post(f"/drivers/orders/{order['id']}/status", json={"status": status})
    assert d_client.get(url).status_code == 403


def test_vanished_records_are_404(store, customer, driver):
    c_client, _ = customer
    d_client, d_user = driver
    order = create_order(c_client)
    d_client.post(f"/drivers/orders/{order['id']}/accept")

    with store.transaction() as db:
        ghost = db.orders[0].model_copy(update={"id": "o2", "customer_id": "ghost", "driver_id": d_user["id"]})
        db.orders.append(ghost)

    assert d_client.get("/drivers/customers/ghost/public").status_code == 404
