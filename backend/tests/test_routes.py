"""
HTTP surface tests: login, role checks, store scoping and the order flows.

Uses the Flask test client against the in-memory SQLite app.
"""

import pytest

from conftest import STORE_A_PASSWORD, STORE_B_PASSWORD, login, order_payload


HUB_PASSWORD = "hub-secret"


def create_order(client, **overrides):
    response = client.post('/api/orders', json=order_payload(**overrides))
    assert response.status_code == 201, response.get_json()
    return response.get_json()["order"]


class TestAuth:
    def test_store_login(self, client, store_a):
        response = login(client, STORE_A_PASSWORD)
        assert response.status_code == 200
        assert response.get_json() == {"role": "store", "store_id": store_a.id, "store_name": "Store A"}

        current = client.get('/api/auth/current').get_json()
        assert current["store_id"] == store_a.id

    def test_hub_login(self, client, store_a):
        response = login(client, HUB_PASSWORD)
        assert response.status_code == 200
        assert response.get_json()["role"] == "hub"

    def test_wrong_password(self, client, store_a):
        assert login(client, "guess-again").status_code == 401

    def test_logout_clears_session(self, client, store_a):
        login(client, STORE_A_PASSWORD)
        client.post('/api/auth/logout')
        assert client.get('/api/orders').status_code == 401

    def test_orders_require_login(self, client, db_session):
        assert client.get('/api/orders').status_code == 401

    def test_create_store_needs_admin_password(self, client, db_session):
        bad = client.post('/api/auth/stores', json={
            "name": "New Store", "password": "secret1", "admin_password": "nope",
        })
        assert bad.status_code == 401

        good = client.post('/api/auth/stores', json={
            "name": "New Store", "password": "secret1", "admin_password": "admin-secret",
        })
        assert good.status_code == 201
        names = [s["name"] for s in client.get('/api/auth/stores').get_json()]
        assert names == ["New Store"]


class TestIntake:
    def test_create_and_fetch(self, client, store_a, notifications):
        login(client, STORE_A_PASSWORD)
        order = create_order(client)
        assert order["serial_number"] == "LW01"
        assert order["status"] == "submitted"
        assert order["pricing"]["balance_due"] == 0

        fetched = client.get(f'/api/orders/{order["id"]}').get_json()
        assert fetched["id"] == order["id"]

        assert client.get('/api/orders/next-serial').get_json() == {"serial_number": "LW02"}

    def test_validation_error_is_400(self, client, store_a):
        login(client, STORE_A_PASSWORD)
        response = client.post('/api/orders', json=order_payload(customer_name=""))
        assert response.status_code == 400

    def test_duplicate_supplied_serial_is_409(self, client, store_a, notifications):
        login(client, STORE_A_PASSWORD)
        create_order(client, serial_number="LW09")
        response = client.post('/api/orders', json=order_payload(serial_number="LW09"))
        assert response.status_code == 409

    def test_hub_cannot_take_intake(self, client, store_a):
        login(client, HUB_PASSWORD)
        assert client.post('/api/orders', json=order_payload()).status_code == 403

    def test_intake_sends_whatsapp(self, client, app, store_a, notifications):
        login(client, STORE_A_PASSWORD)
        order = create_order(client)
        app.extensions["repairtrack"].dispatcher.flush(timeout=5)
        assert order["serial_number"] in notifications.messages_to("9876543210")[0]


class TestLifecycleRoutes:
    @pytest.fixture
    def order(self, client, store_a, notifications):
        login(client, STORE_A_PASSWORD)
        return create_order(client)

    def test_advance_and_boundary(self, client, order):
        response = client.post(f'/api/orders/{order["id"]}/advance', json={"direction": "prev"})
        assert response.status_code == 409

        response = client.post(f'/api/orders/{order["id"]}/advance', json={"direction": "next"})
        assert response.status_code == 200
        assert response.get_json()["order"]["status"] == "shipped"

    def test_invalid_status_is_400(self, client, order):
        response = client.put(f'/api/orders/{order["id"]}/status', json={"status": "lost"})
        assert response.status_code == 400

    def test_completion_flow(self, client, order):
        premature = client.put(f'/api/orders/{order["id"]}/completion', json={"completed": True})
        assert premature.status_code == 409

        client.put(f'/api/orders/{order["id"]}/status', json={"status": "in_store"})
        done = client.put(f'/api/orders/{order["id"]}/completion', json={"completed": True})
        assert done.status_code == 200

        assert client.get('/api/orders').get_json() == []
        completed = client.get('/api/orders/completed').get_json()
        assert [o["id"] for o in completed] == [order["id"]]

    def test_price_and_balance(self, client, order):
        client.put(f'/api/orders/{order["id"]}/price', json={"price": 375})
        client.put(f'/api/orders/{order["id"]}/balance-payment', json={"amount": 175, "method": "cash"})
        summary = client.get(f'/api/orders/{order["id"]}/summary').get_json()
        assert summary["total_price"] == 375
        assert summary["balance_due"] == 200

    def test_negative_price_is_400(self, client, order):
        response = client.put(f'/api/orders/{order["id"]}/price', json={"price": -5})
        assert response.status_code == 400

    def test_hub_price_only_for_hub(self, client, order):
        response = client.put(f'/api/orders/{order["id"]}/hub-price', json={"price": 100})
        assert response.status_code == 403

        login(client, HUB_PASSWORD)
        response = client.put(f'/api/orders/{order["id"]}/hub-price', json={"price": 100})
        assert response.status_code == 200
        assert response.get_json()["order"]["hub_price"] == 100

    def test_board(self, client, order):
        board = client.get('/api/orders/board').get_json()
        assert board["stages"][0] == "submitted"
        assert [o["id"] for o in board["columns"]["submitted"]] == [order["id"]]

    def test_missing_order_is_404(self, client, order):
        assert client.get('/api/orders/not-a-real-id').status_code == 404


class TestStoreScoping:
    def test_other_store_sees_404(self, client, store_a, store_b, notifications):
        login(client, STORE_A_PASSWORD)
        order = create_order(client)

        login(client, STORE_B_PASSWORD)
        assert client.get(f'/api/orders/{order["id"]}').status_code == 404
        assert client.put(f'/api/orders/{order["id"]}/price', json={"price": 1}).status_code == 404
        assert client.get('/api/orders').get_json() == []

    def test_bulk_status_reports_foreign_ids(self, client, store_a, store_b, notifications):
        login(client, STORE_A_PASSWORD)
        mine = create_order(client)
        login(client, STORE_B_PASSWORD)
        theirs = create_order(client)

        response = client.post('/api/orders/bulk-status', json={
            "order_ids": [theirs["id"], mine["id"], "missing"],
            "status": "shipped",
        })
        body = response.get_json()
        assert response.status_code == 200
        assert body["succeeded"] == [theirs["id"]]
        assert sorted(body["failed"]) == sorted([mine["id"], "missing"])

    def test_bulk_status_needs_list(self, client, store_a):
        login(client, STORE_A_PASSWORD)
        response = client.post('/api/orders/bulk-status', json={"order_ids": "abc", "status": "shipped"})
        assert response.status_code == 400

    @pytest.mark.parametrize("password", [STORE_A_PASSWORD, HUB_PASSWORD])
    def test_bulk_status_rejects_non_string_ids(self, client, store_a, password):
        login(client, password)
        response = client.post('/api/orders/bulk-status', json={"order_ids": [{"id": 1}], "status": "shipped"})
        assert response.status_code == 400
        assert response.get_json()["error"] == "order_ids must be a list of strings"

    def test_hub_sees_all_stores(self, client, store_a, store_b, notifications):
        login(client, STORE_A_PASSWORD)
        create_order(client)
        login(client, STORE_B_PASSWORD)
        create_order(client)

        login(client, HUB_PASSWORD)
        assert len(client.get('/api/orders').get_json()) == 2
        assert len(client.get(f'/api/orders?store_id={store_a.id}').get_json()) == 1


class TestCatalogAndGroups:
    def test_catalog_crud(self, client, store_a):
        login(client, STORE_A_PASSWORD)
        created = client.post('/api/catalog/complaints', json={"description": "Dye Job", "default_price": 200})
        assert created.status_code == 201
        entry_id = created.get_json()["id"]

        listed = client.get('/api/catalog/complaints').get_json()
        assert [e["description"] for e in listed] == ["Dye Job"]

        assert client.delete(f'/api/catalog/complaints/{entry_id}').status_code == 200
        assert client.delete(f'/api/catalog/complaints/{entry_id}').status_code == 404
        assert client.get('/api/catalog/materials').status_code == 404

    def test_group_expense_split(self, client, store_a, notifications):
        login(client, STORE_A_PASSWORD)
        a = create_order(client, total_price=200)
        b = create_order(client, total_price=300)

        group = client.post('/api/groups', json={"name": "Batch", "order_ids": [a["id"], b["id"]]})
        assert group.status_code == 201
        group_id = group.get_json()["id"]

        expense = client.post(f'/api/groups/{group_id}/expenses', json={"description": "Courier", "amount": 100})
        assert expense.status_code == 201
        assert expense.get_json()["member_totals"] == {a["id"]: 250, b["id"]: 350}

        groups = client.get('/api/groups').get_json()
        assert groups[0]["total_expenses"] == 100

    def test_group_expense_unknown_group(self, client, store_a):
        login(client, HUB_PASSWORD)
        response = client.post('/api/groups/999/expenses', json={"description": "Courier", "amount": 10})
        assert response.status_code == 404


class TestSystem:
    def test_health(self, client, db_session):
        assert client.get('/api/health').get_json()["status"] == "ok"

    def test_pipeline(self, client):
        body = client.get('/api/pipeline').get_json()
        assert body["stages"][-1] == "in_store"
        assert body["ready_stage"] == "in_store"
