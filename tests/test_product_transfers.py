import pytest


def _held(client, user_id, rm_id):
    rows = client.get("/api/user-inventory", params={"user_id": user_id}).json()
    return sum(float(r["quantity"]) for r in rows if r["raw_material_id"] == rm_id)


def _product_qty(client, product_id):
    return float(client.get(f"/api/products/{product_id}").json()["quantity"])


@pytest.fixture()
def workshop(client, make_user, make_raw_material, make_product):
    user = make_user()
    clay = make_raw_material(quantity=100)
    product = make_product()
    r = client.post("/api/product-structures", json={
        "product_id": product["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_required": 2}],
    })
    assert r.status_code == 201, r.text
    r = client.post("/api/user-inventory", json={
        "user_id": user["id"], "raw_material_id": clay["id"], "quantity": 30, "action": "ADD",
    })
    assert r.status_code == 200, r.text
    return user, clay, product


def test_structure_duplicates_rejected(client, workshop):
    user, clay, product = workshop
    r = client.post("/api/product-structures", json={
        "product_id": product["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_required": 1}],
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "Some materials already exist in this product structure: Clay"


def test_requirements_scale_with_quantity(client, workshop):
    _, clay, product = workshop
    r = client.get(f"/api/products/{product['id']}/structure", params={"quantity": 5})
    assert r.status_code == 200
    mat = r.json()["required_materials"][0]
    assert float(mat["quantity_required"]) == 10


def test_transfer_needs_structure(client, make_user, make_product):
    user = make_user()
    product = make_product(name="Plain Vase")
    r = client.post("/api/product-transfers", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_sent": 1,
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "Product structure not defined"


def test_transfer_consumes_user_inventory(client, workshop):
    user, clay, product = workshop
    r = client.post("/api/product-transfers", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_sent": 5,
    })
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["status"] == "SENT"
    assert float(body["consumption"][0]["quantity_used"]) == 10
    assert _held(client, user["id"], clay["id"]) == 20
    assert _product_qty(client, product["id"]) == 0


def test_transfer_with_short_inventory(client, workshop):
    user, clay, product = workshop
    r = client.post("/api/product-transfers", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_sent": 16,
    })
    assert r.status_code == 400
    assert "Insufficient user inventory for Clay" in r.json()["detail"]
    assert _held(client, user["id"], clay["id"]) == 30


def test_receive_adds_finished_stock(client, workshop, make_user):
    user, clay, product = workshop
    admin = make_user(name="Admin", role="SUPER_ADMIN")
    t = client.post("/api/product-transfers", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_sent": 5,
    }).json()
    r = client.put(f"/api/product-transfers/{t['id']}", json={"status": "RECEIVED", "received_by": admin["id"]})
    assert r.status_code == 200, r.text
    assert r.json()["received_by"] == admin["id"]
    assert r.json()["received_at"] is not None
    assert _product_qty(client, product["id"]) == 5


def test_reject_returns_materials_to_user(client, workshop):
    user, clay, product = workshop
    t = client.post("/api/product-transfers", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_sent": 3,
    }).json()
    assert _held(client, user["id"], clay["id"]) == 24
    r = client.put(f"/api/product-transfers/{t['id']}", json={"status": "REJECTED"})
    assert r.status_code == 200
    assert _held(client, user["id"], clay["id"]) == 30
    assert _product_qty(client, product["id"]) == 0

    r = client.put(f"/api/product-transfers/{t['id']}", json={"status": "RECEIVED"})
    assert r.status_code == 409


def test_complete_from_user_inventory(client, workshop):
    user, clay, product = workshop
    r = client.post("/api/manufacturing/complete", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_produced": 4,
    })
    assert r.status_code == 200, r.text
    assert float(r.json()["product_quantity"]) == 4
    assert r.json()["transfers_used"] == []
    assert _held(client, user["id"], clay["id"]) == 22


def test_complete_from_transfers(client, workshop):
    user, clay, product = workshop
    t = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_issued": 10}],
    }).json()[0]

    r = client.post("/api/manufacturing/complete", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_produced": 5, "transfer_ids": [t["id"]],
    })
    assert r.status_code == 200, r.text
    assert r.json()["transfers_used"] == [t["id"]]
    assert _product_qty(client, product["id"]) == 5
    assert _held(client, user["id"], clay["id"]) == 30
    assert client.get(f"/api/raw-material-transfers/{t['id']}").json()["status"] == "USED"


def test_complete_transfers_must_cover_structure(client, workshop):
    user, clay, product = workshop
    t = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_issued": 4}],
    }).json()[0]
    r = client.post("/api/manufacturing/complete", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_produced": 5, "transfer_ids": [t["id"]],
    })
    assert r.status_code == 400
    assert client.get(f"/api/raw-material-transfers/{t['id']}").json()["status"] == "SENT"
    assert _product_qty(client, product["id"]) == 0


def test_cancel_returns_materials_to_user(client, workshop):
    user, clay, product = workshop
    t = client.post("/api/product-transfers", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_sent": 4,
    }).json()
    assert _held(client, user["id"], clay["id"]) == 22

    r = client.put(f"/api/product-transfers/{t['id']}", json={"status": "CANCELLED"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "CANCELLED"
    assert _held(client, user["id"], clay["id"]) == 30
    assert _product_qty(client, product["id"]) == 0


def test_complete_from_transfers_keeps_surplus_with_user(client, make_user, make_raw_material, make_product):
    user = make_user(name="Kiran")
    clay = make_raw_material(quantity=100)
    product = make_product()
    client.post("/api/product-structures", json={
        "product_id": product["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_required": 2}],
    })
    t = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_issued": 12}],
    }).json()[0]

    r = client.post("/api/manufacturing/complete", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_produced": 5, "transfer_ids": [t["id"]],
    })
    assert r.status_code == 200, r.text
    assert _held(client, user["id"], clay["id"]) == 2
    body = client.get(f"/api/raw-material-transfers/{t['id']}").json()
    assert body["status"] == "USED"
    assert body["consumed_in_manufacturing"] is True


def test_consumed_transfer_cannot_be_deleted(client, make_user, make_raw_material, make_product):
    user = make_user(name="Kiran")
    clay = make_raw_material(quantity=100)
    product = make_product()
    client.post("/api/product-structures", json={
        "product_id": product["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_required": 2}],
    })
    t = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_issued": 10}],
    }).json()[0]
    client.post("/api/manufacturing/complete", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_produced": 5, "transfer_ids": [t["id"]],
    })

    r = client.delete(f"/api/raw-material-transfers/{t['id']}")
    assert r.status_code == 409
    assert r.json()["detail"] == "Transfer was consumed by manufacturing and cannot be deleted"
    assert _held(client, user["id"], clay["id"]) == 0
    assert float(client.get(f"/api/raw-materials/{clay['id']}").json()["quantity"]) == 90
    assert _product_qty(client, product["id"]) == 5


def test_consumed_transfer_leaves_other_holdings_alone(client, workshop):
    user, clay, product = workshop
    held = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_issued": 10}],
    }).json()[0]
    client.put(f"/api/raw-material-transfers/{held['id']}", json={"status": "USED"})
    t = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [{"raw_material_id": clay["id"], "quantity_issued": 10}],
    }).json()[0]
    client.post("/api/manufacturing/complete", json={
        "user_id": user["id"], "product_id": product["id"], "quantity_produced": 5, "transfer_ids": [t["id"]],
    })
    assert _held(client, user["id"], clay["id"]) == 40

    assert client.delete(f"/api/raw-material-transfers/{t['id']}").status_code == 409
    assert _held(client, user["id"], clay["id"]) == 40
    assert float(client.get(f"/api/raw-materials/{clay['id']}").json()["quantity"]) == 80
    assert _product_qty(client, product["id"]) == 5
