import pytest


def _issue(client, user_id, rm_id, qty):
    r = client.post("/api/raw-material-transfers", json={
        "user_id": user_id,
        "items": [{"raw_material_id": rm_id, "quantity_issued": qty}],
    })
    return r


def _stock(client, rm_id):
    return float(client.get(f"/api/raw-materials/{rm_id}").json()["quantity"])


def _held(client, user_id, rm_id):
    rows = client.get("/api/user-inventory", params={"user_id": user_id}).json()
    return sum(float(r["quantity"]) for r in rows if r["raw_material_id"] == rm_id)


@pytest.fixture()
def setup(make_user, make_raw_material):
    return make_user(), make_raw_material(quantity=100)


def test_issue_deducts_main_stock(client, setup):
    user, rm = setup
    r = _issue(client, user["id"], rm["id"], 30)
    assert r.status_code == 201, r.text
    t = r.json()[0]
    assert t["status"] == "SENT"
    assert float(t["quantity_issued"]) == 30
    assert _stock(client, rm["id"]) == 70
    assert _held(client, user["id"], rm["id"]) == 0


def test_issue_checks_every_item_before_writing(client, setup, make_raw_material):
    user, rm = setup
    glaze = make_raw_material(name="Glaze", quantity=5, unit="ltr")
    r = client.post("/api/raw-material-transfers", json={
        "user_id": user["id"],
        "items": [
            {"raw_material_id": rm["id"], "quantity_issued": 10},
            {"raw_material_id": glaze["id"], "quantity_issued": 8},
        ],
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "Insufficient stock for Glaze. Available: 5, Requested: 8"
    assert _stock(client, rm["id"]) == 100
    assert client.get("/api/raw-material-transfers").json() == []


def test_issue_to_unknown_user(client, make_raw_material):
    rm = make_raw_material()
    r = _issue(client, 999, rm["id"], 1)
    assert r.status_code == 404


def test_used_moves_stock_to_user(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "USED"})
    assert r.status_code == 200, r.text
    assert float(r.json()["quantity_approved"]) == 30
    assert _held(client, user["id"], rm["id"]) == 30
    assert _stock(client, rm["id"]) == 70


def test_partial_return_then_repair(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]

    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={
        "status": "RETURNED",
        "return_quantity": 10,
        "rejection_reason": "Cracked",
        "rejection_images": ["img/1.jpg"],
    })
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["rejection_type"] == "PARTIAL"
    assert float(body["quantity_approved"]) == 20
    assert float(body["quantity_rejected"]) == 10
    assert body["rejection_images"] == ["img/1.jpg"]
    assert _held(client, user["id"], rm["id"]) == 20
    assert _stock(client, rm["id"]) == 70

    assert client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "REPAIRING"}).status_code == 200
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "FINISHED"})
    assert r.status_code == 200
    assert _stock(client, rm["id"]) == 80
    assert _held(client, user["id"], rm["id"]) == 20


def test_full_return_written_off(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "RETURNED"})
    assert r.json()["rejection_type"] == "FULL"
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "UNUSED"})
    assert r.status_code == 200
    assert r.json()["rejection_reason"] == "Product is too damaged"
    assert _stock(client, rm["id"]) == 70
    assert _held(client, user["id"], rm["id"]) == 0


def test_return_more_than_issued(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "RETURNED", "return_quantity": 31})
    assert r.status_code == 400
    assert client.get(f"/api/raw-material-transfers/{t['id']}").json()["status"] == "SENT"


def test_cancel_restores_stock(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "CANCELLED"})
    assert r.status_code == 200
    assert _stock(client, rm["id"]) == 100


def test_invalid_transition_is_conflict(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "USED"})
    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "RETURNED"})
    assert r.status_code == 409
    assert r.json()["detail"] == "Cannot change status from USED to RETURNED"
    assert _held(client, user["id"], rm["id"]) == 30


def test_delete_reverses_held_stock(client, setup):
    user, rm = setup
    sent = _issue(client, user["id"], rm["id"], 10).json()[0]
    used = _issue(client, user["id"], rm["id"], 20).json()[0]
    client.put(f"/api/raw-material-transfers/{used['id']}", json={"status": "USED"})
    assert _stock(client, rm["id"]) == 70

    assert client.delete(f"/api/raw-material-transfers/{sent['id']}").status_code == 200
    assert _stock(client, rm["id"]) == 80
    assert client.delete(f"/api/raw-material-transfers/{used['id']}").status_code == 200
    assert _stock(client, rm["id"]) == 100
    assert _held(client, user["id"], rm["id"]) == 0


def test_stock_summary(client, setup):
    user, rm = setup
    _issue(client, user["id"], rm["id"], 10)
    used = _issue(client, user["id"], rm["id"], 5).json()[0]
    client.put(f"/api/raw-material-transfers/{used['id']}", json={"status": "USED"})

    rows = client.get("/api/raw-materials/stock").json()
    row = next(r for r in rows if r["id"] == rm["id"])
    assert float(row["available"]) == 85
    assert float(row["sent_to_users"]) == 10
    assert float(row["used"]) == 5


def test_delete_returned_restores_both_parts(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "RETURNED", "return_quantity": 10})
    assert _held(client, user["id"], rm["id"]) == 20
    assert _stock(client, rm["id"]) == 70

    assert client.delete(f"/api/raw-material-transfers/{t['id']}").status_code == 200
    assert _held(client, user["id"], rm["id"]) == 0
    assert _stock(client, rm["id"]) == 100


def test_delete_repairing_restores_both_parts(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "RETURNED", "return_quantity": 12})
    client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "REPAIRING"})

    assert client.delete(f"/api/raw-material-transfers/{t['id']}").status_code == 200
    assert _held(client, user["id"], rm["id"]) == 0
    assert _stock(client, rm["id"]) == 100


def test_repairing_written_off(client, setup):
    user, rm = setup
    t = _issue(client, user["id"], rm["id"], 30).json()[0]
    client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "RETURNED", "return_quantity": 10})
    client.put(f"/api/raw-material-transfers/{t['id']}", json={"status": "REPAIRING"})

    r = client.put(f"/api/raw-material-transfers/{t['id']}", json={
        "status": "UNUSED", "rejection_reason": "Beyond repair",
    })
    assert r.status_code == 200, r.text
    assert r.json()["rejection_reason"] == "Beyond repair"
    assert _stock(client, rm["id"]) == 70
    assert _held(client, user["id"], rm["id"]) == 20

    # written-off rows hold nothing, so deleting moves no stock
    assert client.delete(f"/api/raw-material-transfers/{t['id']}").status_code == 200
    assert _stock(client, rm["id"]) == 70
    assert _held(client, user["id"], rm["id"]) == 20
