GLOBAL_CATEGORIES = {"Food", "Transport", "Shopping", "Bills", "Entertainment", "Health", "Other"}


def test_list_includes_seeded_global_categories(client, alice):
    resp = client.get("/api/category", headers=alice)
    assert resp.status_code == 200
    rows = resp.get_json()
    assert {r["name"] for r in rows} == GLOBAL_CATEGORIES
    assert all(r["created_by"] is None for r in rows)


def test_create_category_owned_by_caller(client, alice):
    resp = client.post("/api/category", headers=alice, json={"name": "Coffee"})
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["name"] == "Coffee"
    assert created["created_by"] is not None

    names = [r["name"] for r in client.get("/api/category", headers=alice).get_json()]
    assert "Coffee" in names


def test_duplicate_names_allowed(client, alice):
    first = client.post("/api/category", headers=alice, json={"name": "Food"}).get_json()
    second = client.post("/api/category", headers=alice, json={"name": "Food"}).get_json()
    assert first["id"] != second["id"]
    names = [r["name"] for r in client.get("/api/category", headers=alice).get_json()]
    assert names.count("Food") == 3


def test_other_users_categories_hidden(client, alice, bob):
    client.post("/api/category", headers=alice, json={"name": "Alice only"})
    names = {r["name"] for r in client.get("/api/category", headers=bob).get_json()}
    assert "Alice only" not in names
    assert names == GLOBAL_CATEGORIES


def test_create_requires_name(client, alice):
    resp = client.post("/api/category", headers=alice, json={"name": "   "})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Required fields are missing."


def test_requires_token(client):
    assert client.get("/api/category").status_code == 401
    assert client.post("/api/category", json={"name": "x"}).status_code == 401


def test_create_rejects_non_string_name(client, alice):
    for body in ({"name": 123}, {"name": ["Food"]}, ["Food"]):
        resp = client.post("/api/category", headers=alice, json=body)
        assert resp.status_code == 400, body
        assert resp.get_json()["message"] == "The request contains invalid data."
