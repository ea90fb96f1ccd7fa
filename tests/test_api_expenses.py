def test_categories_are_public_and_seeded(client):
    r = client.get("/api/categories")
    assert r.status_code == 200
    assert r.json()[:2] == [{"id": 1, "name": "Food"}, {"id": 2, "name": "Utilities"}]
    assert len(r.json()) == 6


def test_expense_routes_require_session(client):
    assert client.get("/api/expenses").status_code == 401
    assert client.get("/api/expenses/1").status_code == 401
    assert client.get("/api/expenses/summary").status_code == 401
    assert client.post("/api/expenses", json={"category": 2, "amount": 1}).status_code == 401
    assert client.put("/api/expenses/1", json={"category": 2, "amount": 1}).status_code == 401
    assert client.delete("/api/expenses/1").status_code == 401


def test_new_user_has_no_expenses(client, signup):
    signup()
    r = client.get("/api/expenses")
    assert r.status_code == 200
    assert r.json() == []


def test_create_list_delete_cycle(client, signup):
    signup()

    r = client.post("/api/expenses", json={"category": 2, "amount": 45.50})
    assert r.status_code == 201
    expense_id = r.json()["id"]

    listed = client.get("/api/expenses").json()
    assert [e["id"] for e in listed] == [expense_id]
    assert listed[0]["category"] == 2
    assert float(listed[0]["amount"]) == 45.5

    r = client.get(f"/api/expenses/{expense_id}")
    assert r.status_code == 200
    assert r.json()["id"] == expense_id

    r = client.delete(f"/api/expenses/{expense_id}")
    assert r.status_code == 200
    assert r.json() == {"message": "Expense deleted successfully"}

    assert client.get(f"/api/expenses/{expense_id}").status_code == 404


def test_update_own_expense(client, signup):
    signup()
    expense_id = client.post("/api/expenses", json={"category": 1, "amount": "10"}).json()["id"]

    r = client.put(f"/api/expenses/{expense_id}", json={"category": 3, "amount": "12.30", "date": "2024-05-01"})
    assert r.status_code == 200
    assert r.json() == {"message": "Expense updated successfully"}

    expense = client.get(f"/api/expenses/{expense_id}").json()
    assert expense["category"] == 3
    assert float(expense["amount"]) == 12.3
    assert expense["date"] == "2024-05-01"


def test_missing_or_bad_fields_are_400(client, signup):
    signup()
    assert client.post("/api/expenses", json={"category": 2}).status_code == 400
    assert client.post("/api/expenses", json={"amount": 5}).status_code == 400
    assert client.post("/api/expenses", json={"category": 2, "amount": "lots"}).status_code == 400
    assert client.post("/api/expenses", json={"category": 2, "amount": "1.005"}).status_code == 400
    assert client.post("/api/expenses", json={"category": 42, "amount": 5}).status_code == 400
    assert client.put("/api/expenses/1", json={"category": 2}).status_code == 400


def test_foreign_expense_is_404_for_every_verb(client, signup):
    signup("alice", "a@x.com", "secret1")
    alice_expense = client.post("/api/expenses", json={"category": 1, "amount": 20}).json()["id"]
    client.post("/api/logout")

    signup("bob", "b@x.com", "secret2")
    assert client.get("/api/expenses").json() == []
    for r in (
        client.get(f"/api/expenses/{alice_expense}"),
        client.put(f"/api/expenses/{alice_expense}", json={"category": 2, "amount": 1}),
        client.delete(f"/api/expenses/{alice_expense}"),
    ):
        assert r.status_code == 404
        assert r.json() == {"detail": "Expense not found"}

    # Same answer as an id that never existed
    r = client.put("/api/expenses/99999", json={"category": 2, "amount": 1})
    assert r.status_code == 404
    assert r.json() == {"detail": "Expense not found"}

    client.post("/api/logout")
    client.post("/api/login", json={"username": "alice", "password": "secret1"})
    expense = client.get(f"/api/expenses/{alice_expense}").json()
    assert expense["category"] == 1
    assert float(expense["amount"]) == 20


def test_summary_totals(client, signup):
    signup()
    client.post("/api/expenses", json={"category": 1, "amount": "10.25"})
    client.post("/api/expenses", json={"category": 1, "amount": "4.75"})
    client.post("/api/expenses", json={"category": 6, "amount": "3"})

    summary = client.get("/api/expenses/summary").json()

    assert [(s["category"], s["count"], float(s["total"])) for s in summary] == [
        ("Food", 2, 15.0),
        ("Other", 1, 3.0),
    ]


def test_root_and_health(client):
    assert client.get("/").json()["version"] == "1.0.0"
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"


def test_out_of_range_expense_id_is_404(client, signup):
    signup()
    huge = 99999999999999999999

    assert client.get(f"/api/expenses/{huge}").status_code == 404
    assert client.put(f"/api/expenses/{huge}", json={"category": 2, "amount": 1}).status_code == 404
    assert client.delete(f"/api/expenses/{huge}").status_code == 404
    assert client.get(f"/api/expenses/-{huge}").status_code == 404
