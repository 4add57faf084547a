from test_schedule_routes import seed_schedule


def test_teacher_crud(client):
    created = client.post("/api/teachers/", json={"name": " 王老师 ", "email": "wang@school.com", "subject": "数学"})
    assert created.status_code == 201
    assert created.json()["name"] == "王老师"

    duplicate = client.post("/api/teachers/", json={"name": "王老师"})
    assert duplicate.status_code == 409

    updated = client.put(f"/api/teachers/{created.json()['id']}", json={"phone": "13800000000"})
    assert updated.status_code == 200
    assert updated.json()["phone"] == "13800000000"

    listed = client.get("/api/teachers/")
    assert [item["name"] for item in listed.json()] == ["王老师"]

    assert client.delete(f"/api/teachers/{created.json()['id']}").status_code == 200
    assert client.put(f"/api/teachers/{created.json()['id']}", json={"phone": "1"}).status_code == 404


def test_teacher_with_schedule_cannot_be_deleted(client):
    schedule = seed_schedule(client)
    response = client.delete(f"/api/teachers/{schedule['teacher_id']}")
    assert response.status_code == 409


def test_invalid_email_is_rejected(client):
    response = client.post("/api/teachers/", json={"name": "赵老师", "email": "not-an-email"})
    assert response.status_code == 422
