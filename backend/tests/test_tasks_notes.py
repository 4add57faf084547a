from test_schedule_routes import seed_schedule


def create_task(client, schedule, **overrides):
    payload = {
        "teacher_id": schedule["teacher_id"],
        "schedule_id": schedule["id"],
        "weekday": 2,
        "time_slot": 3,
        "title": "准备实验器材",
        "task_type": "course",
        "priority_level": "medium",
    }
    payload.update(overrides)
    return client.post("/api/tasks/", json=payload)


def test_course_tasks_are_listed_per_cell(client):
    schedule = seed_schedule(client)
    assert create_task(client, schedule).status_code == 201
    urgent = create_task(client, schedule, title="批改作业", priority_level="high")
    assert urgent.status_code == 201
    assert create_task(client, schedule, weekday=3, title="别的课").status_code == 201

    cell = client.get(f"/api/tasks/course/{schedule['id']}/2/3")

    assert cell.status_code == 200
    assert [item["title"] for item in cell.json()] == ["批改作业", "准备实验器材"]
    assert all(item["status"] == "pending" for item in cell.json())


def test_course_task_needs_a_cell(client):
    schedule = seed_schedule(client)
    response = create_task(client, schedule, weekday=None)
    assert response.status_code == 422


def test_task_unknown_teacher(client):
    schedule = seed_schedule(client)
    response = create_task(client, schedule, teacher_id=999)
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_task_stats_and_completion(client):
    schedule = seed_schedule(client)
    first = create_task(client, schedule, priority_level="high").json()
    create_task(client, schedule, title="general", task_type="general", weekday=None, time_slot=None)

    done = client.put(f"/api/tasks/{first['id']}", json={"status": "completed"})
    assert done.status_code == 200
    assert done.json()["status"] == "completed"

    stats = client.get(f"/api/tasks/teacher/{schedule['teacher_id']}/stats").json()
    assert stats == {"total": 2, "pending": 1, "completed": 1, "high": 0}

    pending = client.get(f"/api/tasks/teacher/{schedule['teacher_id']}", params={"status": "pending"}).json()
    assert [item["title"] for item in pending] == ["general"]

    assert client.delete(f"/api/tasks/{first['id']}").status_code == 200
    assert client.delete(f"/api/tasks/{first['id']}").status_code == 404


def test_weekly_note_upsert(client):
    schedule = seed_schedule(client)
    path = f"/api/weekly-notes/{schedule['teacher_id']}/{schedule['id']}/2024/38"

    empty = client.get(path)
    assert empty.status_code == 200
    assert empty.json()["content"] == ""
    assert empty.json()["id"] is None

    body = {
        "teacher_id": schedule["teacher_id"],
        "schedule_id": schedule["id"],
        "year": 2024,
        "week_number": 38,
        "content": "# 本周\n- 期中考试",
    }
    first = client.post("/api/weekly-notes/", json=body)
    assert first.status_code == 200
    second = client.post("/api/weekly-notes/", json={**body, "content": "改过了"})
    assert second.json()["id"] == first.json()["id"]

    assert client.get(path).json()["content"] == "改过了"


def test_weekly_note_schedule_must_belong_to_teacher(client):
    schedule = seed_schedule(client)
    other = seed_schedule(client, teacher_name="李老师")
    response = client.post(
        "/api/weekly-notes/",
        json={
            "teacher_id": other["teacher_id"],
            "schedule_id": schedule["id"],
            "year": 2024,
            "week_number": 38,
            "content": "x",
        },
    )
    assert response.status_code == 404
