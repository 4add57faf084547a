def seed_schedule(client, teacher_name="张老师"):
    teacher = client.post("/api/teachers/", json={"name": teacher_name, "email": "zhang@school.com"})
    assert teacher.status_code == 201
    current = client.get("/api/calendar/semester/current")
    if current.status_code == 404:
        semester = client.post(
            "/api/calendar/semester",
            json={"semester_name": "2024学年第一学期", "start_date": "2024-09-02", "end_date": "2025-01-17"},
        )
        assert semester.status_code == 201
    schedule = client.post(
        "/api/schedules/",
        json={"teacher_id": teacher.json()["id"], "name": f"{teacher_name}课程表"},
    )
    assert schedule.status_code == 201
    return schedule.json()


def add_course(client, schedule_id, weekday, time_slot, name="信息科技", edit_mode=False):
    return client.post(
        "/api/courses/",
        json={
            "scheduleId": schedule_id,
            "weekday": weekday,
            "timeSlot": time_slot,
            "courseName": name,
            "classroom": "505",
            "isEditMode": edit_mode,
        },
    )


def test_active_schedule_lookup_and_archive(client):
    schedule = seed_schedule(client)

    found = client.get(f"/api/schedules/teacher/{schedule['teacher_id']}")
    assert found.status_code == 200
    assert found.json()["id"] == schedule["id"]
    assert found.json()["teacher_name"] == "张老师"

    archived = client.put(f"/api/schedules/{schedule['id']}", json={"is_archived": True})
    assert archived.status_code == 200
    assert archived.json()["archived_at"] is not None

    missing = client.get(f"/api/schedules/teacher/{schedule['teacher_id']}")
    assert missing.status_code == 404
    assert missing.json()["code"] == "not_found"


def test_week_payload_shape(client):
    schedule = seed_schedule(client)
    created = add_course(client, schedule["id"], 1, 3)
    assert created.status_code == 201
    assert created.json()["isOriginal"] is False

    response = client.get(f"/api/schedules/{schedule['id']}/week/1")

    assert response.status_code == 200
    payload = response.json()
    assert payload["week"] == 1
    assert payload["weekStart"] == "2024-09-02"
    assert payload["weekEnd"] == "2024-09-06"
    assert payload["specialCare"] == []
    assert [(row["weekday"], row["time_slot"], row["course_name"]) for row in payload["regularCourses"]] == [
        (1, 3, "信息科技")
    ]


def test_week_zero_and_unknown_schedule(client):
    schedule = seed_schedule(client)

    zero = client.get(f"/api/schedules/{schedule['id']}/week/0")
    assert zero.status_code == 400
    assert zero.json()["code"] == "validation_error"

    unknown = client.get("/api/schedules/999/week/1")
    assert unknown.status_code == 404
    assert unknown.json()["details"]["resource_type"] == "Schedule"


def test_occupied_cell_and_missing_fields_are_rejected(client):
    schedule = seed_schedule(client)
    assert add_course(client, schedule["id"], 1, 3).status_code == 201

    duplicate = add_course(client, schedule["id"], 1, 3, name="数学")
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "validation_error"

    missing = client.post("/api/courses/", json={"scheduleId": schedule["id"], "courseName": "数学"})
    assert missing.status_code == 400
    assert set(missing.json()["details"]["missing"]) == {"weekday", "timeSlot"}

    special_slot = add_course(client, schedule["id"], 2, 9)
    assert special_slot.status_code == 400


def test_move_save_and_reset_over_http(client):
    schedule = seed_schedule(client)
    course_id = add_course(client, schedule["id"], 1, 3).json()["id"]

    moved = client.put(f"/api/courses/{course_id}/move", json={"weekday": 2, "timeSlot": 3, "scheduleId": schedule["id"]})
    assert moved.status_code == 200
    assert moved.json() == {"message": "Course moved", "courseId": course_id, "originalKept": False}

    no_baseline = client.post(f"/api/schedules/{schedule['id']}/reset")
    assert no_baseline.status_code == 400
    assert no_baseline.json()["code"] == "no_baseline"
    assert "save an original schedule first" in no_baseline.json()["message"]

    saved = client.post(f"/api/schedules/{schedule['id']}/save-original")
    assert saved.status_code == 200
    assert saved.json()["originalCount"] == 1
    assert saved.json()["workingCount"] == 1

    original = client.get(f"/api/schedules/{schedule['id']}/original").json()
    assert [(row["weekday"], row["time_slot"], row["is_original"]) for row in original["regularCourses"]] == [
        (2, 3, True)
    ]

    reset = client.post(f"/api/schedules/{schedule['id']}/reset")
    assert reset.status_code == 200
    week = client.get(f"/api/schedules/{schedule['id']}/week/1").json()
    assert [(row["weekday"], row["time_slot"]) for row in week["regularCourses"]] == [(2, 3)]


def test_moving_an_original_course_creates_a_working_copy(client):
    schedule = seed_schedule(client)
    original_id = add_course(client, schedule["id"], 1, 3, edit_mode=True).json()["id"]

    moved = client.put(f"/api/courses/{original_id}/move", json={"weekday": 4, "timeSlot": 1})

    assert moved.status_code == 200
    assert moved.json()["originalKept"] is True
    assert moved.json()["courseId"] != original_id
    original = client.get(f"/api/schedules/{schedule['id']}/original").json()["regularCourses"]
    assert [(row["id"], row["weekday"], row["time_slot"]) for row in original] == [(original_id, 1, 3)]


def test_deleting_original_course_requires_edit_mode(client):
    schedule = seed_schedule(client)
    original_id = add_course(client, schedule["id"], 1, 3, edit_mode=True).json()["id"]
    working_id = add_course(client, schedule["id"], 2, 3).json()["id"]

    denied = client.delete(f"/api/courses/{original_id}")
    assert denied.status_code == 403
    assert denied.json()["code"] == "permission_denied"

    assert client.delete(f"/api/courses/{working_id}").status_code == 200
    allowed = client.delete(f"/api/courses/{original_id}", params={"editMode": "true"})
    assert allowed.status_code == 200
    assert allowed.json() == {"message": "Course deleted", "changes": 1}

    gone = client.delete(f"/api/courses/{working_id}")
    assert gone.status_code == 404


def test_update_course_fields(client):
    schedule = seed_schedule(client)
    course_id = add_course(client, schedule["id"], 1, 3).json()["id"]

    updated = client.put(f"/api/courses/{course_id}", json={"courseName": "信息科技（实验）", "notes": "机房"})

    assert updated.status_code == 200
    assert updated.json()["course_name"] == "信息科技（实验）"
    assert updated.json()["notes"] == "机房"
    assert updated.json()["classroom"] == "505"


def test_original_course_changes_need_edit_mode(client):
    schedule = seed_schedule(client)
    original_id = add_course(client, schedule["id"], 1, 3, edit_mode=True).json()["id"]

    denied = client.put(f"/api/courses/{original_id}", json={"courseName": "Changed template"})
    assert denied.status_code == 403
    assert denied.json()["code"] == "permission_denied"
    original = client.get(f"/api/schedules/{schedule['id']}/original").json()["regularCourses"]
    assert [row["course_name"] for row in original] == ["信息科技"]

    allowed = client.put(
        f"/api/courses/{original_id}", params={"editMode": "true"}, json={"courseName": "Changed template"}
    )
    assert allowed.status_code == 200
    assert allowed.json()["is_original"] is True
    assert allowed.json()["course_name"] == "Changed template"


def test_history_lists_normal_mode_operations(client):
    schedule = seed_schedule(client)
    course_id = add_course(client, schedule["id"], 1, 3).json()["id"]
    client.put(f"/api/courses/{course_id}/move", json={"weekday": 1, "timeSlot": 5})
    client.post(f"/api/schedules/{schedule['id']}/save-original")

    history = client.get(f"/api/schedules/{schedule['id']}/history")

    assert history.status_code == 200
    assert [item["operation_type"] for item in history.json()] == ["save_original", "move", "add"]
    assert history.json()[1]["old_data"]["time_slot"] == 3
    assert history.json()[1]["new_data"]["time_slot"] == 5


def test_error_body_shape_for_request_validation(client):
    response = client.post("/api/courses/", json={"scheduleId": "not-a-number"})
    assert response.status_code == 422
