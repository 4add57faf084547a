from test_schedule_routes import add_course, seed_schedule


def book(client, schedule_id, specific_date, name="课后托管", edit_mode=False):
    return client.post(
        "/api/special-care/",
        json={
            "scheduleId": schedule_id,
            "specificDate": specific_date,
            "courseName": name,
            "isEditMode": edit_mode,
        },
    )


def test_special_care_shows_up_in_its_week_only(client):
    schedule = seed_schedule(client)
    in_week = book(client, schedule["id"], "2024-09-18")
    assert in_week.status_code == 201
    assert book(client, schedule["id"], "2024-09-25").status_code == 201

    week = client.get(f"/api/schedules/{schedule['id']}/week/3").json()
    assert [row["id"] for row in week["specialCare"]] == [in_week.json()["id"]]
    assert week["specialCare"][0]["time_slot"] == 9
    assert week["specialCare"][0]["weekday"] is None

    listed = client.get(f"/api/special-care/schedule/{schedule['id']}", params={"week": 3})
    assert [row["specific_date"] for row in listed.json()] == ["2024-09-18"]

    everything = client.get(f"/api/special-care/schedule/{schedule['id']}")
    assert len(everything.json()) == 2

    by_calendar = client.get("/api/calendar/week/4/special-care", params={"scheduleId": schedule["id"]})
    assert [row["specific_date"] for row in by_calendar.json()] == ["2024-09-25"]


def test_special_care_needs_a_date(client):
    schedule = seed_schedule(client)
    response = client.post("/api/special-care/", json={"scheduleId": schedule["id"], "courseName": "托管"})
    assert response.status_code == 400
    assert response.json()["details"]["missing"] == ["specificDate"]


def test_special_care_same_date_is_occupied(client):
    schedule = seed_schedule(client)
    assert book(client, schedule["id"], "2024-09-18").status_code == 201
    duplicate = book(client, schedule["id"], "2024-09-18", name="另一个")
    assert duplicate.status_code == 400


def test_special_care_update_and_delete_rules(client):
    schedule = seed_schedule(client)
    care_id = book(client, schedule["id"], "2024-09-18").json()["id"]

    updated = client.put(f"/api/special-care/{care_id}", json={"specificDate": "2024-09-19", "courseName": "托管"})
    assert updated.status_code == 200
    assert updated.json()["specific_date"] == "2024-09-19"
    assert updated.json()["course_name"] == "托管"

    denied = client.delete(f"/api/special-care/{care_id}")
    assert denied.status_code == 403

    allowed = client.delete(f"/api/special-care/{care_id}", params={"editMode": "true"})
    assert allowed.status_code == 200
    assert client.get(f"/api/special-care/schedule/{schedule['id']}").json() == []


def test_special_care_cannot_be_moved_or_deleted_as_a_course(client):
    schedule = seed_schedule(client)
    care_id = book(client, schedule["id"], "2024-09-18").json()["id"]
    course_id = add_course(client, schedule["id"], 1, 1).json()["id"]

    move = client.put(f"/api/courses/{care_id}/move", json={"weekday": 3, "timeSlot": 9})
    assert move.status_code == 400

    wrong_kind = client.delete(f"/api/courses/{care_id}")
    assert wrong_kind.status_code == 404

    also_wrong = client.delete(f"/api/special-care/{course_id}", params={"editMode": "true"})
    assert also_wrong.status_code == 404


def test_current_semester_reports_week(client):
    missing = client.get("/api/calendar/semester/current")
    assert missing.status_code == 404

    seed_schedule(client)
    current = client.get("/api/calendar/semester/current")

    assert current.status_code == 200
    assert current.json()["current_week"] == 3
    assert current.json()["total_weeks"] == 20


def test_new_current_semester_replaces_the_old_one(client):
    seed_schedule(client)
    created = client.post(
        "/api/calendar/semester",
        json={"semester_name": "2024学年第二学期", "start_date": "2025-02-17", "end_date": "2025-06-30"},
    )
    assert created.status_code == 201

    current = client.get("/api/calendar/semester/current").json()
    assert current["semester_name"] == "2024学年第二学期"
    assert current["current_week"] == 1

    bad = client.post(
        "/api/calendar/semester",
        json={"semester_name": "倒序", "start_date": "2025-06-30", "end_date": "2025-02-17"},
    )
    assert bad.status_code == 422


def test_original_special_care_changes_need_edit_mode(client):
    schedule = seed_schedule(client)
    care_id = book(client, schedule["id"], "2024-09-18", edit_mode=True).json()["id"]

    denied = client.put(f"/api/special-care/{care_id}", json={"specificDate": "2024-09-19"})
    assert denied.status_code == 403
    assert denied.json()["code"] == "permission_denied"
    original = client.get(f"/api/special-care/schedule/{schedule['id']}", params={"original": "true"}).json()
    assert [row["specific_date"] for row in original] == ["2024-09-18"]

    allowed = client.put(
        f"/api/special-care/{care_id}", params={"editMode": "true"}, json={"specificDate": "2024-09-19"}
    )
    assert allowed.status_code == 200
    assert allowed.json()["is_original"] is True
    assert allowed.json()["specific_date"] == "2024-09-19"
