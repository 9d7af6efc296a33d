"""페이지 흐름 및 JSON API 테스트 (Flask test client)"""

import os
from datetime import date

from config import Config
from services import timetable_service
from services.note_service import get_note_book


# ─── 캘린더 페이지 ────────────────────────────────────────────────────────────

class TestCalendarPage:
    def test_index_redirects_to_calendar(self, client):
        resp = client.get("/")
        assert resp.status_code == 302
        assert "/calendar" in resp.headers["Location"]

    def test_renders_month(self, client):
        resp = client.get("/calendar?month=2026-04&date=2026-04-15")
        assert resp.status_code == 200
        html = resp.get_data(as_text=True)
        assert "April 2026" in html
        assert "Tasks on 15 Apr 2026" in html
        assert "text-gray-500" in html

    def test_security_headers(self, client):
        resp = client.get("/calendar")
        assert resp.headers["X-Frame-Options"] == "DENY"
        assert "Content-Security-Policy" in resp.headers

    def test_add_note_flow(self, client):
        resp = client.get("/calendar?month=2026-04&date=2026-04-15&add=1")
        assert "Add Task" in resp.get_data(as_text=True)

        resp = client.post("/calendar/notes", data={
            "date": "2026-04-15", "month": "2026-04", "text": "dentist", "action": "save",
        })
        assert resp.status_code == 302
        assert get_note_book().notes_for(date(2026, 4, 15)) == ["dentist"]

        html = client.get("/calendar?month=2026-04&date=2026-04-15").get_data(as_text=True)
        assert "dentist" in html

    def test_blank_note_is_silently_ignored(self, client):
        resp = client.post("/calendar/notes", data={"date": "2026-04-15", "text": "  ", "action": "save"})
        assert resp.status_code == 302
        assert get_note_book().notes_for(date(2026, 4, 15)) == []

    def test_edit_and_delete_note(self, client):
        get_note_book().add(date(2026, 4, 15), "old")
        html = client.get("/calendar?month=2026-04&date=2026-04-15&note=0").get_data(as_text=True)
        assert "Edit Task" in html and "Delete" in html

        client.post("/calendar/notes", data={"date": "2026-04-15", "index": "0", "text": "new", "action": "save"})
        assert get_note_book().notes_for(date(2026, 4, 15)) == ["new"]

        client.post("/calendar/notes", data={"date": "2026-04-15", "index": "0", "action": "delete"})
        assert get_note_book().note_counts() == {}

    def test_non_ascii_digit_index_falls_back_to_idle(self, client):
        get_note_book().add(date(2026, 4, 15), "keep")
        resp = client.get("/calendar", query_string={"date": "2026-04-15", "note": "\u00b2"})
        assert resp.status_code == 200
        assert "Edit Task" not in resp.get_data(as_text=True)

        resp = client.post("/calendar/notes", data={"date": "2026-04-15", "index": "\u00b2", "action": "delete"})
        assert resp.status_code == 302
        assert get_note_book().notes_for(date(2026, 4, 15)) == ["keep"]

    def test_overflow_day_can_be_selected(self, client):
        resp = client.get("/calendar?month=2026-04&date=2026-03-30&add=1")
        assert resp.status_code == 200
        client.post("/calendar/notes", data={"date": "2026-03-30", "month": "2026-04", "text": "x"})
        assert get_note_book().notes_for(date(2026, 3, 30)) == ["x"]


# ─── 할일형 시간표 페이지 ─────────────────────────────────────────────────────

class TestTimetablePage:
    def test_locked_grid_has_no_modal(self, client):
        html = client.get("/timetable?day=Mon&slot=08:00").get_data(as_text=True)
        assert "My Timetable" in html
        assert "Add Task (" not in html

    def test_add_edit_delete_task(self, client):
        html = client.get("/timetable?edit=1&day=Mon&slot=08:00").get_data(as_text=True)
        assert "Add Task (Mon @ 08:00)" in html

        resp = client.post("/timetable/tasks", data={
            "day": "Mon", "slot": "08:00", "title": "Chemistry", "comment": "", "reminder": "",
        })
        assert resp.status_code == 302
        tasks = timetable_service.fetch_tasks()
        assert [t.title for t in tasks] == ["Chemistry"]
        task_id = tasks[0].id

        html = client.get(f"/timetable?edit=1&day=Mon&slot=08:00&task_id={task_id}").get_data(as_text=True)
        assert "Edit Task (Mon @ 08:00)" in html

        client.post("/timetable/tasks", data={
            "day": "Mon", "slot": "08:00", "task_id": task_id, "title": "Chem lab", "comment": "goggles",
        })
        task = timetable_service.find_task(task_id)
        assert task.title == "Chem lab"
        assert task.comment == "goggles"

        html = client.get(f"/timetable?edit=1&confirm_delete={task_id}").get_data(as_text=True)
        assert "Confirm Delete" in html

        client.post(f"/timetable/tasks/{task_id}/delete")
        assert timetable_service.fetch_tasks() == []

    def test_unreadable_store_renders_empty_grid(self, client):
        os.makedirs(Config.STORE_FILE)
        resp = client.get("/timetable")
        assert resp.status_code == 200
        assert "My Timetable" in resp.get_data(as_text=True)

    def test_blank_title_and_bad_cell_ignored(self, client):
        client.post("/timetable/tasks", data={"day": "Mon", "slot": "08:00", "title": " "})
        client.post("/timetable/tasks", data={"day": "Sun", "slot": "08:00", "title": "x"})
        client.post("/timetable/tasks", data={"day": "Mon", "slot": "8am", "title": "x"})
        assert timetable_service.fetch_tasks() == []

    def test_slots_add_and_remove(self, client):
        client.post("/timetable/slots", data={"slot": "11:00"})
        client.post("/timetable/slots", data={"slot": "bad"})
        assert list(timetable_service.get_slot_board()) == ["08:00", "09:00", "10:00", "11:00"]
        client.post("/timetable/slots/delete", data={"slot": "08:00"})
        assert list(timetable_service.get_slot_board()) == ["09:00", "10:00", "11:00"]


# ─── 블록형 시간표 페이지 ─────────────────────────────────────────────────────

class TestBlocksPage:
    def test_add_and_edit_block(self, client):
        html = client.get("/blocks?day=Tue&slot=09:00").get_data(as_text=True)
        assert "Add Block" in html

        client.post("/blocks", data={"day": "Tue", "slot": "09:00", "subject": "History", "room": "R2"})
        blocks = timetable_service.fetch_blocks()
        assert len(blocks) == 1
        block = blocks[0]
        assert block.end_time == "10:00"

        html = client.get("/blocks?day=Tue&slot=09:00").get_data(as_text=True)
        assert "Edit Block" in html and "History" in html

        client.post(f"/blocks/{block.id}/delete")
        assert timetable_service.fetch_blocks() == []


# ─── JSON API ────────────────────────────────────────────────────────────────

class TestCalendarApi:
    def test_grid(self, client):
        data = client.get("/api/calendar/grid?month=2026-04&week_start=6").get_json()
        assert data["success"]
        assert data["title"] == "April 2026"
        assert len(data["weeks"]) == 5
        assert data["weeks"][0][0]["date"] == "2026-03-29"

    def test_invalid_week_start(self, client):
        resp = client.get("/api/calendar/grid?month=2026-04&week_start=9")
        assert resp.status_code == 400
        assert resp.get_json()["success"] is False
        assert client.get("/api/calendar/grid?week_start=abc").status_code == 400


class TestNotesApi:
    def test_crud(self, client):
        resp = client.post("/api/notes/2026-04-15", json={"text": "a"})
        assert resp.status_code == 201
        client.post("/api/notes/2026-04-15", json={"text": "b"})
        assert client.get("/api/notes/2026-04-15").get_json()["notes"] == ["a", "b"]

        resp = client.put("/api/notes/2026-04-15/1", json={"text": "B"})
        assert resp.get_json()["notes"] == ["a", "B"]

        resp = client.delete("/api/notes/2026-04-15/0")
        assert resp.get_json()["notes"] == ["B"]

    def test_errors(self, client):
        assert client.get("/api/notes/15-04-2026").status_code == 400
        assert client.post("/api/notes/2026-04-15", json={"text": " "}).status_code == 400
        assert client.post("/api/notes/2026-04-15").status_code == 400
        assert client.put("/api/notes/2026-04-15/0", json={"text": "x"}).status_code == 404
        assert client.delete("/api/notes/2026-04-15/3").status_code == 404


class TestTasksApi:
    def test_crud(self, client):
        resp = client.post("/api/tasks", json={
            "day": "Fri", "time_slot": "10:00", "title": "Review", "reminder": "2025-09-19T09:00",
        })
        assert resp.status_code == 201
        task_id = resp.get_json()["task_id"]

        tasks = client.get("/api/tasks").get_json()["tasks"]
        assert tasks[0]["reminder"] == "2025-09-19T00:00:00Z"

        resp = client.put(f"/api/tasks/{task_id}", json={"comment": "ch. 4"})
        assert resp.status_code == 200
        task = timetable_service.find_task(task_id)
        assert task.comment == "ch. 4"
        assert task.reminder == "2025-09-19T00:00:00Z"

        assert client.delete(f"/api/tasks/{task_id}").status_code == 200
        assert client.delete(f"/api/tasks/{task_id}").status_code == 404

    def test_reminder_survives_get_put_roundtrip(self, client):
        resp = client.post("/api/tasks", json={
            "day": "Mon", "time_slot": "08:00", "title": "Quiz", "reminder": "2025-09-19T09:00",
        })
        task_id = resp.get_json()["task_id"]
        before = client.get("/api/tasks").get_json()["tasks"][0]
        assert before["reminder"] == "2025-09-19T00:00:00Z"

        client.put(f"/api/tasks/{task_id}", json={"title": "Quiz", "reminder": before["reminder"]})
        after = client.get("/api/tasks").get_json()["tasks"][0]
        assert after["reminder"] == "2025-09-19T00:00:00Z"

    def test_malformed_bodies_are_rejected(self, client):
        assert client.post("/api/tasks", json=[1]).status_code == 400
        resp = client.post("/api/tasks", json={"day": "Mon", "time_slot": "08:00", "title": 42})
        assert resp.status_code == 201
        assert timetable_service.fetch_tasks()[0].title == "42"
        assert client.post("/api/timeslots", json={"slot": 930}).status_code == 400
        assert client.post("/api/notes/2026-04-15", json="text").status_code == 400

    def test_unexpected_lookup_error_is_server_error(self, client, monkeypatch):
        def broken():
            raise KeyError("title")

        monkeypatch.setattr(timetable_service, "fetch_tasks", broken)
        resp = client.get("/api/tasks")
        assert resp.status_code == 500
        assert resp.get_json()["success"] is False

    def test_validation(self, client):
        assert client.post("/api/tasks", json={"day": "Sat", "time_slot": "10:00", "title": "x"}).status_code == 400
        assert client.post("/api/tasks", json={"day": "Mon", "time_slot": "1000", "title": "x"}).status_code == 400
        assert client.post("/api/tasks", json={"day": "Mon", "time_slot": "10:00", "title": ""}).status_code == 400
        assert client.put("/api/tasks/missing", json={"title": "x"}).status_code == 404


class TestBlocksApi:
    def test_crud(self, client):
        resp = client.post("/api/blocks", json={"day": "Mon", "start_time": "08:00", "subject": "PE"})
        assert resp.status_code == 201
        block_id = resp.get_json()["block_id"]

        resp = client.put(f"/api/blocks/{block_id}", json={"teacher": "Lee"})
        assert resp.status_code == 200
        assert timetable_service.find_block(block_id).teacher == "Lee"
        assert client.put(f"/api/blocks/{block_id}", json={"subject": ""}).status_code == 400

        blocks = client.get("/api/blocks").get_json()["blocks"]
        assert blocks[0]["end_time"] == "09:00"

        assert client.delete(f"/api/blocks/{block_id}").status_code == 200
        assert client.delete(f"/api/blocks/{block_id}").status_code == 404


class TestTimeslotsApi:
    def test_add_and_remove(self, client):
        assert client.get("/api/timeslots").get_json()["slots"] == ["08:00", "09:00", "10:00"]
        resp = client.post("/api/timeslots", json={"slot": "13:00"})
        assert resp.status_code == 201
        assert resp.get_json()["slots"][-1] == "13:00"
        assert client.post("/api/timeslots", json={"slot": "13:00"}).status_code == 400
        assert client.post("/api/timeslots", json={"slot": "25:00"}).status_code == 400
        assert client.delete("/api/timeslots/13:00").status_code == 200
        assert client.delete("/api/timeslots/13:00").status_code == 404
